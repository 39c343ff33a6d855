"""Client address resolution for requests arriving through reverse proxies."""

import ipaddress
from collections.abc import Mapping


FORWARDED_FOR_HEADER = "X-Forwarded-For"
REAL_IP_HEADER = "X-Real-IP"


def parse_ip(value: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
	"""Parse a bare IP address; None if invalid.

	IPv6 zone suffixes (``fe80::1%eth0``) are rejected.
	"""
	if "%" in value:
		return None
	try:
		return ipaddress.ip_address(value)
	except ValueError:
		return None


def _is_ip(value: str) -> bool:
	return parse_ip(value) is not None


def split_host_port(addr: str) -> str | None:
	"""Return the host part of ``host:port`` or ``[host]:port``.

	Returns None when ``addr`` carries no port, e.g. a bare IPv4 or IPv6
	address.
	"""
	if addr.startswith("["):
		end = addr.find("]")
		if end == -1 or addr[end + 1:end + 2] != ":":
			return None
		return addr[1:end]

	if addr.count(":") != 1:
		return None

	host, _, _ = addr.partition(":")
	return host


def resolve_client_ip(headers: Mapping[str, str], remote_addr: str | None) -> str:
	"""Pick the address a lookup should be made for when none was given.

	Order, first match wins:
		1. first entry of X-Forwarded-For, if it is a valid IP
		2. X-Real-IP, if it is a valid IP
		3. host part of the transport remote address, or the raw remote
		   address when it cannot be split
	"""
	forwarded = headers.get(FORWARDED_FOR_HEADER)
	if forwarded:
		first = forwarded.split(",")[0].strip()
		if _is_ip(first):
			return first

	real_ip = headers.get(REAL_IP_HEADER)
	if real_ip and _is_ip(real_ip):
		return real_ip

	remote_addr = remote_addr or ""
	host = split_host_port(remote_addr)
	if host is None:
		return remote_addr
	return host
