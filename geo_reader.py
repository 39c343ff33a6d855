import ipaddress
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Protocol

import geoip2.database
import geoip2.errors


logger = logging.getLogger(__name__)

ATTRIBUTION = "IP Geolocation by DB-IP (https://db-ip.com)"

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


@dataclass
class IPInfo:
	"""Geolocation record for a single IP address."""

	ip: str
	country: str | None = None
	iso_code: str | None = None
	in_eu: bool | None = None
	city: str | None = None
	region: str | None = None
	latitude: float | None = None
	longitude: float | None = None
	timezone: str | None = None
	asn: int | None = None
	organization: str | None = None
	attribution: str = ATTRIBUTION

	def to_dict(self) -> dict:
		"""Serialize to a JSON-ready dict, dropping absent values."""
		return {
			f.name: getattr(self, f.name)
			for f in fields(self)
			if getattr(self, f.name) is not None
		}

	def filter_fields(self, names: list[str]) -> dict:
		"""Return only the requested fields.

		``names`` are expected lowercase. Unknown names are ignored, and
		``ip`` and ``attribution`` are always kept.
		"""
		wanted = set(names) & set(FILTERABLE_FIELDS)
		return {
			key: value
			for key, value in self.to_dict().items()
			if key in wanted or key in ("ip", "attribution")
		}


FILTERABLE_FIELDS = tuple(
	f.name for f in fields(IPInfo) if f.name not in ("ip", "attribution")
)


class GeoLookup(Protocol):
	"""Capability the HTTP layer needs from a geolocation backend."""

	attribution: str

	def lookup(self, ip: IPAddress) -> tuple[IPInfo | None, str | None]:
		...


class GeoReader:
	"""Resolve IPs using local DB-IP Lite databases (City + ASN).

	Readers are opened once and shared; ``geoip2`` readers are safe for
	concurrent lookups.
	"""

	attribution = ATTRIBUTION

	def __init__(self, city_db: Path | str, asn_db: Path | str | None = None) -> None:
		self._city_reader = geoip2.database.Reader(str(city_db))
		logger.info("Loaded city database from %s", city_db)

		self._asn_reader = None
		if asn_db is not None:
			if Path(asn_db).exists():
				self._asn_reader = geoip2.database.Reader(str(asn_db))
				logger.info("Loaded ASN database from %s", asn_db)
			else:
				logger.warning("ASN database not found: %s", asn_db)

	def close(self) -> None:
		self._city_reader.close()
		if self._asn_reader is not None:
			self._asn_reader.close()

	def __enter__(self) -> "GeoReader":
		return self

	def __exit__(self, *exc) -> None:
		self.close()

	def lookup(self, ip: IPAddress) -> tuple[IPInfo | None, str | None]:
		"""Resolve an IP into an IPInfo.

		Returns ``(info, None)`` on success, ``(None, "lookup_error:...")``
		when a database read fails. Addresses missing from a database only
		leave the matching fields empty.
		"""
		info = IPInfo(ip=str(ip))

		try:
			city = self._city_reader.city(ip)
		except geoip2.errors.AddressNotFoundError:
			logger.debug("City not found for IP: %s", ip)
		except Exception as e:
			logger.error("City lookup error for IP %s: %s", ip, e)
			return None, f"lookup_error:{e}"
		else:
			_apply_city(info, city)

		if self._asn_reader is None:
			return info, None

		try:
			asn = self._asn_reader.asn(ip)
		except geoip2.errors.AddressNotFoundError:
			logger.debug("ASN not found for IP: %s", ip)
		except Exception as e:
			logger.error("ASN lookup error for IP %s: %s", ip, e)
			return None, f"lookup_error:{e}"
		else:
			info.asn = asn.autonomous_system_number
			info.organization = asn.autonomous_system_organization

		return info, None


def _apply_city(info: IPInfo, city) -> None:
	country = city.country
	region = city.subdivisions.most_specific

	info.country = country.names.get("en") if country else None
	info.iso_code = country.iso_code if country else None
	info.in_eu = getattr(country, "is_in_european_union", None)
	info.city = city.city.names.get("en") if city.city else None
	info.region = region.names.get("en") if region and region.names else None
	info.latitude = city.location.latitude
	info.longitude = city.location.longitude
	info.timezone = city.location.time_zone
