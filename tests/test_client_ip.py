import pytest

from client_ip import resolve_client_ip, split_host_port


class TestResolveClientIP:
	"""Header and remote address precedence."""

	def test_forwarded_for_first_entry(self):
		headers = {"X-Forwarded-For": " 203.0.113.9 , 10.0.0.1, 10.0.0.2"}
		assert resolve_client_ip(headers, "10.0.0.3:5555") == "203.0.113.9"

	def test_forwarded_for_single_ipv6(self):
		headers = {"X-Forwarded-For": "2001:db8::1"}
		assert resolve_client_ip(headers, "10.0.0.3:5555") == "2001:db8::1"

	def test_forwarded_for_invalid_falls_back_to_real_ip(self):
		headers = {"X-Forwarded-For": "unknown, 203.0.113.9", "X-Real-IP": "198.51.100.4"}
		assert resolve_client_ip(headers, "10.0.0.3:5555") == "198.51.100.4"

	def test_real_ip(self):
		headers = {"X-Real-IP": "198.51.100.4"}
		assert resolve_client_ip(headers, "10.0.0.3:5555") == "198.51.100.4"

	def test_invalid_real_ip_uses_remote_addr(self):
		headers = {"X-Real-IP": "not-an-ip"}
		assert resolve_client_ip(headers, "10.0.0.3:5555") == "10.0.0.3"

	def test_no_headers_uses_remote_host(self):
		assert resolve_client_ip({}, "192.0.2.10:41234") == "192.0.2.10"

	def test_bracketed_ipv6_remote_addr(self):
		assert resolve_client_ip({}, "[2001:db8::7]:443") == "2001:db8::7"

	@pytest.mark.parametrize("remote_addr", ["192.0.2.10", "::1", "@unix-socket"])
	def test_unsplittable_remote_addr_returned_unmodified(self, remote_addr):
		assert resolve_client_ip({}, remote_addr) == remote_addr

	def test_zoned_forwarded_for_is_skipped(self):
		headers = {"X-Forwarded-For": "fe80::1%eth0", "X-Real-IP": "198.51.100.4"}
		assert resolve_client_ip(headers, "10.0.0.3:5555") == "198.51.100.4"

	def test_missing_remote_addr(self):
		assert resolve_client_ip({}, None) == ""


class TestSplitHostPort:
	def test_host_port(self):
		assert split_host_port("192.0.2.1:80") == "192.0.2.1"

	def test_bracket_without_port(self):
		assert split_host_port("[2001:db8::1]") is None

	def test_unterminated_bracket(self):
		assert split_host_port("[2001:db8::1:80") is None
