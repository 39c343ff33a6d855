import threading
from collections import defaultdict
from datetime import datetime, timezone
from time import time


class Metrics:
	"""In-memory request and lookup counters."""

	def __init__(self) -> None:
		self._lock = threading.Lock()
		self.total_requests = 0
		self.total_errors = 0
		self.total_success = 0
		self.path_counters = defaultdict(int)
		self.status_counters = defaultdict(int)
		self.total_latency_ms = 0.0
		self.last_request_timestamp = None

		self.lookups = 0
		self.invalid_addresses = 0
		self.lookup_failures = 0

	def record_request(self, path: str, status_code: int, duration_ms: float) -> None:
		with self._lock:
			self.total_requests += 1
			self.path_counters[path] += 1
			self.status_counters[status_code] += 1
			self.total_latency_ms += duration_ms
			self.last_request_timestamp = time()

			if 200 <= status_code < 400:
				self.total_success += 1
			else:
				self.total_errors += 1

	def record_lookup(self, outcome: str) -> None:
		"""Count a lookup attempt; ``outcome`` is ok, invalid_ip or failed."""
		with self._lock:
			if outcome == "invalid_ip":
				self.invalid_addresses += 1
				return
			self.lookups += 1
			if outcome == "failed":
				self.lookup_failures += 1

	def snapshot(self) -> dict:
		"""Return current counters as a JSON-ready dict."""
		with self._lock:
			avg_latency = (
				self.total_latency_ms / self.total_requests
				if self.total_requests > 0
				else 0.0
			)
			last_dt = None
			if self.last_request_timestamp is not None:
				last_dt = datetime.fromtimestamp(
					self.last_request_timestamp, timezone.utc
				).isoformat()

			return {
				"total_requests": self.total_requests,
				"total_success": self.total_success,
				"total_errors": self.total_errors,
				"average_latency_ms": avg_latency,
				"by_path": dict(self.path_counters),
				"by_status_code": {str(k): v for k, v in self.status_counters.items()},
				"last_request_timestamp": self.last_request_timestamp,
				"last_request_datetime": last_dt,
				"lookups": {
					"total": self.lookups,
					"failed": self.lookup_failures,
					"invalid_ip": self.invalid_addresses,
				},
			}
