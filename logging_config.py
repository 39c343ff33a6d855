import logging
import sys

from config import settings


def setup_logging(level_name: str | None = None) -> None:
	"""Configure root logger for the service."""
	level_name = level_name or settings.log_level
	level = getattr(logging, level_name.upper(), logging.INFO)

	logging.basicConfig(
		level=level,
		format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
		stream=sys.stdout,
	)

	# Werkzeug's own access log duplicates request_completed lines
	logging.getLogger("werkzeug").setLevel(logging.WARNING)
