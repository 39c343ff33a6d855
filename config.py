# config.py

import os
from dataclasses import dataclass
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent


def _env_bool(name: str, default: bool = False) -> bool:
	"""Read a boolean value from environment variables."""
	raw = os.getenv(name)
	if raw is None:
		return default
	return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
	"""Read an integer value from environment variables."""
	raw = os.getenv(name)
	if raw is None:
		return default
	try:
		return int(raw)
	except ValueError:
		return default


def _env_path(name: str, default: Path) -> Path:
	"""Read a path value from environment variables."""
	raw = os.getenv(name)
	if not raw:
		return default
	return Path(raw)


@dataclass(frozen=True)
class Settings:
	"""Central application settings."""

	# Server
	host: str = "0.0.0.0"
	port: int = 8080
	debug: bool = False
	log_level: str = "INFO"

	# DB-IP Lite databases (MaxMind DB format)
	city_db: Path = BASE_DIR / "data" / "dbip-city-lite.mmdb"
	asn_db: Path = BASE_DIR / "data" / "dbip-asn-lite.mmdb"

	# Frontend
	static_dir: Path = BASE_DIR / "static"
	headless: bool = False


def load_settings() -> Settings:
	"""Build settings from IPLOOKUP_* environment variables."""
	defaults = Settings()
	return Settings(
		host=os.getenv("IPLOOKUP_HOST", defaults.host),
		port=_env_int("IPLOOKUP_PORT", defaults.port),
		debug=_env_bool("IPLOOKUP_DEBUG", defaults.debug),
		log_level=os.getenv("IPLOOKUP_LOG_LEVEL", defaults.log_level),
		city_db=_env_path("IPLOOKUP_CITY_DB", defaults.city_db),
		asn_db=_env_path("IPLOOKUP_ASN_DB", defaults.asn_db),
		static_dir=_env_path("IPLOOKUP_STATIC_DIR", defaults.static_dir),
		headless=_env_bool("IPLOOKUP_HEADLESS", defaults.headless),
	)


settings = load_settings()
