from unittest.mock import MagicMock

import pytest

from app import create_app
from config import Settings
from geo_reader import ATTRIBUTION, IPInfo


GOOGLE_DNS = IPInfo(
	ip="8.8.8.8",
	country="United States",
	iso_code="US",
	in_eu=False,
	city="Mountain View",
	region="California",
	latitude=37.4056,
	longitude=-122.0775,
	timezone="America/Los_Angeles",
	asn=15169,
	organization="Google LLC",
)


@pytest.fixture
def record():
	return GOOGLE_DNS


@pytest.fixture
def geo_reader(record):
	"""Test double for the lookup collaborator."""
	reader = MagicMock()
	reader.attribution = ATTRIBUTION
	reader.lookup.return_value = (record, None)
	return reader


@pytest.fixture
def static_dir(tmp_path):
	(tmp_path / "index.html").write_text("<h1>IP Lookup</h1>", encoding="utf-8")
	(tmp_path / "app.js").write_text("console.log('ok');", encoding="utf-8")
	return tmp_path


@pytest.fixture
def app(geo_reader, static_dir):
	app = create_app(geo_reader, Settings(static_dir=static_dir))
	app.config.update(TESTING=True)
	return app


@pytest.fixture
def client(app):
	return app.test_client()
