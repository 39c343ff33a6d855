import logging
import time
import uuid

from flask import Flask, g, request, send_from_directory
from werkzeug.exceptions import HTTPException

from api import bp as api_bp, error_response
from client_ip import resolve_client_ip
from config import Settings, settings as default_settings
from geo_reader import GeoLookup, GeoReader
from logging_config import setup_logging
from metrics import Metrics


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

CORS_HEADERS = {
	"Access-Control-Allow-Origin": "*",
	"Access-Control-Allow-Methods": "GET, OPTIONS",
	"Access-Control-Allow-Headers": "Accept, Content-Type",
	"Access-Control-Expose-Headers": "Link",
	"Access-Control-Max-Age": "300",
}


def create_app(geo_reader: GeoLookup, settings: Settings | None = None) -> Flask:
	"""Build the Flask app around an already opened geo reader."""
	settings = settings or default_settings

	app = Flask(__name__, static_folder=None)
	app.json.sort_keys = False
	app.extensions["geo_reader"] = geo_reader
	app.extensions["metrics"] = Metrics()

	app.register_blueprint(api_bp)
	if not settings.headless:
		_register_static(app, settings)

	@app.before_request
	def before_request():
		"""Assign a request ID and store start time for latency measurement."""
		g.request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
		g.request_start_time = time.perf_counter()

	@app.after_request
	def after_request(response):
		"""Add CORS and request ID headers, then log and count the request."""
		response.headers.update(CORS_HEADERS)
		request_id = getattr(g, "request_id", None)
		if request_id:
			response.headers[REQUEST_ID_HEADER] = request_id

		start = getattr(g, "request_start_time", None)
		duration_ms = (time.perf_counter() - start) * 1000.0 if start is not None else 0.0

		app.extensions["metrics"].record_request(
			path=request.path,
			status_code=response.status_code,
			duration_ms=duration_ms,
		)
		logger.info(
			"request_completed method=%s path=%s status=%s duration_ms=%.2f client_ip=%s request_id=%s",
			request.method,
			request.path,
			response.status_code,
			duration_ms,
			resolve_client_ip(request.headers, request.remote_addr),
			request_id,
		)
		return response

	@app.errorhandler(HTTPException)
	def handle_http_error(e):
		# Routing redirects are HTTPExceptions too
		if e.code is None or e.code < 400:
			return e
		resp, status = error_response(e.code, e.name)
		# Keep headers such as Allow on 405
		for name, value in e.get_headers():
			if name.lower() != "content-type":
				resp.headers[name] = value
		return resp, status

	@app.errorhandler(Exception)
	def handle_unexpected_error(e):
		logger.exception("Unhandled error on %s %s", request.method, request.path)
		return error_response(500, "Internal server error")

	return app


def _register_static(app: Flask, settings: Settings) -> None:
	static_dir = settings.static_dir

	@app.route("/")
	def index():
		return send_from_directory(static_dir, "index.html")

	@app.route("/<path:path>")
	def static_files(path):
		return send_from_directory(static_dir, path)


def main() -> None:
	setup_logging()
	reader = GeoReader(default_settings.city_db, default_settings.asn_db)
	app = create_app(reader)
	logger.info(
		"Starting server on %s:%s (headless=%s)",
		default_settings.host,
		default_settings.port,
		default_settings.headless,
	)
	try:
		app.run(
			host=default_settings.host,
			port=default_settings.port,
			debug=default_settings.debug,
		)
	finally:
		reader.close()


if __name__ == "__main__":
	main()
