import logging

from flask import Blueprint, current_app, jsonify, request

from client_ip import parse_ip, resolve_client_ip


logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__)


def error_response(status: int, message: str):
	"""Build the JSON error envelope."""
	reader = current_app.extensions["geo_reader"]
	return jsonify({"error": message, "attribution": reader.attribution}), status


@bp.route("/api/ip")
def ip_lookup():
	"""Look up geolocation for the given or requesting IP.

	Query params:
		ip=<addr>       -> address to look up (defaults to the client IP)
		return=<field>  -> repeatable; restrict the response to these fields
	"""
	reader = current_app.extensions["geo_reader"]
	metrics = current_app.extensions["metrics"]

	ip_str = request.args.get("ip", "")
	if not ip_str:
		ip_str = resolve_client_ip(request.headers, request.remote_addr)

	ip = parse_ip(ip_str)
	if ip is None:
		logger.info("invalid_ip value=%r", ip_str)
		metrics.record_lookup("invalid_ip")
		return error_response(400, "Invalid IP address")

	info, err = reader.lookup(ip)
	if err:
		logger.error("lookup_failed ip=%s err=%s", ip, err)
		metrics.record_lookup("failed")
		return error_response(500, "Failed to lookup IP")
	metrics.record_lookup("ok")

	return_fields = request.args.getlist("return")
	if return_fields:
		return jsonify(info.filter_fields([f.lower() for f in return_fields]))

	return jsonify(info.to_dict())


@bp.route("/health")
def health():
	"""Simple health check endpoint."""
	return jsonify({"status": "ok"}), 200


@bp.route("/metrics")
def metrics_endpoint():
	"""Expose in-memory request and lookup counters."""
	return jsonify(current_app.extensions["metrics"].snapshot()), 200
