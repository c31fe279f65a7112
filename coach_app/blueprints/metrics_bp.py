"""Prometheus scrape endpoint."""

from __future__ import annotations

from flask import Blueprint, Response

from ..metrics import latest_metrics

metrics_bp = Blueprint("metrics_bp", __name__)

# Scrapes are not counted as application traffic.
SCRAPE_ENDPOINT = "metrics_bp.metrics"


@metrics_bp.get("/metrics")
def metrics():
    payload, content_type = latest_metrics()
    response = Response(payload, mimetype=content_type)
    response.headers["Cache-Control"] = "no-store"
    return response
