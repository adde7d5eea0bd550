"""
Metrics HTTP Server Module

Serves the Prometheus registry and health/readiness probes over HTTP.
"""

import logging
from typing import Optional

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from .exporter import AirMonitorLiteExporter

logger = logging.getLogger(__name__)


class MetricsHTTPServer:
    """HTTP server exposing the exporter's metrics registry"""

    def __init__(self, registry: CollectorRegistry,
                 exporter: Optional[AirMonitorLiteExporter] = None,
                 host: str = "0.0.0.0", port: int = 10803):
        self.registry = registry
        self.exporter = exporter
        self.host = host
        self.port = port
        self.app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._setup_routes()

    def _setup_routes(self):
        """Setup HTTP routes"""
        self.app.router.add_get("/metrics", self.metrics)
        self.app.router.add_get("/-/healthy", self.healthy)
        self.app.router.add_get("/-/ready", self.ready)

    async def metrics(self, request):
        """Prometheus text exposition"""
        body = generate_latest(self.registry)
        return web.Response(body=body, headers={"Content-Type": CONTENT_TYPE_LATEST})

    async def healthy(self, request):
        """Liveness probe"""
        return web.json_response({"status": "healthy"})

    async def ready(self, request):
        """Readiness probe: ready once the exporter finished its first pass"""
        if self.exporter is not None and self.exporter.completed_passes == 0:
            return web.json_response({"status": "not ready"}, status=503)
        return web.json_response({"status": "ready"})

    async def start(self):
        """Start the HTTP server"""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()

        logger.info(f"Metrics HTTP server started on http://{self.host}:{self.port}")
        logger.info(f"  - Metrics: http://{self.host}:{self.port}/metrics")

    async def stop(self):
        """Stop the HTTP server"""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        logger.info("Metrics HTTP server stopped")
