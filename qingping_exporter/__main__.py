#!/usr/bin/env python3
"""
Qingping Exporter runner

Reads configuration from the environment, serves the metrics endpoint and
runs the sync loop until interrupted.
"""

import asyncio
import logging
import sys

from prometheus_client import CollectorRegistry

from .api_client import QingpingClient, create_session
from .data_models import ExporterConfig
from .exceptions import ConfigError
from .exporter import AirMonitorLiteExporter
from .http_server import MetricsHTTPServer
from .metrics import AirMonitorMetrics


def setup_logging(log_level: str = "INFO"):
    """Setup logging configuration"""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {log_level}')

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


async def main(config: ExporterConfig) -> int:
    """Main entry point"""
    logger = logging.getLogger(__name__)

    logger.info("Starting Qingping exporter...")
    logger.info(f"API: {config.base_url}")
    logger.info(f"Sync interval: {config.sync_interval_seconds}s")

    registry = CollectorRegistry()
    session = create_session(config)
    client = QingpingClient(config, session)
    exporter = AirMonitorLiteExporter(client, AirMonitorMetrics(registry),
                                      sync_interval=config.sync_interval_seconds)
    http_server = MetricsHTTPServer(registry, exporter, host=config.listen_host,
                                    port=config.listen_port)
    stop_event = asyncio.Event()

    try:
        await http_server.start()
        await exporter.run(stop_event)
    finally:
        stop_event.set()
        await http_server.stop()
        await session.close()
        logger.info("Exporter stopped")
    return 0


def run() -> int:
    try:
        config = ExporterConfig.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level)
    try:
        return asyncio.run(main(config))
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Received interrupt signal, shutting down...")
        return 0


if __name__ == "__main__":
    sys.exit(run())
