"""
Air Monitor Lite exporter

Periodically synchronizes device inventory and readings from the Qingping API
into the metric surface.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta
from typing import Optional

from .api_client import QingpingClient
from .data_models import Device
from .exceptions import QingpingError
from .metrics import AirMonitorMetrics
from .timezone_utils import NowFunc, utc_now

logger = logging.getLogger(__name__)

DEVICE_MODEL = "CGDN1"
HISTORY_WINDOW = timedelta(hours=2)
DEFAULT_SYNC_INTERVAL = 30.0


class AirMonitorLiteExporter:
    """Exports Qingping Air Monitor Lite (CGDN1) readings.

    One pass fetches the inventory, then the history of each matching device
    in turn. Passes never overlap and run every ``sync_interval`` seconds
    until the stop event passed to ``run`` is set.
    """

    def __init__(self, client: QingpingClient, metrics: AirMonitorMetrics,
                 sync_interval: float = DEFAULT_SYNC_INTERVAL,
                 now_func: NowFunc = utc_now):
        self.client = client
        self.metrics = metrics
        self.sync_interval = sync_interval
        self.now_func = now_func

        # State
        self.completed_passes = 0
        self.last_success: Optional[datetime] = None

    async def run(self, stop_event: asyncio.Event):
        """Run sync passes until ``stop_event`` is set.

        The event is only checked between passes, so a pass in progress
        always finishes.
        """
        logger.info(f"Starting sync loop every {self.sync_interval}s")
        while not stop_event.is_set():
            try:
                await self.sync()
            except Exception as e:
                logger.exception(f"Unexpected error in sync pass: {e}")
            self.completed_passes += 1

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.sync_interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Sync loop stopped")

    async def sync(self) -> bool:
        """Run one synchronization pass.

        Returns:
            False if the inventory could not be fetched, True otherwise
        """
        logger.info("Starting sync pass")
        pass_started = time.monotonic()
        try:
            device_list = await self.client.list_devices()
        except QingpingError as e:
            # Nothing is published for an aborted pass, timings included
            logger.error(f"Failed to get device list: {e}")
            return False
        self.metrics.observe_phase("device_list", time.monotonic() - pass_started)

        end_time = self.now_func()
        start_time = end_time - HISTORY_WINDOW

        for device in device_list.devices:
            if device.product_code != DEVICE_MODEL:
                continue
            await self._sync_device(device, start_time, end_time)

        self.metrics.observe_phase("sync", time.monotonic() - pass_started)
        self.last_success = end_time
        logger.info("Sync pass finished")
        return True

    async def _sync_device(self, device: Device, start_time: datetime, end_time: datetime):
        self.metrics.set_device_info(device)

        fetch_started = time.monotonic()
        try:
            history = await self.client.get_history(device.mac, start_time, end_time)
        except QingpingError as e:
            logger.error(f"Failed to get data history for {device.mac}: {e}")
            return
        self.metrics.observe_phase("data_history", time.monotonic() - fetch_started)

        latest = history.latest
        if latest is None:
            logger.warning(
                f"No data available for {device.name} ({device.mac}) "
                f"between {start_time.isoformat()} and {end_time.isoformat()}"
            )
            self.metrics.mark_no_data(device.mac)
            return

        self.metrics.publish_reading(device.mac, latest)
        logger.debug(f"Published reading for {device.mac} at {latest.timestamp}")
