"""
HTTP client for the Qingping device API.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

import aiohttp

from .credentials import CredentialManager
from .data_models import DataHistory, DeviceList, ExporterConfig
from .exceptions import DecodeError, StatusError, TransportError
from .timezone_utils import NowFunc, epoch_millis, epoch_seconds, utc_now, whole_seconds

logger = logging.getLogger(__name__)

HISTORY_PAGE_LIMIT = 200
MAX_CONNECTIONS = 100

Interval = Union[timedelta, float, int]


def create_session(config: ExporterConfig) -> aiohttp.ClientSession:
    """Create the HTTP transport shared by the client and its credential manager"""
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=config.request_timeout_seconds),
        connector=aiohttp.TCPConnector(limit=MAX_CONNECTIONS, limit_per_host=MAX_CONNECTIONS),
    )


class QingpingClient:
    """Issues authenticated requests against the Qingping API.

    No request is retried here; callers decide whether and when to try again.
    """

    def __init__(self, config: ExporterConfig, session: aiohttp.ClientSession,
                 credentials: Optional[CredentialManager] = None,
                 now_func: NowFunc = utc_now):
        self.config = config
        self.session = session
        self.now_func = now_func
        self.credentials = credentials or CredentialManager(config, session, now_func=now_func)

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{path}"

    async def _request(self, method: str, path: str, *,
                       params: Optional[Dict[str, Any]] = None,
                       json_body: Optional[Dict[str, Any]] = None,
                       decode: bool = True) -> Any:
        """Send an authenticated request and return the decoded JSON body.

        Raises:
            AuthError: If no valid credential could be obtained
            TransportError: On network failure or timeout
            StatusError: On a non-2xx response
            DecodeError: If the body is not valid JSON
        """
        credential = await self.credentials.ensure_valid()
        headers = {"Authorization": f"Bearer {credential.bearer_token}"}
        url = self._url(path)

        logger.debug(f"HTTP {method} {url}")
        try:
            async with self.session.request(method, url, headers=headers,
                                            params=params, json=json_body) as response:
                if not 200 <= response.status < 300:
                    raise StatusError(response.status, f"{method} {path} failed")
                if not decode:
                    return None
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise DecodeError(f"Invalid JSON from {method} {path}: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{method} {path} failed: {e!r}") from e

    async def list_devices(self) -> DeviceList:
        """Fetch the device inventory"""
        payload = await self._request(
            "GET", "/v1/apis/devices",
            params={"timestamp": str(epoch_seconds(self.now_func()))},
        )
        try:
            return DeviceList.from_dict(payload)
        except (TypeError, ValueError, OverflowError) as e:
            raise DecodeError(f"Malformed device list: {e}") from e

    async def get_history(self, mac: str, start: datetime, end: datetime) -> DataHistory:
        """Fetch readings of one device for ``[start, end)``.

        At most ``HISTORY_PAGE_LIMIT`` readings are returned, in server order.
        """
        params = {
            "mac": mac,
            "start_time": str(epoch_seconds(start)),
            "end_time": str(epoch_seconds(end)),
            "timestamp": str(epoch_millis(self.now_func())),
            "limit": str(HISTORY_PAGE_LIMIT),
        }
        payload = await self._request("GET", "/v1/apis/devices/data", params=params)
        try:
            return DataHistory.from_dict(payload)
        except (TypeError, ValueError, OverflowError) as e:
            raise DecodeError(f"Malformed data history for {mac}: {e}") from e

    async def update_settings(self, macs: List[str], report_interval: Interval,
                              collect_interval: Interval) -> None:
        """Change report and collect intervals for the given devices.

        Intervals are sent as whole, non-negative seconds.
        """
        body = {
            "mac": list(macs),
            "report_interval": whole_seconds(report_interval),
            "collect_interval": whole_seconds(collect_interval),
            "timestamp": epoch_seconds(self.now_func()),
        }
        await self._request("PUT", "/v1/apis/devices/settings", json_body=body, decode=False)
        logger.info(f"Updated settings for {len(body['mac'])} device(s): "
                    f"report={body['report_interval']}s collect={body['collect_interval']}s")
