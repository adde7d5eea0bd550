"""
Data models for the Qingping exporter.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .exceptions import ConfigError, DecodeError


def _object(info: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Nested object of an inventory entry; absent or null means empty."""
    entry = info.get(key)
    if entry is None:
        return {}
    if not isinstance(entry, dict):
        raise DecodeError(f"Device {key} is not an object: {entry!r}")
    return entry


def _value(payload: Dict[str, Any], key: str) -> Optional[float]:
    """Extract ``payload[key]["value"]`` as a float, or None."""
    entry = payload.get(key)
    if not isinstance(entry, dict):
        return None
    value = entry.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True)
class Credential:
    """A bearer token together with the moment it stops being usable"""
    bearer_token: str
    expires_at: datetime

    def is_valid_at(self, now: datetime) -> bool:
        return bool(self.bearer_token) and now < self.expires_at


@dataclass
class Device:
    """A device as reported by the inventory endpoint"""
    mac: str
    name: str = ""
    product_code: str = ""
    product_name: str = ""
    product_id: int = 0
    online: bool = False
    report_interval: int = 0
    collect_interval: int = 0
    version: str = ""

    @property
    def status_label(self) -> str:
        return "online" if self.online else "offline"

    @classmethod
    def from_dict(cls, entry: Dict[str, Any]) -> "Device":
        """Build a device from an inventory entry of the form ``{"info": {...}}``."""
        if not isinstance(entry, dict) or not isinstance(entry.get("info"), dict):
            raise DecodeError(f"Device entry has no info object: {entry!r}")

        info = entry["info"]
        product = _object(info, "product")
        status = _object(info, "status")
        setting = _object(info, "setting")

        return cls(
            mac=str(info.get("mac", "")),
            name=str(info.get("name", "")),
            product_code=str(product.get("code", "")),
            product_name=str(product.get("en_name") or product.get("name") or ""),
            product_id=int(product.get("id") or 0),
            online=not bool(status.get("offline", False)),
            report_interval=int(setting.get("report_interval") or 0),
            collect_interval=int(setting.get("collect_interval") or 0),
            version=str(info.get("version", "")),
        )


@dataclass
class Reading:
    """A single historical data point; every field is optional"""
    timestamp: Optional[float] = None
    battery: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    co2: Optional[float] = None
    pm25: Optional[float] = None
    pm10: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Reading":
        if not isinstance(payload, dict):
            raise DecodeError(f"Reading is not an object: {payload!r}")
        return cls(
            timestamp=_value(payload, "timestamp"),
            battery=_value(payload, "battery"),
            temperature=_value(payload, "temperature"),
            humidity=_value(payload, "humidity"),
            co2=_value(payload, "co2"),
            pm25=_value(payload, "pm25"),
            pm10=_value(payload, "pm10"),
        )


@dataclass
class DeviceList:
    """Inventory response"""
    total: int = 0
    devices: List[Device] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any) -> "DeviceList":
        if not isinstance(payload, dict):
            raise DecodeError("Device list response is not an object")
        devices = payload.get("devices") or []
        if not isinstance(devices, list):
            raise DecodeError("Device list response has no devices array")
        return cls(
            total=int(payload.get("total") or 0),
            devices=[Device.from_dict(entry) for entry in devices],
        )


@dataclass
class DataHistory:
    """History response, readings kept in the order the server sent them"""
    total: int = 0
    data: List[Reading] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any) -> "DataHistory":
        if not isinstance(payload, dict):
            raise DecodeError("Data history response is not an object")
        data = payload.get("data") or []
        if not isinstance(data, list):
            raise DecodeError("Data history response has no data array")
        return cls(
            total=int(payload.get("total") or 0),
            data=[Reading.from_dict(item) for item in data],
        )

    @property
    def latest(self) -> Optional[Reading]:
        """Last reading as delivered; the server is trusted to send them oldest first."""
        return self.data[-1] if self.data else None


@dataclass
class ExporterConfig:
    """Configuration for the Qingping exporter"""
    app_key: str = ""
    app_secret: str = ""
    base_url: str = "https://apis.cleargrass.com"
    oauth_url: str = "https://oauth.cleargrass.com/oauth2/token"
    sync_interval_seconds: float = 30.0
    request_timeout_seconds: float = 10.0
    listen_host: str = "0.0.0.0"
    listen_port: int = 10803
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ExporterConfig":
        """Build the configuration from ``QINGPING_*`` environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()

        app_key = env.get("QINGPING_APP_KEY", "")
        app_secret = env.get("QINGPING_APP_SECRET", "")
        if not app_key or not app_secret:
            raise ConfigError("QINGPING_APP_KEY and QINGPING_APP_SECRET are required")

        try:
            sync_interval = float(env.get("QINGPING_SYNC_INTERVAL", defaults.sync_interval_seconds))
            listen_port = int(env.get("QINGPING_LISTEN_PORT", defaults.listen_port))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e
        if sync_interval <= 0:
            raise ConfigError(f"Sync interval must be positive, got {sync_interval}")

        return cls(
            app_key=app_key,
            app_secret=app_secret,
            base_url=env.get("QINGPING_BASE_URL", defaults.base_url).rstrip("/"),
            oauth_url=env.get("QINGPING_OAUTH_URL", defaults.oauth_url),
            sync_interval_seconds=sync_interval,
            listen_host=env.get("QINGPING_LISTEN_HOST", defaults.listen_host),
            listen_port=listen_port,
            log_level=env.get("LOG_LEVEL", defaults.log_level),
        )
