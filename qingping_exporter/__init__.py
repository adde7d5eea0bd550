"""
Qingping Exporter

Polls Qingping air monitors through the vendor cloud API and republishes
their readings as Prometheus metrics.
"""

__version__ = "1.0.0"

from .data_models import (
    Credential,
    Device,
    Reading,
    DeviceList,
    DataHistory,
    ExporterConfig
)
from .exceptions import (
    QingpingError,
    ConfigError,
    AuthError,
    TransportError,
    StatusError,
    DecodeError
)
from .credentials import CredentialManager
from .api_client import QingpingClient, create_session
from .metrics import AirMonitorMetrics
from .exporter import AirMonitorLiteExporter
from .http_server import MetricsHTTPServer

__all__ = [
    "AirMonitorLiteExporter",
    "AirMonitorMetrics",
    "QingpingClient",
    "CredentialManager",
    "MetricsHTTPServer",
    "create_session",
    "Credential",
    "Device",
    "Reading",
    "DeviceList",
    "DataHistory",
    "ExporterConfig",
    "QingpingError",
    "ConfigError",
    "AuthError",
    "TransportError",
    "StatusError",
    "DecodeError"
]
