"""Exceptions raised by the Qingping exporter."""

from typing import Optional


class QingpingError(Exception):
    """Base exception for the Qingping exporter."""

    pass


class ConfigError(QingpingError):
    """Exporter configuration is missing or invalid."""

    pass


class AuthError(QingpingError):
    """The OAuth client-credentials exchange failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TransportError(QingpingError):
    """Network-level failure talking to the API."""

    pass


class StatusError(QingpingError):
    """The API answered with a non-2xx status."""

    def __init__(self, status: int, message: str):
        super().__init__(f"{message}: HTTP {status}")
        self.status = status


class DecodeError(QingpingError):
    """The API answered with a body that is not the expected JSON."""

    pass
