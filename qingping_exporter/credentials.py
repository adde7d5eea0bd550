"""
OAuth credential management for the Qingping API.
"""

import asyncio
import logging
import math
from datetime import timedelta
from typing import Optional

import aiohttp

from .data_models import Credential, ExporterConfig
from .exceptions import AuthError
from .timezone_utils import NowFunc, utc_now

logger = logging.getLogger(__name__)

GRANT_TYPE = "client_credentials"
SCOPE = "device_full_access"


class CredentialManager:
    """Obtains and caches the bearer token used by every API request.

    The cached credential is only ever replaced through ``authenticate``,
    which ``ensure_valid`` calls when the current one is missing or expired.
    """

    def __init__(self, config: ExporterConfig, session: aiohttp.ClientSession,
                 now_func: NowFunc = utc_now):
        self.config = config
        self.session = session
        self.now_func = now_func
        self._credential: Optional[Credential] = None
        self._lock = asyncio.Lock()

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    def is_valid(self) -> bool:
        """True if a credential is cached and has not expired yet"""
        return self._credential is not None and self._credential.is_valid_at(self.now_func())

    async def authenticate(self) -> Credential:
        """Run the client-credentials exchange and cache the new token.

        Raises:
            AuthError: On transport failure, non-2xx status or a malformed
                response. The previously cached credential is kept.
        """
        form = {"grant_type": GRANT_TYPE, "scope": SCOPE}
        auth = aiohttp.BasicAuth(self.config.app_key, self.config.app_secret)

        try:
            async with self.session.post(self.config.oauth_url, data=form, auth=auth) as response:
                if not 200 <= response.status < 300:
                    raise AuthError(f"Failed to get OAuth token: HTTP {response.status}",
                                    status=response.status)
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise AuthError(f"Invalid JSON in OAuth token response: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AuthError(f"OAuth token request failed: {e!r}") from e

        if not isinstance(payload, dict):
            raise AuthError("OAuth token response is not an object")

        access_token = payload.get("access_token")
        expires_in = payload.get("expires_in")
        if not isinstance(access_token, str) or not access_token:
            raise AuthError("OAuth token response has no access_token")
        if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
            raise AuthError("OAuth token response has no numeric expires_in")
        try:
            if not math.isfinite(expires_in):
                raise AuthError(f"OAuth token response has non-finite expires_in: {expires_in}")
            expires_at = self.now_func() + timedelta(seconds=expires_in)
        except (OverflowError, ValueError) as e:
            raise AuthError(f"OAuth token expiry out of range: {expires_in}") from e

        credential = Credential(bearer_token=access_token, expires_at=expires_at)
        self._credential = credential
        logger.info(f"Obtained OAuth token, expires at {credential.expires_at.isoformat()}")
        return credential

    async def ensure_valid(self) -> Credential:
        """Return a usable credential, authenticating first if needed"""
        async with self._lock:
            if not self.is_valid():
                logger.debug("No valid OAuth token cached, authenticating")
                await self.authenticate()
            return self._credential
