"""
Shared aiohttp plumbing for the provider clients, with per-instance rate limiting.
"""
import asyncio
from typing import Any, Dict, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout, ContentTypeError
from aiolimiter import AsyncLimiter
from loguru import logger

from courtfinder.config import PROVIDER_TIMEOUT_SECONDS, REQUESTS_PER_SECOND
from courtfinder.errors import ProviderErrorKind, ProviderRequestError, kind_for_status


class JsonHttpClient:
    """
    Small GET-only JSON client owning one aiohttp session and one rate limiter.
    Every failure surfaces as ProviderRequestError so adapters can classify it.
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout_seconds: float = PROVIDER_TIMEOUT_SECONDS,
        requests_per_second: int = REQUESTS_PER_SECOND,
        session: Optional[ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = AsyncLimiter(max_rate=requests_per_second, time_period=1.0)
        self._session = session

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=self.timeout_seconds))
        return self._session

    async def get_json(self, path: str = "", params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Send a GET request and return the parsed JSON object.

        Args:
            path: Path appended to base_url ("" for the base URL itself).
            params: Query string parameters.

        Returns:
            Parsed JSON body; must be a JSON object.
        """
        url = f"{self.base_url}/{path.lstrip('/')}" if path else self.base_url
        async with self.rate_limiter:
            session = await self._get_session()
            try:
                async with session.get(url, params=params, headers=self.headers) as resp:
                    if resp.status >= 400:
                        text = await resp.text()
                        raise ProviderRequestError(
                            kind_for_status(resp.status),
                            f"HTTP {resp.status} from {url}: {text[:200]}",
                            status=resp.status,
                        )
                    data = await resp.json()
            except ProviderRequestError:
                raise
            except asyncio.TimeoutError as e:
                raise ProviderRequestError(ProviderErrorKind.TIMEOUT, f"timed out calling {url}") from e
            except (ContentTypeError, ValueError) as e:
                raise ProviderRequestError(ProviderErrorKind.PARSE_ERROR, f"invalid JSON from {url}: {e}") from e
            except ClientError as e:
                logger.debug(f"⚠️ GET {url} failed: {e}")
                raise ProviderRequestError(ProviderErrorKind.NETWORK_ERROR, str(e)) from e

        if not isinstance(data, dict):
            raise ProviderRequestError(
                ProviderErrorKind.PARSE_ERROR, f"expected a JSON object from {url}, got {type(data).__name__}"
            )
        return data

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
