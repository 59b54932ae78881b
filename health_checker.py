"""
Host Health Checker Module.

Performs single HTTP GET probes against monitored hosts using a
shared aiohttp session with per-probe timeouts.
"""

import asyncio
import time
import logging
from typing import Optional

import aiohttp

from models import ProbeResult
from config import config

logger = logging.getLogger(__name__)


def is_success_status(status_code: int) -> bool:
    """Only 2xx responses count as a healthy host."""
    return 200 <= status_code < 300


class HealthChecker:
    """
    Asynchronous HTTP prober.

    Holds one aiohttp session for its lifetime so keep-alive
    connections are reused between rounds. Use it as an async context
    manager, or call close() when done.
    """

    def __init__(self, skip_verify: Optional[bool] = None):
        self.skip_verify = config.skip_verify if skip_verify is None else skip_verify
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HealthChecker":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=False) if self.skip_verify else aiohttp.TCPConnector()
            self._session = aiohttp.ClientSession(connector=connector)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def probe(self, url: str, timeout: float) -> ProbeResult:
        """
        Probe a single URL.

        Args:
            url: The target URL.
            timeout: Total time allowed for the request, in seconds.

        Returns:
            ProbeResult with the elapsed time and outcome. Network errors,
            timeouts and non-2xx responses are reported as failures.
        """
        session = self._ensure_session()
        start_time = time.monotonic()

        try:
            timeout_config = aiohttp.ClientTimeout(total=timeout)
            async with session.get(url, timeout=timeout_config) as response:
                await response.read()
                elapsed = time.monotonic() - start_time
                if is_success_status(response.status):
                    logger.debug("Host %s healthy (%.0fms)", url, elapsed * 1000)
                    return ProbeResult(
                        url=url,
                        elapsed=elapsed,
                        success=True,
                        status_code=response.status,
                    )
                logger.debug("Host %s returned status %d", url, response.status)
                return ProbeResult(
                    url=url,
                    elapsed=elapsed,
                    status_code=response.status,
                    error=f"Non 2xx status returned: {response.status}",
                )

        except asyncio.TimeoutError:
            elapsed = time.monotonic() - start_time
            logger.debug("Host %s timed out after %.2fs", url, elapsed)
            return ProbeResult(url=url, elapsed=elapsed, error=f"Timed out after {timeout:g}s")

        except (aiohttp.ClientError, OSError) as e:
            elapsed = time.monotonic() - start_time
            logger.debug("Host %s failed: %s", url, str(e))
            return ProbeResult(url=url, elapsed=elapsed, error=str(e) or e.__class__.__name__)
