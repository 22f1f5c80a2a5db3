# web_capture/fetchers/static.py
"""
Static fetch strategy: a single HTTP GET whose raw body is saved as-is.
"""
from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from web_capture.config import StaticFetchConfig
from web_capture.errors import ArtifactWriteError, NetworkError
from web_capture.fetchers.throttle import HostThrottle
from web_capture.logger import LOGGER_NAME
from web_capture.models import ArtifactPath, CaptureTarget, StrategyOutcome

__all__ = ("StaticFetchStrategy",)


class StaticFetchStrategy:
    """Fetches the server's document with one request. Any HTTP status is a success."""

    name = "static"

    def __init__(
        self,
        config: Optional[StaticFetchConfig] = None,
        throttle: Optional[HostThrottle] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or StaticFetchConfig()
        self.throttle = throttle or HostThrottle(
            self.config.min_delay, self.config.random_delay, rng=rng
        )
        self.logger = logging.getLogger(LOGGER_NAME)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept-Language": self.config.accept_language,
            "Referer": self.config.referer,
        }

    async def run(self, target: CaptureTarget, out_path: ArtifactPath) -> StrategyOutcome:
        try:
            body = await self._fetch(target)
        except NetworkError as exc:
            self.logger.warning("Static fetch failed for %s: %s", target.normalized_url, exc)
            return StrategyOutcome.failure(self.name, exc)

        try:
            _write_bytes(out_path.path, body)
        except ArtifactWriteError as exc:
            self.logger.warning("Static fetch could not save %s: %s", out_path.path, exc)
            produced = frozenset({out_path}) if out_path.path.exists() else frozenset()
            return StrategyOutcome.failure(self.name, exc, produced)

        self.logger.info("HTML saved: %s", out_path.path)
        return StrategyOutcome.success(self.name, frozenset({out_path}))

    async def _fetch(self, target: CaptureTarget) -> bytes:
        await self.throttle.wait(target.hostname)
        timeout = ClientTimeout(total=self.config.timeout)
        self.logger.info("→ Request: %s", target.normalized_url)
        try:
            async with ClientSession(timeout=timeout, headers=self.headers) as session:
                async with session.get(target.normalized_url, raise_for_status=False) as resp:
                    body = await resp.read()
                    self.logger.info("← Status: %s", resp.status)
                    self.logger.info("← Server: %s", resp.headers.get("Server", ""))
                    return body
        except asyncio.TimeoutError as exc:
            raise NetworkError(
                f"Request to {target.normalized_url} timed out after {self.config.timeout}s"
            ) from exc
        except ClientError as exc:
            raise NetworkError(f"Request to {target.normalized_url} failed: {exc}") from exc
        except ValueError as exc:
            # yarl rejects some URLs (bad port, bad IDNA host) with a bare ValueError
            raise NetworkError(f"Cannot request {target.normalized_url}: {exc}") from exc


def _write_bytes(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise ArtifactWriteError(f"Cannot write {path}: {exc}") from exc
