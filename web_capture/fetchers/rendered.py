# web_capture/fetchers/rendered.py
"""
Rendered fetch strategy: drive a real browser, let the page settle, then save
the rendered markup and a full-page screenshot.

The browser itself sits behind :class:`BrowserDriver`, so the sequence can be
exercised with a fake driver.
"""
from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import AsyncContextManager, Callable, FrozenSet, Iterable, Optional, Protocol, Tuple

from web_capture.config import RenderConfig
from web_capture.errors import ArtifactWriteError, CaptureTimeout, RenderError
from web_capture.logger import LOGGER_NAME
from web_capture.models import ArtifactPath, CaptureTarget, StrategyOutcome

__all__ = ("BrowserDriver", "DriverFactory", "RenderedFetchStrategy", "SCROLL_TO_BOTTOM_JS")

SCROLL_TO_BOTTOM_JS = "window.scrollTo(0, document.body.scrollHeight)"


class BrowserDriver(Protocol):
    """Operations the rendered strategy needs from a browser automation engine.

    Implementations raise :class:`RenderError` (or :class:`CaptureTimeout`)
    for engine failures.
    """

    async def navigate(self, url: str) -> None: ...

    async def wait_for_ready(self, selector: str) -> None: ...

    async def sleep(self, seconds: float) -> None: ...

    async def evaluate_script(self, script: str) -> object: ...

    async def capture_markup(self) -> str: ...

    async def capture_screenshot(self, *, full_page: bool, quality: Optional[int]) -> bytes: ...


DriverFactory = Callable[[RenderConfig], AsyncContextManager[BrowserDriver]]


def _default_driver_factory(config: RenderConfig) -> AsyncContextManager[BrowserDriver]:
    from web_capture.fetchers.browser import PlaywrightDriver

    return PlaywrightDriver(config)


class RenderedFetchStrategy:
    """Browser capture bounded by a single hard deadline for the whole sequence."""

    name = "rendered"

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        driver_factory: Optional[DriverFactory] = None,
        atomic_writes: bool = False,
    ) -> None:
        self.config = config or RenderConfig()
        self.driver_factory = driver_factory or _default_driver_factory
        self.atomic_writes = atomic_writes
        self.logger = logging.getLogger(LOGGER_NAME)

    async def run(
        self,
        target: CaptureTarget,
        html_path: ArtifactPath,
        screenshot_path: ArtifactPath,
        rng: random.Random,
    ) -> StrategyOutcome:
        self.logger.info("Opening browser for %s, please wait…", target.normalized_url)
        render = asyncio.ensure_future(self._render(target, rng))
        try:
            done, _ = await asyncio.wait({render}, timeout=self.config.deadline)
        except asyncio.CancelledError:
            await self._abandon(render)
            raise
        if not done:
            await self._abandon(render)
            exc = CaptureTimeout(
                f"Rendering {target.normalized_url} exceeded {self.config.deadline}s deadline"
            )
            self.logger.warning("%s", exc)
            return StrategyOutcome.failure(self.name, exc)
        try:
            markup, screenshot = render.result()
        except (RenderError, CaptureTimeout) as exc:
            self.logger.warning("Rendering %s failed: %s", target.normalized_url, exc)
            return StrategyOutcome.failure(self.name, exc)

        if self.atomic_writes:
            return self._persist_atomic(markup, screenshot, html_path, screenshot_path)
        return self._persist(markup, screenshot, html_path, screenshot_path)

    async def _abandon(self, render: asyncio.Future) -> None:
        """Cancel *render* and give the browser at most ``teardown_grace`` to close."""
        render.add_done_callback(_drain)
        render.cancel()
        grace = self.config.teardown_grace
        done, _ = await asyncio.wait({render}, timeout=grace)
        if not done:
            self.logger.warning("Browser did not close within %ss, leaving it behind", grace)

    async def _render(self, target: CaptureTarget, rng: random.Random) -> Tuple[str, bytes]:
        cfg = self.config
        quality = cfg.screenshot_quality if cfg.screenshot_format == "jpeg" else None
        async with self.driver_factory(cfg) as driver:
            await driver.navigate(target.normalized_url)
            await driver.wait_for_ready(cfg.ready_selector)
            await driver.sleep(rng.randint(*cfg.settle_range))
            await driver.evaluate_script(SCROLL_TO_BOTTOM_JS)
            await driver.sleep(rng.randint(*cfg.scroll_settle_range))
            markup = await driver.capture_markup()
            screenshot = await driver.capture_screenshot(full_page=True, quality=quality)
        return markup, screenshot

    def _persist(
        self,
        markup: str,
        screenshot: bytes,
        html_path: ArtifactPath,
        screenshot_path: ArtifactPath,
    ) -> StrategyOutcome:
        # A markup file written before a failed screenshot write stays on disk.
        try:
            _write(html_path.path, markup.encode("utf-8"))
            _write(screenshot_path.path, screenshot)
        except ArtifactWriteError as exc:
            self.logger.warning("Rendered capture could not be saved: %s", exc)
            return StrategyOutcome.failure(
                self.name, exc, _existing((html_path, screenshot_path))
            )
        self._log_saved(html_path, screenshot_path)
        return StrategyOutcome.success(self.name, frozenset({html_path, screenshot_path}))

    def _persist_atomic(
        self,
        markup: str,
        screenshot: bytes,
        html_path: ArtifactPath,
        screenshot_path: ArtifactPath,
    ) -> StrategyOutcome:
        staged = [
            (_part_path(html_path.path), html_path.path, markup.encode("utf-8")),
            (_part_path(screenshot_path.path), screenshot_path.path, screenshot),
        ]
        moved: list[Path] = []
        try:
            for tmp, _, data in staged:
                _write(tmp, data)
            for tmp, final, _ in staged:
                try:
                    tmp.replace(final)
                except OSError as exc:
                    raise ArtifactWriteError(f"Cannot move {tmp} to {final}: {exc}") from exc
                moved.append(final)
        except ArtifactWriteError as exc:
            self.logger.warning("Rendered capture could not be saved: %s", exc)
            for tmp, _, _ in staged:
                tmp.unlink(missing_ok=True)
            for final in moved:
                final.unlink(missing_ok=True)
            return StrategyOutcome.failure(self.name, exc)
        self._log_saved(html_path, screenshot_path)
        return StrategyOutcome.success(self.name, frozenset({html_path, screenshot_path}))

    def _log_saved(self, html_path: ArtifactPath, screenshot_path: ArtifactPath) -> None:
        self.logger.info("Rendered HTML saved: %s", html_path.path)
        self.logger.info("Screenshot saved: %s", screenshot_path.path)


def _drain(render: asyncio.Future) -> None:
    # mark a late teardown error as retrieved
    if not render.cancelled():
        render.exception()


def _part_path(path: Path) -> Path:
    return path.with_name(path.name + ".part")


def _write(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise ArtifactWriteError(f"Cannot write {path}: {exc}") from exc


def _existing(paths: Iterable[ArtifactPath]) -> FrozenSet[ArtifactPath]:
    return frozenset(p for p in paths if p.path.is_file())
