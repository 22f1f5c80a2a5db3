# web_capture/fetchers/browser.py
"""
Playwright-backed :class:`~web_capture.fetchers.rendered.BrowserDriver`.

Each instance owns its own Playwright process, browser and context; nothing is
shared between captures. Leaving the ``async with`` block (normally, on error
or on cancellation) closes all of them.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from web_capture.config import RenderConfig
from web_capture.errors import CaptureTimeout, RenderError
from web_capture.logger import LOGGER_NAME

__all__ = ("PlaywrightDriver", "launch_args")

_T = TypeVar("_T")

logger = logging.getLogger(LOGGER_NAME)


def launch_args(config: RenderConfig) -> list[str]:
    """Chromium flags: hide the automation marker; park a headed window off-screen."""
    args = [
        "--disable-blink-features=AutomationControlled",
        f"--window-size={config.viewport_width},{config.viewport_height}",
    ]
    if not config.headless:
        args.append("--window-position=-32000,-32000")
    return args


def _translate_errors(func: Callable[..., Awaitable[_T]]) -> Callable[..., Awaitable[_T]]:
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> _T:
        try:
            return await func(*args, **kwargs)
        except PlaywrightTimeoutError as exc:
            raise CaptureTimeout(f"{func.__name__}: {exc.message}") from exc
        except PlaywrightError as exc:
            raise RenderError(f"{func.__name__}: {exc.message}") from exc

    return wrapper


class PlaywrightDriver:
    """Chromium page with a fixed viewport, opened per capture."""

    def __init__(self, config: RenderConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self) -> PlaywrightDriver:
        try:
            await self._launch()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @_translate_errors
    async def _launch(self) -> None:
        cfg = self.config
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=cfg.headless, args=launch_args(cfg)
        )
        self._context = await self._browser.new_context(
            viewport={"width": cfg.viewport_width, "height": cfg.viewport_height},
            user_agent=cfg.user_agent,
        )
        self._page = await self._context.new_page()
        # the strategy's own deadline is authoritative
        self._page.set_default_timeout(cfg.deadline * 1000)
        logger.debug("Browser launched (headless=%s)", cfg.headless)

    async def close(self) -> None:
        """Close context, browser and driver, each step bounded by ``teardown_grace``.

        Stopping Playwright last kills the driver process even when the
        browser refused to close in time.
        """
        self._page = None
        for name, method in (("_context", "close"), ("_browser", "close"), ("_playwright", "stop")):
            resource = getattr(self, name)
            if resource is None:
                continue
            setattr(self, name, None)
            await self._bounded(name.strip("_"), getattr(resource, method)())

    async def _bounded(self, what: str, step: Awaitable[None]) -> None:
        grace = self.config.teardown_grace
        try:
            await asyncio.wait_for(step, timeout=grace)
        except asyncio.TimeoutError:
            logger.warning("Closing %s took longer than %ss, moving on", what, grace)
        except PlaywrightError as exc:
            logger.debug("Ignoring error while closing %s: %s", what, exc)

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RenderError("Browser is not running")
        return self._page

    @_translate_errors
    async def navigate(self, url: str) -> None:
        await self.page.goto(url)

    @_translate_errors
    async def wait_for_ready(self, selector: str) -> None:
        await self.page.wait_for_selector(selector, state="attached")

    @_translate_errors
    async def sleep(self, seconds: float) -> None:
        await self.page.wait_for_timeout(seconds * 1000)

    @_translate_errors
    async def evaluate_script(self, script: str) -> object:
        return await self.page.evaluate(script)

    @_translate_errors
    async def capture_markup(self) -> str:
        return await self.page.evaluate("document.documentElement.outerHTML")

    @_translate_errors
    async def capture_screenshot(self, *, full_page: bool, quality: Optional[int]) -> bytes:
        if quality is None:
            return await self.page.screenshot(full_page=full_page, type="png")
        return await self.page.screenshot(full_page=full_page, type="jpeg", quality=quality)
