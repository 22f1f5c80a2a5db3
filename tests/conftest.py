# File: tests/conftest.py
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, Iterable, Optional

import pytest
from web_capture.config import CaptureConfig, RenderConfig, StaticFetchConfig
from web_capture.errors import RenderError
from web_capture.models import CaptureTarget


class FixedRandom:
    """Deterministic stand-in for random.Random: returns queued values."""

    def __init__(self, ints: Iterable[int] = (), uniform: float = 0.0) -> None:
        self._ints = list(ints)
        self._uniform = uniform
        self.randint_calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.randint_calls.append((a, b))
        return self._ints.pop(0) if self._ints else a

    def uniform(self, a: float, b: float) -> float:
        return self._uniform


class FakeDriver:
    """BrowserDriver double that records every call.

    ``fail_on`` raises RenderError at the named step, ``hang_on`` never returns,
    ``exit_delay`` makes closing the driver slow.
    """

    def __init__(
        self,
        markup: str = "<html><head></head><body>rendered</body></html>",
        screenshot: bytes = b"\xff\xd8\xff\xe0fake-jpeg",
        fail_on: Optional[str] = None,
        hang_on: Optional[str] = None,
        exit_delay: float = 0.0,
    ) -> None:
        self.markup = markup
        self.screenshot = screenshot
        self.fail_on = fail_on
        self.hang_on = hang_on
        self.exit_delay = exit_delay
        self.calls: list[tuple] = []
        self.entered = False
        self.closed = False

    async def __aenter__(self) -> FakeDriver:
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.exit_delay:
            await asyncio.sleep(self.exit_delay)
        self.closed = True

    async def _step(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if self.hang_on == name:
            await asyncio.sleep(3600)
        if self.fail_on == name:
            raise RenderError(f"{name} failed")

    async def navigate(self, url: str) -> None:
        await self._step("navigate", url)

    async def wait_for_ready(self, selector: str) -> None:
        await self._step("wait_for_ready", selector)

    async def sleep(self, seconds: float) -> None:
        await self._step("sleep", seconds)

    async def evaluate_script(self, script: str) -> object:
        await self._step("evaluate_script", script)
        return None

    async def capture_markup(self) -> str:
        await self._step("capture_markup")
        return self.markup

    async def capture_screenshot(self, *, full_page: bool, quality: Optional[int]) -> bytes:
        await self._step("capture_screenshot", full_page, quality)
        return self.screenshot

    @property
    def step_names(self) -> list[str]:
        return [c[0] for c in self.calls]


def driver_factory(driver: FakeDriver) -> Callable[[RenderConfig], FakeDriver]:
    return lambda config: driver


@pytest.fixture()
def make_driver() -> type[FakeDriver]:
    return FakeDriver


@pytest.fixture()
def make_random() -> type[FixedRandom]:
    return FixedRandom


@pytest.fixture()
def factory_for() -> Callable[[FakeDriver], Callable[[RenderConfig], FakeDriver]]:
    return driver_factory


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 12, 30, 45)


@pytest.fixture()
def example_target() -> CaptureTarget:
    return CaptureTarget(raw_input="example.com", normalized_url="https://example.com")


@pytest.fixture()
def fast_static_config() -> StaticFetchConfig:
    """Static settings without inter-request delay and with a short timeout."""
    return StaticFetchConfig(timeout=2.0, min_delay=0, random_delay=0)


@pytest.fixture()
def capture_config(tmp_path, fast_static_config) -> CaptureConfig:
    return CaptureConfig(
        output_dir=tmp_path / "outputs",
        static=fast_static_config,
        render=RenderConfig(deadline=1.0),
    )
