# File: web_capture/engine.py
"""web_capture.engine: Оркестратор захвата – обе стратегии, сбор исходов, судьба директории."""

from __future__ import annotations

import asyncio
import inspect
import random
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

from web_capture.config import CaptureConfig
from web_capture.errors import CaptureError, DirectoryCreateError, InvalidURLError
from web_capture.fetchers.rendered import RenderedFetchStrategy
from web_capture.fetchers.static import StaticFetchStrategy
from web_capture.logger import logger
from web_capture.models import (
    ArtifactKind,
    CaptureResult,
    CaptureState,
    Disposition,
    StrategyOutcome,
)
from web_capture.session import OutputSession
from web_capture.utils import normalize_target

__all__ = ["CaptureOrchestrator", "start_capture"]


class CaptureOrchestrator:
    """Запускает статическую и браузерную стратегии как независимые попытки.

    Стратегии не являются fallback друг для друга: выполняются обе, сбой одной
    не влияет на другую. Директория сессии сохраняется, если успешна хотя бы
    одна, и удаляется, если обе провалились.
    """

    def __init__(
        self,
        config: Optional[CaptureConfig] = None,
        *,
        static: Optional[StaticFetchStrategy] = None,
        rendered: Optional[RenderedFetchStrategy] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or CaptureConfig()
        self.rng = rng or random.Random()
        self.static = static or StaticFetchStrategy(self.config.static, rng=self.rng)
        self.rendered = rendered or RenderedFetchStrategy(
            self.config.render, atomic_writes=self.config.atomic_writes
        )
        self.clock = clock
        self.state = CaptureState.IDLE

    def _transition(self, state: CaptureState) -> None:
        logger.debug("Capture state: %s -> %s", self.state.value, state.value)
        self.state = state

    async def capture(self, raw_input: str) -> CaptureResult:
        """Выполняет один захват. InvalidURLError и DirectoryCreateError фатальны и пробрасываются."""
        self._transition(CaptureState.NORMALIZING)
        try:
            target = normalize_target(raw_input)
        except InvalidURLError as exc:
            logger.error("Invalid target: %s", exc)
            self._transition(CaptureState.DONE)
            raise
        logger.info("Target URL: %s", target.normalized_url)

        try:
            session = OutputSession.open(
                target,
                self.config.output_dir,
                now=self.clock(),
                screenshot_extension=self.config.render.screenshot_extension,
            )
        except DirectoryCreateError as exc:
            logger.error("%s", exc)
            self._transition(CaptureState.DONE)
            raise
        self._transition(CaptureState.CAPTURING)

        recorded: Dict[str, StrategyOutcome] = {}
        static_run = self._guarded(
            self.static.name,
            lambda: self.static.run(target, session.artifact_path(ArtifactKind.STATIC_HTML)),
            recorded,
        )
        rendered_run = self._guarded(
            self.rendered.name,
            lambda: self.rendered.run(
                target,
                session.artifact_path(ArtifactKind.RENDERED_HTML),
                session.artifact_path(ArtifactKind.SCREENSHOT),
                self.rng,
            ),
            recorded,
        )

        try:
            if self.config.concurrent:
                static_outcome, rendered_outcome = await asyncio.gather(static_run, rendered_run)
            else:
                logger.info("-> Static fetch of HTML")
                static_outcome = await static_run
                logger.info("-> Browser fetch of HTML and screenshot")
                rendered_outcome = await rendered_run
        except (asyncio.CancelledError, KeyboardInterrupt):
            if not self.config.concurrent:
                _close_unstarted(static_run, rendered_run)
            logger.warning("Capture interrupted")
            self._settle(session, any(o.succeeded for o in recorded.values()))
            raise

        disposition = self._settle(session, static_outcome.succeeded or rendered_outcome.succeeded)
        logger.info(
            "Results: static=%s rendered=%s", static_outcome.succeeded, rendered_outcome.succeeded
        )
        return CaptureResult(
            target=target,
            directory=session.directory,
            created_at=session.created_at,
            static=static_outcome,
            rendered=rendered_outcome,
            disposition=disposition,
        )

    async def _guarded(
        self,
        name: str,
        run: Callable[[], Awaitable[StrategyOutcome]],
        recorded: Dict[str, StrategyOutcome],
    ) -> StrategyOutcome:
        try:
            outcome = await run()
        except CaptureError as exc:
            logger.warning("Strategy %s failed: %s", name, exc)
            outcome = StrategyOutcome.failure(name, exc)
        except Exception as exc:
            logger.exception("Strategy %s crashed", name)
            outcome = StrategyOutcome.failure(name, exc)
        recorded[name] = outcome
        return outcome

    def _settle(self, session: OutputSession, keep: bool) -> Disposition:
        if keep:
            self._transition(CaptureState.FINALIZING)
            session.finalize()
        else:
            self._transition(CaptureState.DISCARDING)
            logger.warning("No strategy succeeded. No result saved.")
            session.discard()
        self._transition(CaptureState.DONE)
        return Disposition.RETAINED if keep else Disposition.DISCARDED


def _close_unstarted(*coros) -> None:
    for coro in coros:
        if inspect.getcoroutinestate(coro) == inspect.CORO_CREATED:
            coro.close()


async def start_capture(raw_input: str, config: Optional[CaptureConfig] = None) -> CaptureResult:
    """Короткая обёртка для CLI: один захват с конфигурацией по умолчанию или заданной."""
    return await CaptureOrchestrator(config).capture(raw_input)
