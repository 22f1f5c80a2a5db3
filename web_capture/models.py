# web_capture/models.py
"""
Data models for the capture pipeline: target, artifacts, strategy outcomes and the run result.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Optional
from urllib.parse import urlparse

from web_capture.errors import CaptureError


class ArtifactKind(str, Enum):
    STATIC_HTML = "static-html"
    RENDERED_HTML = "rendered-html"
    SCREENSHOT = "screenshot"


class Disposition(str, Enum):
    RETAINED = "retained"
    DISCARDED = "discarded"


class CaptureState(str, Enum):
    IDLE = "idle"
    NORMALIZING = "normalizing"
    CAPTURING = "capturing"
    FINALIZING = "finalizing"
    DISCARDING = "discarding"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class CaptureTarget:
    """Raw user input and the absolute URL derived from it."""

    raw_input: str
    normalized_url: str

    @property
    def hostname(self) -> str:
        return urlparse(self.normalized_url).hostname or ""


@dataclass(frozen=True, slots=True)
class ArtifactPath:
    kind: ArtifactKind
    path: Path


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """Classified failure cause recorded in a StrategyOutcome."""

    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorInfo:
        kind = exc.kind if isinstance(exc, CaptureError) else type(exc).__name__
        return cls(kind=kind, message=str(exc) or type(exc).__name__)


@dataclass(frozen=True, slots=True)
class StrategyOutcome:
    """Result of one strategy run. Exactly one per strategy per capture."""

    strategy_name: str
    succeeded: bool
    error: Optional[ErrorInfo] = None
    produced_artifacts: FrozenSet[ArtifactPath] = field(default_factory=frozenset)

    @classmethod
    def success(cls, name: str, artifacts: FrozenSet[ArtifactPath]) -> StrategyOutcome:
        return cls(strategy_name=name, succeeded=True, produced_artifacts=frozenset(artifacts))

    @classmethod
    def failure(
        cls,
        name: str,
        exc: BaseException,
        artifacts: FrozenSet[ArtifactPath] = frozenset(),
    ) -> StrategyOutcome:
        return cls(
            strategy_name=name,
            succeeded=False,
            error=ErrorInfo.from_exception(exc),
            produced_artifacts=frozenset(artifacts),
        )


@dataclass(frozen=True, slots=True)
class CaptureResult:
    """Aggregated outcome of both strategies plus the session's disposition."""

    target: CaptureTarget
    directory: Path
    created_at: datetime
    static: StrategyOutcome
    rendered: StrategyOutcome
    disposition: Disposition

    @property
    def succeeded(self) -> bool:
        return self.static.succeeded or self.rendered.succeeded

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    @property
    def outcomes(self) -> tuple[StrategyOutcome, StrategyOutcome]:
        return (self.static, self.rendered)
