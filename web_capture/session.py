# File: web_capture/session.py
"""web_capture.session: Директория одного запуска захвата и её жизненный цикл."""

from __future__ import annotations

import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from web_capture.errors import DirectoryCreateError
from web_capture.logger import logger
from web_capture.models import ArtifactKind, ArtifactPath, CaptureTarget, Disposition
from web_capture.utils import host_slug

__all__ = ["OutputSession", "TIMESTAMP_FORMAT"]

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


class OutputSession:
    """Владеет директорией артефактов до вызова finalize() или discard().

    Имя директории – ``<timestamp>_<host>``; пути артефактов выводятся из него
    детерминированно.
    """

    def __init__(
        self,
        directory: Path,
        base_name: str,
        created_at: datetime,
        screenshot_extension: str = "jpg",
    ) -> None:
        self.directory = directory
        self.base_name = base_name
        self.created_at = created_at
        self.screenshot_extension = screenshot_extension
        self.disposition: Optional[Disposition] = None

    @classmethod
    def open(
        cls,
        target: CaptureTarget,
        base_dir: Union[str, Path] = "outputs",
        now: Optional[datetime] = None,
        screenshot_extension: str = "jpg",
    ) -> OutputSession:
        """Создаёт директорию сессии (вместе с родителями) и возвращает сессию.

        Два запуска в одну и ту же секунду получают суффикс ``-1``, ``-2``, …
        """
        created_at = now or datetime.now()
        base_name = f"{created_at.strftime(TIMESTAMP_FORMAT)}_{host_slug(target)}"
        root = Path(base_dir)

        try:
            root.mkdir(parents=True, exist_ok=True)
            name, attempt = base_name, 0
            while True:
                directory = root / name
                try:
                    directory.mkdir(mode=0o755)
                    break
                except FileExistsError:
                    attempt += 1
                    name = f"{base_name}-{attempt}"
        except OSError as exc:
            raise DirectoryCreateError(f"Cannot create output directory under {root}: {exc}") from exc

        logger.info("Output directory: %s", directory)
        return cls(directory, name, created_at, screenshot_extension)

    def artifact_path(self, kind: ArtifactKind) -> ArtifactPath:
        if kind is ArtifactKind.STATIC_HTML:
            filename = f"{self.base_name}_static.html"
        elif kind is ArtifactKind.RENDERED_HTML:
            filename = f"{self.base_name}_rendered.html"
        elif kind is ArtifactKind.SCREENSHOT:
            filename = f"{self.base_name}.{self.screenshot_extension}"
        else:  # pragma: no cover
            raise ValueError(f"Unknown artifact kind: {kind}")
        return ArtifactPath(kind, self.directory / filename)

    def finalize(self) -> None:
        """Оставляет директорию навсегда."""
        if self.disposition is Disposition.DISCARDED:
            raise RuntimeError(f"Session {self.base_name} was already discarded")
        self.disposition = Disposition.RETAINED

    def discard(self) -> None:
        """Рекурсивно удаляет директорию. Ошибки удаления только логируются."""
        if self.disposition is Disposition.RETAINED:
            raise RuntimeError(f"Session {self.base_name} was already finalized")
        if self.disposition is Disposition.DISCARDED:
            return
        self.disposition = Disposition.DISCARDED
        try:
            shutil.rmtree(self.directory)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove %s: %s", self.directory, exc)
        else:
            logger.info("Removed output directory: %s", self.directory)

    def __repr__(self) -> str:
        return f"OutputSession({str(self.directory)!r}, disposition={self.disposition})"
