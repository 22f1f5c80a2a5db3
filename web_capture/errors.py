# File: web_capture/errors.py
"""web_capture.errors: Иерархия исключений захвата страницы."""

from __future__ import annotations

__all__ = [
    "CaptureError",
    "InvalidURLError",
    "DirectoryCreateError",
    "NetworkError",
    "RenderError",
    "CaptureTimeout",
    "ArtifactWriteError",
]


class CaptureError(Exception):
    """Базовое исключение. ``kind`` попадает в ErrorInfo исхода стратегии."""

    kind: str = "CaptureError"


class InvalidURLError(CaptureError, ValueError):
    """Строку нельзя разобрать в схему и хост. Фатально для запуска."""

    kind = "InvalidURL"


class DirectoryCreateError(CaptureError, OSError):
    """Не удалось создать директорию сессии. Фатально для запуска."""

    kind = "DirectoryCreateError"


class NetworkError(CaptureError):
    kind = "NetworkError"


class RenderError(CaptureError):
    kind = "RenderError"


class CaptureTimeout(CaptureError):
    """Превышен общий дедлайн рендеринга."""

    kind = "Timeout"


class ArtifactWriteError(CaptureError, OSError):
    kind = "ArtifactWriteError"
