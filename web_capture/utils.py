# File: web_capture/utils.py
"""web_capture.utils: Нормализация целевого URL и производные от него имена."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import urlparse

from web_capture.errors import InvalidURLError
from web_capture.logger import logger
from web_capture.models import CaptureTarget

__all__: Sequence[str] = (
    "normalize_target",
    "host_slug",
)

_SCHEMES = ("http://", "https://")


def normalize_target(raw_input: str) -> CaptureTarget:
    """Превращает ввод пользователя в абсолютный URL; без схемы добавляет ``https://``.

    Проверка чисто синтаксическая: DNS и доступность не проверяются.
    """
    candidate = (raw_input or "").strip()
    if not candidate.lower().startswith(_SCHEMES):
        candidate = "https://" + candidate

    try:
        parsed = urlparse(candidate)
        host = parsed.hostname
    except ValueError as exc:
        raise InvalidURLError(f"Cannot parse URL {raw_input!r}: {exc}") from exc

    if parsed.scheme.lower() not in ("http", "https") or not host:
        raise InvalidURLError(f"URL {raw_input!r} has no host")

    logger.debug("Normalized target: %s -> %s", raw_input, candidate)
    return CaptureTarget(raw_input=raw_input, normalized_url=candidate)


def host_slug(target: CaptureTarget) -> str:
    """Имя хоста в нижнем регистре, без префикса ``www.``, точки заменены на ``_``."""
    host = target.hostname.lower()
    host = host.removeprefix("www.")
    return host.replace(".", "_")
