"""web_capture.fetchers: Две независимые стратегии получения страницы."""

from .rendered import BrowserDriver, RenderedFetchStrategy
from .static import StaticFetchStrategy
from .throttle import HostThrottle

__all__ = ["BrowserDriver", "HostThrottle", "RenderedFetchStrategy", "StaticFetchStrategy"]
