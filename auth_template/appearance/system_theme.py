"""
OS-level light/dark preference.

The browser reports ``prefers-color-scheme`` changes; this module keeps the
latest reported value and fans changes out to subscribers. Nothing here
polls.
"""

from typing import Callable, List

from auth_template.appearance.preferences import ResolvedTheme
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

SystemThemeListener = Callable[[ResolvedTheme], None]


class SystemThemeSource:
    """Read and observe the system theme."""

    def get_system_theme(self) -> ResolvedTheme:
        raise NotImplementedError

    def subscribe(self, listener: SystemThemeListener) -> Callable[[], None]:
        raise NotImplementedError


class StaticSystemTheme(SystemThemeSource):
    """
    System theme held in memory and updated by whoever observes the OS.

    Defaults to light, matching a browser without ``matchMedia``.
    """

    def __init__(self, theme: ResolvedTheme = ResolvedTheme.LIGHT):
        self._theme = ResolvedTheme(theme)
        self._listeners: List[SystemThemeListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def get_system_theme(self) -> ResolvedTheme:
        return self._theme

    def subscribe(self, listener: SystemThemeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_system_theme(self, theme: ResolvedTheme) -> None:
        """
        Record a new OS preference and notify subscribers if it changed.

        Args:
            theme: Reported theme.
        """
        theme = ResolvedTheme(theme)
        if theme is self._theme:
            return

        logger.debug("System theme changed", extra={"theme": theme.value})
        self._theme = theme

        for listener in list(self._listeners):
            listener(theme)

    def report_dark_match(self, matches: bool) -> None:
        """Record the result of the ``prefers-color-scheme: dark`` query."""
        self.set_system_theme(ResolvedTheme.DARK if matches else ResolvedTheme.LIGHT)
