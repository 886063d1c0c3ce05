"""
Appearance controller.

Derives the applied theme and palette from the stored preference, the OS
theme and, while logged in, the palettes stored on the server. Every change
is persisted (best effort) and re-applied to the render target.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from auth_template.api import appearance_client
from auth_template.api.http_client import ApiClient
from auth_template.api.schemas import (
    ActivePaletteSelection,
    CustomPalette,
    PaletteSeedHexColors,
)
from auth_template.appearance.palette import (
    InvalidPaletteError,
    PaletteNotFoundError,
    build_local_custom_palette,
    find_custom_palette,
    normalize_active_palette,
    rebuild_local_custom_palette,
)
from auth_template.appearance.preferences import (
    AppearancePreferences,
    ColorPalette,
    ResolvedTheme,
    ThemeMode,
    load_appearance_preferences,
    parse_color_palette,
    persist_appearance_preferences,
    resolve_theme_mode,
)
from auth_template.appearance.render import DocumentElement, apply_palette, apply_theme
from auth_template.appearance.system_theme import StaticSystemTheme, SystemThemeSource
from auth_template.state.notifications import NotificationCenter, NotificationType
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

SeedInput = Union[PaletteSeedHexColors, Dict[str, Any]]


def _coerce_seeds(seeds: SeedInput) -> PaletteSeedHexColors:
    if isinstance(seeds, PaletteSeedHexColors):
        return seeds

    try:
        return PaletteSeedHexColors.model_validate(seeds)
    except ValidationError as exc:
        raise InvalidPaletteError("Palette seed colors are invalid") from exc


class AppearanceController:
    """
    Owner of appearance state for one UI.

    Args:
        client: API client for server-stored palettes, or None for local-only.
        storage: Preference storage backend, or None.
        system_theme: Source of the OS light/dark preference.
        target: Render target, or None to compute without applying.
        persist: Write preference changes to ``storage``.
        server_palettes: Use the server for palettes while logged in.
        initial_preferences: Skip loading from storage.
    """

    def __init__(
        self,
        client: Optional[ApiClient] = None,
        storage=None,
        system_theme: Optional[SystemThemeSource] = None,
        target: Optional[DocumentElement] = None,
        *,
        persist: bool = True,
        server_palettes: bool = True,
        initial_preferences: Optional[AppearancePreferences] = None,
    ):
        self.client = client
        self.target = target
        self._storage = storage
        self._persist_enabled = persist
        self._server_palettes = server_palettes and client is not None
        self._source = system_theme or StaticSystemTheme()

        self._preferences = initial_preferences or load_appearance_preferences(storage)
        self._system_theme = self._source.get_system_theme()
        self._unsubscribe: Optional[Callable[[], None]] = None

        self._logged_in = False
        self._custom_palettes: List[CustomPalette] = []
        self._active = ActivePaletteSelection.preset(self._preferences.palette)
        self._listeners: List[Callable[["AppearanceController"], None]] = []
        self._session_sync_task: Optional[asyncio.Task] = None

        self._sync_system_subscription()
        self._apply()

    # --------------------
    # Read side
    # --------------------

    @property
    def preferences(self) -> AppearancePreferences:
        return self._preferences

    @property
    def mode(self) -> ThemeMode:
        return self._preferences.mode

    @property
    def palette(self) -> ColorPalette:
        return self._preferences.palette

    @property
    def system_theme(self) -> ResolvedTheme:
        return self._system_theme

    @property
    def resolved_theme(self) -> ResolvedTheme:
        return resolve_theme_mode(self._preferences.mode, self._system_theme)

    @property
    def active_palette(self) -> ActivePaletteSelection:
        return self._active

    @property
    def custom_palettes(self) -> List[CustomPalette]:
        return list(self._custom_palettes)

    @property
    def active_custom_palette(self) -> Optional[CustomPalette]:
        if self._active.palette_type != "custom":
            return None
        return find_custom_palette(self._active.custom_palette_id, self._custom_palettes)

    @property
    def is_server_backed(self) -> bool:
        return self._server_palettes and self._logged_in

    @property
    def is_subscribed_to_system_theme(self) -> bool:
        return self._unsubscribe is not None

    def add_listener(self, listener: Callable[["AppearanceController"], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # --------------------
    # Theme mode
    # --------------------

    def set_mode(self, mode: ThemeMode) -> None:
        """
        Change the theme mode.

        The OS theme is followed only while the mode is system; switching
        back to system re-reads it before subscribing again.
        """
        mode = ThemeMode(mode)
        if mode is self._preferences.mode:
            return

        logger.info("Theme mode changed", extra={"mode": mode.value})

        self._update_preferences(mode=mode)
        self._sync_system_subscription()
        self._apply()

    def _sync_system_subscription(self) -> None:
        if self._preferences.mode is ThemeMode.SYSTEM:
            if self._unsubscribe is None:
                self._system_theme = self._source.get_system_theme()
                self._unsubscribe = self._source.subscribe(self._on_system_theme_change)
            return

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_system_theme_change(self, theme: ResolvedTheme) -> None:
        self._system_theme = ResolvedTheme(theme)
        self._apply()

    # --------------------
    # Session
    # --------------------

    def bind_session(self, session, notifications: Optional[NotificationCenter] = None) -> Callable[[], None]:
        """
        Follow login and logout of a ``SessionController``.

        Sync failures are logged and, when ``notifications`` is given, shown
        to the user.
        """

        def on_user(user) -> None:
            task = asyncio.ensure_future(self.set_logged_in(user is not None))
            task.add_done_callback(lambda t: self._report_sync_failure(t, notifications))
            self._session_sync_task = task

        return session.add_listener(on_user)

    @staticmethod
    def _report_sync_failure(task: asyncio.Task, notifications: Optional[NotificationCenter]) -> None:
        if task.cancelled() or task.exception() is None:
            return

        logger.error(
            "Failed to sync appearance with session",
            extra={"error": str(task.exception())},
        )
        if notifications is not None:
            notifications.add(
                "Unable to load your appearance settings.",
                type=NotificationType.WARNING,
            )

    async def wait_for_session_sync(self) -> None:
        if self._session_sync_task is not None:
            await self._session_sync_task

    async def set_logged_in(self, is_logged_in: bool) -> None:
        """
        React to a login-state transition.

        Logging in loads the server's palettes and active selection. Logging
        out drops them and falls back to the local preference. Repeating the
        current state does nothing. A failed load leaves the controller logged
        out so the next login transition fetches again.
        """
        if is_logged_in == self._logged_in:
            return

        self._logged_in = is_logged_in

        # local-only palettes are not tied to the session
        if not self._server_palettes:
            return

        if not is_logged_in:
            self._custom_palettes = []
            self._active = ActivePaletteSelection.preset(self._preferences.palette)
            self._apply()
            return

        try:
            server_settings = await appearance_client.get_appearance_settings(client=self.client)
        except Exception:
            # the next login transition retries the load
            self._logged_in = False
            raise

        if not self._logged_in:
            logger.debug("Logged out while loading appearance; discarding result")
            return

        self._adopt(server_settings.active_palette, server_settings.custom_palettes)

    def _adopt(self, active: ActivePaletteSelection, custom_palettes: List[CustomPalette]) -> None:
        self._custom_palettes = list(custom_palettes)
        self._active = normalize_active_palette(active, self._custom_palettes)

        if self._active.palette_type == "preset":
            self._update_preferences(palette=self._active.preset_palette)

        self._apply()

    # --------------------
    # Palettes
    # --------------------

    async def select_preset(self, preset: ColorPalette) -> None:
        """
        Make a preset palette active.

        Raises:
            InvalidPaletteError: Unknown preset id.
        """
        palette = parse_color_palette(preset)
        if palette is None:
            raise InvalidPaletteError(f"Unknown preset palette: {preset!r}")

        selection = ActivePaletteSelection.preset(palette)

        if self.is_server_backed:
            selection = normalize_active_palette(
                await appearance_client.set_active_palette(client=self.client, selection=selection),
                self._custom_palettes,
            )

        self._active = selection
        if selection.palette_type == "preset":
            self._update_preferences(palette=selection.preset_palette)
        self._apply()

    async def select_custom_palette(self, palette_id: str) -> None:
        """
        Make a known custom palette active.

        Raises:
            PaletteNotFoundError: ``palette_id`` is not a known palette.
        """
        if find_custom_palette(palette_id, self._custom_palettes) is None:
            raise PaletteNotFoundError(f"Custom palette {palette_id!r} does not exist")

        selection = ActivePaletteSelection.custom(palette_id)

        if self.is_server_backed:
            selection = normalize_active_palette(
                await appearance_client.set_active_palette(client=self.client, selection=selection),
                self._custom_palettes,
            )

        self._active = selection
        self._apply()

    async def create_custom_palette(self, name: str, seeds: SeedInput) -> CustomPalette:
        """
        Create a custom palette and make it active.

        Raises:
            InvalidPaletteError: Blank name or bad seed colors.
            DuplicatePaletteNameError: Name taken (local-only mode).
            ApiError: Server rejected the palette.
        """
        seeds = _coerce_seeds(seeds)

        if self.is_server_backed:
            result = await appearance_client.create_custom_palette(
                client=self.client, name=name, seeds=seeds
            )
            palettes = [p for p in self._custom_palettes if p.id != result.palette.id]
            palettes.append(result.palette)
            self._adopt(result.active_palette, palettes)
            return result.palette

        palette = build_local_custom_palette(name, seeds, self._custom_palettes)
        self._custom_palettes.append(palette)
        self._active = ActivePaletteSelection.custom(palette.id)
        self._apply()

        logger.info("Created local custom palette", extra={"palette_id": palette.id})
        return palette

    async def update_custom_palette(self, palette_id: str, name: str, seeds: SeedInput) -> CustomPalette:
        """
        Replace the name and seeds of a custom palette.

        Raises:
            PaletteNotFoundError: ``palette_id`` is not a known palette.
            InvalidPaletteError: Blank name or bad seed colors.
            DuplicatePaletteNameError: Name taken (local-only mode).
        """
        existing = find_custom_palette(palette_id, self._custom_palettes)
        if existing is None:
            raise PaletteNotFoundError(f"Custom palette {palette_id!r} does not exist")

        seeds = _coerce_seeds(seeds)

        if self.is_server_backed:
            result = await appearance_client.update_custom_palette(
                client=self.client, palette_id=palette_id, name=name, seeds=seeds
            )
            updated = result.palette
        else:
            updated = rebuild_local_custom_palette(existing, name, seeds, self._custom_palettes)

        self._custom_palettes = [
            updated if p.id == palette_id else p for p in self._custom_palettes
        ]
        self._apply()
        return updated

    # --------------------
    # Internals
    # --------------------

    def _update_preferences(self, **changes) -> None:
        updated = self._preferences.model_copy(update=changes)
        if updated == self._preferences:
            return

        self._preferences = updated

        if self._persist_enabled:
            persist_appearance_preferences(self._preferences, self._storage)

    def _apply(self) -> None:
        apply_theme(self.target, self.resolved_theme)
        apply_palette(self.target, self._active, self.active_custom_palette)

        for listener in list(self._listeners):
            listener(self)

    def close(self) -> None:
        """Stop following the OS theme."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
