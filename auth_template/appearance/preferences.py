"""
Appearance preferences.

Theme modes, preset palettes and the persisted preference blob. Reading is
tolerant of anything found in storage; writing is best-effort.
"""

import json
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

APPEARANCE_STORAGE_KEY = "auth-template.appearance"

SYSTEM_COLOR_SCHEME_QUERY = "(prefers-color-scheme: dark)"


class ThemeMode(str, Enum):
    """Theme preference chosen by the user."""

    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


class ResolvedTheme(str, Enum):
    """Concrete theme applied to the page."""

    LIGHT = "light"
    DARK = "dark"


class ColorPalette(str, Enum):
    """Preset palettes shipped with the application."""

    TOKYO_NIGHT = "tokyo-night"
    CATPPUCCIN = "catppuccin"
    EVERFOREST = "everforest"
    GRUVBOX = "gruvbox"
    NORD = "nord"


DEFAULT_PALETTE = ColorPalette.TOKYO_NIGHT

# Preset ids used by older releases
LEGACY_PALETTE_NAMES: Dict[str, ColorPalette] = {
    "sunset": ColorPalette.CATPPUCCIN,
    "default": ColorPalette.TOKYO_NIGHT,
    "forest": ColorPalette.EVERFOREST,
}


def parse_color_palette(value: Any) -> Optional[ColorPalette]:
    """
    Parse a preset id, mapping legacy names to their current id.

    Returns:
        The preset, or None when the value is not a known id.
    """
    if isinstance(value, ColorPalette):
        return value

    if not isinstance(value, str):
        return None

    if value in LEGACY_PALETTE_NAMES:
        return LEGACY_PALETTE_NAMES[value]

    try:
        return ColorPalette(value)
    except ValueError:
        return None


class AppearancePreferences(BaseModel):
    """User appearance preference as stored on the device."""

    model_config = ConfigDict(frozen=True)

    mode: ThemeMode = ThemeMode.SYSTEM
    palette: ColorPalette = DEFAULT_PALETTE


DEFAULT_APPEARANCE_PREFERENCES = AppearancePreferences()


def resolve_theme_mode(mode: ThemeMode, system_theme: ResolvedTheme) -> ResolvedTheme:
    """
    Collapse a theme mode into a concrete theme.

    Args:
        mode: Stored theme mode.
        system_theme: Current OS-level preference.

    Returns:
        ``system_theme`` for system mode, otherwise the mode itself.
    """
    if ThemeMode(mode) is ThemeMode.SYSTEM:
        return ResolvedTheme(system_theme)

    return ResolvedTheme(ThemeMode(mode).value)


def _parse_stored_preferences(stored: Any) -> AppearancePreferences:
    if not isinstance(stored, dict):
        return DEFAULT_APPEARANCE_PREFERENCES

    try:
        mode = ThemeMode(stored.get("mode"))
    except (TypeError, ValueError):
        mode = DEFAULT_APPEARANCE_PREFERENCES.mode

    palette = parse_color_palette(stored.get("palette"))

    return AppearancePreferences(
        mode=mode,
        palette=palette or DEFAULT_APPEARANCE_PREFERENCES.palette,
    )


def load_appearance_preferences(storage) -> AppearancePreferences:
    """
    Load preferences from storage.

    Missing storage, a missing key, malformed JSON or unknown values all
    fall back to defaults. Never raises.

    Args:
        storage: Backend with ``get_item``, or None.

    Returns:
        AppearancePreferences: Loaded or default preferences.
    """
    if storage is None:
        return DEFAULT_APPEARANCE_PREFERENCES

    try:
        raw = storage.get_item(APPEARANCE_STORAGE_KEY)
        if not raw:
            return DEFAULT_APPEARANCE_PREFERENCES

        return _parse_stored_preferences(json.loads(raw))

    except Exception:
        logger.debug("Stored appearance preferences unreadable; using defaults")
        return DEFAULT_APPEARANCE_PREFERENCES


def persist_appearance_preferences(preferences: AppearancePreferences, storage) -> bool:
    """
    Write preferences to storage.

    Args:
        preferences: Preferences to store.
        storage: Backend with ``set_item``, or None.

    Returns:
        bool: True when the write succeeded. Failures are not raised.
    """
    if storage is None:
        return False

    try:
        storage.set_item(
            APPEARANCE_STORAGE_KEY,
            json.dumps(preferences.model_dump(mode="json")),
        )
        return True

    except Exception:
        logger.warning("Failed to persist appearance preferences")
        return False
