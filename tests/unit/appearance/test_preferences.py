import json

import pytest

from auth_template.appearance.preferences import (
    APPEARANCE_STORAGE_KEY,
    DEFAULT_APPEARANCE_PREFERENCES,
    AppearancePreferences,
    ColorPalette,
    ResolvedTheme,
    ThemeMode,
    load_appearance_preferences,
    parse_color_palette,
    persist_appearance_preferences,
    resolve_theme_mode,
)
from auth_template.appearance.storage import (
    JsonFileStorage,
    MappingStorage,
    MemoryStorage,
    StorageError,
)


class FailingStorage:
    def get_item(self, key):
        raise StorageError("storage disabled")

    def set_item(self, key, value):
        raise StorageError("quota exceeded")


@pytest.mark.parametrize(
    "mode, system_theme, expected",
    [
        (ThemeMode.SYSTEM, ResolvedTheme.DARK, ResolvedTheme.DARK),
        (ThemeMode.SYSTEM, ResolvedTheme.LIGHT, ResolvedTheme.LIGHT),
        (ThemeMode.LIGHT, ResolvedTheme.DARK, ResolvedTheme.LIGHT),
        (ThemeMode.DARK, ResolvedTheme.LIGHT, ResolvedTheme.DARK),
    ],
)
def test_resolve_theme_mode(mode, system_theme, expected):
    assert resolve_theme_mode(mode, system_theme) is expected


def test_defaults():
    assert DEFAULT_APPEARANCE_PREFERENCES.mode is ThemeMode.SYSTEM
    assert DEFAULT_APPEARANCE_PREFERENCES.palette is ColorPalette.TOKYO_NIGHT


@pytest.mark.parametrize(
    "stored",
    [
        None,
        "",
        "{not json",
        "[1, 2]",
        json.dumps({"mode": "sepia", "palette": "solarized"}),
        json.dumps({"mode": None}),
    ],
)
def test_load_falls_back_to_defaults(stored):
    storage = MemoryStorage({APPEARANCE_STORAGE_KEY: stored} if stored is not None else {})

    assert load_appearance_preferences(storage) == DEFAULT_APPEARANCE_PREFERENCES


def test_load_keeps_valid_fields_when_others_are_unknown():
    storage = MemoryStorage({APPEARANCE_STORAGE_KEY: json.dumps({"mode": "dark", "palette": "x"})})

    preferences = load_appearance_preferences(storage)

    assert preferences.mode is ThemeMode.DARK
    assert preferences.palette is ColorPalette.TOKYO_NIGHT


@pytest.mark.parametrize(
    "legacy, expected",
    [
        ("sunset", ColorPalette.CATPPUCCIN),
        ("default", ColorPalette.TOKYO_NIGHT),
        ("forest", ColorPalette.EVERFOREST),
    ],
)
def test_legacy_palette_names(legacy, expected):
    storage = MemoryStorage({APPEARANCE_STORAGE_KEY: json.dumps({"mode": "light", "palette": legacy})})

    assert load_appearance_preferences(storage).palette is expected
    assert parse_color_palette(legacy) is expected


def test_parse_color_palette_rejects_non_strings():
    assert parse_color_palette(3) is None
    assert parse_color_palette("nord") is ColorPalette.NORD


def test_persist_then_load():
    storage = MemoryStorage()
    preferences = AppearancePreferences(mode=ThemeMode.DARK, palette=ColorPalette.GRUVBOX)

    assert persist_appearance_preferences(preferences, storage) is True

    assert json.loads(storage.get_item(APPEARANCE_STORAGE_KEY)) == {"mode": "dark", "palette": "gruvbox"}
    assert load_appearance_preferences(storage) == preferences


def test_failing_storage_never_raises():
    storage = FailingStorage()

    assert load_appearance_preferences(storage) == DEFAULT_APPEARANCE_PREFERENCES
    assert persist_appearance_preferences(DEFAULT_APPEARANCE_PREFERENCES, storage) is False


def test_missing_storage():
    assert load_appearance_preferences(None) == DEFAULT_APPEARANCE_PREFERENCES
    assert persist_appearance_preferences(DEFAULT_APPEARANCE_PREFERENCES, None) is False


def test_json_file_storage_round_trip(tmp_path):
    storage = JsonFileStorage(tmp_path / "nested" / "appearance.json")
    preferences = AppearancePreferences(mode=ThemeMode.LIGHT, palette=ColorPalette.NORD)

    assert persist_appearance_preferences(preferences, storage)

    assert load_appearance_preferences(JsonFileStorage(storage.path)) == preferences


def test_json_file_storage_recovers_from_corruption(tmp_path):
    path = tmp_path / "appearance.json"
    path.write_text("{broken", encoding="utf-8")
    storage = JsonFileStorage(path)

    with pytest.raises(StorageError):
        storage.get_item(APPEARANCE_STORAGE_KEY)
    assert load_appearance_preferences(storage) == DEFAULT_APPEARANCE_PREFERENCES

    storage.set_item("other", "value")

    assert storage.get_item("other") == "value"


def test_mapping_storage_ignores_non_string_values():
    mapping = {APPEARANCE_STORAGE_KEY: {"mode": "dark"}}
    storage = MappingStorage(mapping)

    assert storage.get_item(APPEARANCE_STORAGE_KEY) is None

    storage.set_item(APPEARANCE_STORAGE_KEY, "{}")
    assert mapping[APPEARANCE_STORAGE_KEY] == "{}"
