import pytest

from auth_template.api.schemas import ActivePaletteSelection, PaletteSeedHexColors
from auth_template.appearance.palette import (
    PALETTE_GENERATION_VERSION,
    PALETTE_TOKEN_CSS_VARIABLES,
    PALETTE_TOKEN_NAMES,
    DuplicatePaletteNameError,
    InvalidPaletteError,
    build_local_custom_palette,
    generate_palette_tokens,
    hex_to_rgb,
    mix_with_white,
    normalize_active_palette,
    rebuild_local_custom_palette,
)
from auth_template.appearance.preferences import ColorPalette


@pytest.fixture
def seeds(seed_colors):
    return PaletteSeedHexColors(**seed_colors)


def _channels(token):
    return [int(part) for part in token.split(", ")]


def test_primary_shades(seeds):
    tokens = generate_palette_tokens(seeds)

    assert tokens["primary_100"] == "158, 206, 106"
    assert tokens["primary_80"] == "177, 216, 136"
    assert tokens["primary_60"] == "197, 226, 166"


def test_lighter_shades_never_darker(seeds):
    tokens = generate_palette_tokens(seeds)

    for seed in ("primary", "secondary", "green", "red", "yellow", "blue", "magenta", "cyan"):
        full = _channels(tokens[f"{seed}_100"])
        light = _channels(tokens[f"{seed}_80"])
        lighter = _channels(tokens[f"{seed}_60"])
        assert all(a <= b <= c for a, b, c in zip(full, light, lighter))


def test_token_set_is_complete_and_ordered(seeds):
    tokens = generate_palette_tokens(seeds)

    assert len(tokens) == 28
    assert tuple(tokens) == PALETTE_TOKEN_NAMES
    assert PALETTE_TOKEN_CSS_VARIABLES["magenta_80"] == "--palette-magenta-80"


def test_black_and_white_alias_text_and_background(seeds):
    tokens = generate_palette_tokens(seeds)

    assert tokens["white"] == tokens["background"] == "169, 177, 214"
    assert tokens["black"] == tokens["text"] == "26, 27, 38"


def test_generation_is_deterministic(seeds):
    assert generate_palette_tokens(seeds) == generate_palette_tokens(seeds.model_copy())


def test_white_seed_stays_white():
    assert mix_with_white((255, 255, 255), 0.4) == (255, 255, 255)
    assert mix_with_white((0, 0, 0), 0.2) == (51, 51, 51)


def test_mix_rounds_half_up():
    # 1 + 254 * 0.5 = 128.0, 2 + 253 * 0.5 = 128.5
    assert mix_with_white((1, 2, 0), 0.5) == (128, 129, 128)


def test_hex_parsing():
    assert hex_to_rgb("#FFA500") == (255, 165, 0)
    assert hex_to_rgb("ffa500") == (255, 165, 0)

    with pytest.raises(ValueError):
        hex_to_rgb("#fff")


def test_seed_colors_are_normalized(seed_colors):
    seed_colors["primary_seed_hex"] = "9ECE6A"

    assert PaletteSeedHexColors(**seed_colors).primary_seed_hex == "#9ece6a"


def test_normalize_keeps_known_custom_palette(seeds):
    palette = build_local_custom_palette("Dusk", seeds, [])
    active = ActivePaletteSelection.custom(palette.id)

    assert normalize_active_palette(active, [palette]) == active


def test_normalize_falls_back_for_unknown_custom_palette():
    active = ActivePaletteSelection.custom("missing")

    assert normalize_active_palette(active, []) == ActivePaletteSelection.preset(ColorPalette.TOKYO_NIGHT)
    assert normalize_active_palette(None, []) == ActivePaletteSelection.preset(ColorPalette.TOKYO_NIGHT)


def test_local_palette_record(seeds):
    palette = build_local_custom_palette("  Dusk  ", seeds, [])

    assert palette.name == "Dusk"
    assert palette.generation_version == PALETTE_GENERATION_VERSION
    assert palette.generated_tokens == generate_palette_tokens(seeds)
    assert palette.seeds() == seeds


def test_local_palette_name_rules(seeds):
    existing = [build_local_custom_palette("Dusk", seeds, [])]

    with pytest.raises(InvalidPaletteError):
        build_local_custom_palette("   ", seeds, existing)

    with pytest.raises(DuplicatePaletteNameError):
        build_local_custom_palette("DUSK", seeds, existing)


def test_rebuild_may_keep_its_own_name(seeds):
    palette = build_local_custom_palette("Dusk", seeds, [])

    rebuilt = rebuild_local_custom_palette(palette, "dusk", seeds, [palette])

    assert rebuilt.id == palette.id
    assert rebuilt.name == "dusk"
    assert rebuilt.updated_at >= palette.updated_at
