"""
Custom palette generation.

Turns ten seed colors into the fixed RGB token set consumed by the
stylesheet, and keeps active-palette selections consistent with the set of
known custom palettes.
"""

import math
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from auth_template.api.schemas import (
    ActivePaletteSelection,
    CustomPalette,
    PaletteSeedHexColors,
    normalize_hex_color,
)
from auth_template.appearance.preferences import DEFAULT_PALETTE
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

PALETTE_GENERATION_VERSION = 1

# Seeds that produce 100/80/60 shades, in token order
SHADED_SEEDS = (
    "primary",
    "secondary",
    "green",
    "red",
    "yellow",
    "blue",
    "magenta",
    "cyan",
)

# Shade level -> fraction mixed toward white
SHADE_MIX_RATIOS = (
    (100, 0.0),
    (80, 0.2),
    (60, 0.4),
)

PALETTE_TOKEN_NAMES: Tuple[str, ...] = ("background", "text", "black", "white") + tuple(
    f"{seed}_{level}" for seed in SHADED_SEEDS for level, _ in SHADE_MIX_RATIOS
)

PALETTE_TOKEN_CSS_VARIABLES: Dict[str, str] = {
    token: f"--palette-{token.replace('_', '-')}" for token in PALETTE_TOKEN_NAMES
}

Rgb = Tuple[int, int, int]


class PaletteError(RuntimeError):
    """Raised when a custom palette operation is invalid."""


class PaletteNotFoundError(PaletteError):
    """Raised when a custom palette id is not in the known set."""


class DuplicatePaletteNameError(PaletteError):
    """Raised when a local custom palette name is already taken."""


class InvalidPaletteError(PaletteError):
    """Raised when a custom palette name or seed set is unusable."""


def hex_to_rgb(value: str) -> Rgb:
    normalized = normalize_hex_color(value)
    return (
        int(normalized[1:3], 16),
        int(normalized[3:5], 16),
        int(normalized[5:7], 16),
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def mix_with_white(rgb: Rgb, ratio: float) -> Rgb:
    """
    Mix a color toward white.

    Args:
        rgb: Source channels.
        ratio: Fraction of white, 0.0 keeps the color unchanged.

    Returns:
        Rgb: Mixed channels, each rounded half-up and clamped to [0, 255].
    """
    return tuple(
        min(255, max(0, _round_half_up(channel + (255 - channel) * ratio)))
        for channel in rgb
    )


def format_rgb(rgb: Rgb) -> str:
    return ", ".join(str(channel) for channel in rgb)


def generate_palette_tokens(seeds: PaletteSeedHexColors) -> Dict[str, str]:
    """
    Generate the CSS token set for a custom palette.

    Background and text yield one token each, duplicated as the ``white``
    and ``black`` aliases. Every other seed yields ``_100``, ``_80`` and
    ``_60`` shades (0 %, 20 % and 40 % toward white).

    Args:
        seeds: Seed colors.

    Returns:
        Dict[str, str]: 28 tokens in ``PALETTE_TOKEN_NAMES`` order, each an
        ``"R, G, B"`` string.
    """
    background = format_rgb(hex_to_rgb(seeds.background_seed_hex))
    text = format_rgb(hex_to_rgb(seeds.text_seed_hex))

    tokens: Dict[str, str] = {
        "background": background,
        "text": text,
        "black": text,
        "white": background,
    }

    for seed in SHADED_SEEDS:
        rgb = hex_to_rgb(getattr(seeds, f"{seed}_seed_hex"))
        for level, ratio in SHADE_MIX_RATIOS:
            tokens[f"{seed}_{level}"] = format_rgb(mix_with_white(rgb, ratio))

    return tokens


def find_custom_palette(
    palette_id: Optional[str], custom_palettes: Iterable[CustomPalette]
) -> Optional[CustomPalette]:
    for palette in custom_palettes:
        if palette.id == palette_id:
            return palette
    return None


def normalize_active_palette(
    active: Optional[ActivePaletteSelection],
    custom_palettes: List[CustomPalette],
) -> ActivePaletteSelection:
    """
    Make an active selection safe to render.

    A custom selection must reference a palette in ``custom_palettes``; a
    preset selection must name a preset. Anything else becomes the default
    preset.
    """
    if active is None:
        return ActivePaletteSelection.preset(DEFAULT_PALETTE)

    if active.palette_type == "custom":
        if find_custom_palette(active.custom_palette_id, custom_palettes):
            return ActivePaletteSelection.custom(active.custom_palette_id)

        logger.warning(
            "Active custom palette missing; falling back to default preset",
            extra={"custom_palette_id": active.custom_palette_id},
        )
        return ActivePaletteSelection.preset(DEFAULT_PALETTE)

    return ActivePaletteSelection.preset(active.preset_palette or DEFAULT_PALETTE)


def _validate_name(
    name: str,
    existing: Iterable[CustomPalette],
    exclude_id: Optional[str] = None,
) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidPaletteError("Palette name is required")

    for palette in existing:
        if palette.id != exclude_id and palette.name.strip().lower() == cleaned.lower():
            raise DuplicatePaletteNameError(
                f"A palette named {cleaned!r} already exists"
            )

    return cleaned


def build_local_custom_palette(
    name: str,
    seeds: PaletteSeedHexColors,
    existing: Iterable[CustomPalette],
) -> CustomPalette:
    """
    Create a custom palette record without the server.

    Produces the same schema the server returns so rendering does not
    depend on where the record came from.

    Raises:
        InvalidPaletteError: Name is blank.
        DuplicatePaletteNameError: Name already used by another palette.
    """
    cleaned = _validate_name(name, existing)
    now = datetime.now(timezone.utc)

    return CustomPalette(
        id=str(uuid.uuid4()),
        name=cleaned,
        generated_tokens=generate_palette_tokens(seeds),
        generation_version=PALETTE_GENERATION_VERSION,
        created_at=now,
        updated_at=now,
        **seeds.model_dump(),
    )


def rebuild_local_custom_palette(
    palette: CustomPalette,
    name: str,
    seeds: PaletteSeedHexColors,
    existing: Iterable[CustomPalette],
) -> CustomPalette:
    """Apply new name and seeds to a local record, keeping id and creation time."""
    cleaned = _validate_name(name, existing, exclude_id=palette.id)

    return CustomPalette(
        id=palette.id,
        name=cleaned,
        generated_tokens=generate_palette_tokens(seeds),
        generation_version=PALETTE_GENERATION_VERSION,
        created_at=palette.created_at,
        updated_at=datetime.now(timezone.utc),
        **seeds.model_dump(),
    )
