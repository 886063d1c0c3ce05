"""
Appearance API client.

Server-side storage of the active palette and custom palettes. Only valid
for an authenticated session.
"""

from auth_template.api.http_client import ApiClient, parse_json
from auth_template.api.schemas import (
    ActivePaletteSelection,
    AppearanceSettings,
    CreateCustomPaletteResponse,
    CustomPaletteRequest,
    PaletteSeedHexColors,
    SetActivePaletteResponse,
    UpdateCustomPaletteResponse,
)
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

APPEARANCE_PATH = "/appearance"


def _palette_payload(name: str, seeds: PaletteSeedHexColors) -> dict:
    return CustomPaletteRequest(name=name, **seeds.model_dump()).model_dump()


async def get_appearance_settings(*, client: ApiClient) -> AppearanceSettings:
    """
    Fetch the active palette and the user's custom palettes.

    Returns:
        AppearanceSettings: Server state, not yet normalized.
    """
    logger.info("Fetching appearance settings")
    response = await client.get(APPEARANCE_PATH)
    return AppearanceSettings.model_validate(parse_json(response))


async def set_active_palette(
    *, client: ApiClient, selection: ActivePaletteSelection
) -> ActivePaletteSelection:
    """Persist the active palette selection."""
    logger.info(
        "Updating active palette",
        extra={"palette_type": selection.palette_type},
    )
    response = await client.put(
        f"{APPEARANCE_PATH}/active-palette",
        json=selection.to_request(),
    )
    return SetActivePaletteResponse.model_validate(parse_json(response)).active_palette


async def create_custom_palette(
    *, client: ApiClient, name: str, seeds: PaletteSeedHexColors
) -> CreateCustomPaletteResponse:
    """
    Create a custom palette on the server.

    Returns:
        CreateCustomPaletteResponse: The stored palette and the resulting
        active selection.
    """
    logger.info("Creating custom palette", extra={"palette_name": name})
    response = await client.post(
        f"{APPEARANCE_PATH}/palettes",
        json=_palette_payload(name, seeds),
    )
    return CreateCustomPaletteResponse.model_validate(parse_json(response))


async def update_custom_palette(
    *, client: ApiClient, palette_id: str, name: str, seeds: PaletteSeedHexColors
) -> UpdateCustomPaletteResponse:
    """Replace the name and seeds of an existing custom palette."""
    logger.info("Updating custom palette", extra={"palette_id": palette_id})
    response = await client.put(
        f"{APPEARANCE_PATH}/palettes/{palette_id}",
        json=_palette_payload(name, seeds),
    )
    return UpdateCustomPaletteResponse.model_validate(parse_json(response))
