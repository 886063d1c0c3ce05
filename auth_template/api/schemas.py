"""
Wire schemas for the auth and appearance endpoints.
"""

import re
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, field_validator

from auth_template.appearance.preferences import ColorPalette, parse_color_palette

HEX_COLOR_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6})$")

SEED_FIELDS = (
    "background_seed_hex",
    "text_seed_hex",
    "primary_seed_hex",
    "secondary_seed_hex",
    "green_seed_hex",
    "red_seed_hex",
    "yellow_seed_hex",
    "blue_seed_hex",
    "magenta_seed_hex",
    "cyan_seed_hex",
)


def normalize_hex_color(value: str) -> str:
    """Return ``value`` as lowercase ``#rrggbb`` or raise ValueError."""
    if not isinstance(value, str):
        raise ValueError("Color must be a hex string")

    match = HEX_COLOR_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid hex color: {value!r}")

    return f"#{match.group(1).lower()}"


# --------------------
# Auth
# --------------------


class AuthUser(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    email_confirmed: bool
    created_at: datetime
    updated_at: datetime


class CurrentUserResponse(BaseModel):
    user: AuthUser


class MessageResponse(BaseModel):
    message: str


class SignUpRequest(BaseModel):
    first_name: str
    last_name: str
    email: str
    password: str
    confirm: str


class SignUpResponse(MessageResponse):
    user_id: str


class LogInRequest(BaseModel):
    email: str
    password: str
    remember_me: bool = False


class LogInResponse(MessageResponse):
    user_id: str


class ConfirmEmailRequest(BaseModel):
    email: str
    auth_code: str


class ForgotPasswordRequest(BaseModel):
    email: str


class VerifyForgotPasswordRequest(BaseModel):
    email: str
    auth_code: str


class SetPasswordRequest(BaseModel):
    password: str
    confirm: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
    confirm: str


class RequestEmailChangeRequest(BaseModel):
    new_email: str


class ConfirmEmailChangeRequest(BaseModel):
    new_email: str
    auth_code: str


# --------------------
# Appearance
# --------------------


class PaletteSeedHexColors(BaseModel):
    """Ten seed colors from which a custom palette is generated."""

    background_seed_hex: str
    text_seed_hex: str
    primary_seed_hex: str
    secondary_seed_hex: str
    green_seed_hex: str
    red_seed_hex: str
    yellow_seed_hex: str
    blue_seed_hex: str
    magenta_seed_hex: str
    cyan_seed_hex: str

    @field_validator(*SEED_FIELDS, mode="before")
    @classmethod
    def _normalize_seed(cls, value):
        return normalize_hex_color(value)


class CustomPalette(PaletteSeedHexColors):
    id: str
    name: str
    generated_tokens: Dict[str, str]
    generation_version: int
    created_at: datetime
    updated_at: datetime

    def seeds(self) -> PaletteSeedHexColors:
        return PaletteSeedHexColors(
            **{field: getattr(self, field) for field in SEED_FIELDS}
        )


class ActivePaletteSelection(BaseModel):
    """Which palette, preset or custom, is currently applied."""

    palette_type: Literal["preset", "custom"]
    preset_palette: Optional[ColorPalette] = None
    custom_palette_id: Optional[str] = None

    @field_validator("preset_palette", mode="before")
    @classmethod
    def _map_legacy_preset(cls, value):
        if value is None:
            return None
        # unknown ids are left to enum validation
        return parse_color_palette(value) or value

    @classmethod
    def preset(cls, palette: ColorPalette) -> "ActivePaletteSelection":
        return cls(palette_type="preset", preset_palette=palette)

    @classmethod
    def custom(cls, palette_id: str) -> "ActivePaletteSelection":
        return cls(palette_type="custom", custom_palette_id=palette_id)

    def to_request(self) -> Dict[str, str]:
        if self.palette_type == "custom":
            return {"palette_type": "custom", "custom_palette_id": self.custom_palette_id}

        return {"palette_type": "preset", "preset_palette": self.preset_palette.value}


class AppearanceSettings(BaseModel):
    active_palette: ActivePaletteSelection
    custom_palettes: List[CustomPalette] = []


class CustomPaletteRequest(PaletteSeedHexColors):
    name: str


class CreateCustomPaletteResponse(MessageResponse):
    palette: CustomPalette
    active_palette: ActivePaletteSelection


class UpdateCustomPaletteResponse(MessageResponse):
    palette: CustomPalette


class SetActivePaletteResponse(MessageResponse):
    active_palette: ActivePaletteSelection
