"""
Appearance settings page UI.

Theme mode, preset palettes and custom palettes built from seed colors.
"""

from functools import partial

from nicegui import ui
from requests import RequestException

from auth_template.api.errors import ApiError, ValidationFailedError
from auth_template.api.schemas import SEED_FIELDS
from auth_template.appearance.palette import PaletteError
from auth_template.appearance.preferences import ColorPalette, ThemeMode
from auth_template.state.app_state import state
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

THEME_OPTIONS = {
    ThemeMode.SYSTEM.value: "System Default",
    ThemeMode.LIGHT.value: "Light Mode",
    ThemeMode.DARK.value: "Dark Mode",
}

PRESET_OPTIONS = {
    palette.value: palette.value.replace("-", " ").title() for palette in ColorPalette
}

# Starting point for the custom palette form
DEFAULT_SEEDS = {
    "background_seed_hex": "#1a1b26",
    "text_seed_hex": "#a9b1d6",
    "primary_seed_hex": "#7aa2f7",
    "secondary_seed_hex": "#bb9af7",
    "green_seed_hex": "#9ece6a",
    "red_seed_hex": "#f7768e",
    "yellow_seed_hex": "#e0af68",
    "blue_seed_hex": "#7dcfff",
    "magenta_seed_hex": "#ff007c",
    "cyan_seed_hex": "#2ac3de",
}


def _seed_label(field: str) -> str:
    return field.replace("_seed_hex", "").capitalize()


async def _run(action, success_message: str) -> None:
    try:
        await action()
        _custom_palette_list.refresh()
        ui.notify(success_message, type="positive")
    except ValidationFailedError as exc:
        for field, message in exc.field_errors.items():
            ui.notify(f"{field}: {message}", type="warning")
    except PaletteError as exc:
        ui.notify(str(exc), type="warning")
    except (ApiError, RequestException):
        logger.exception("Appearance update failed")
        ui.notify("Unable to save appearance settings", type="negative")


def show_settings_appearance_page() -> None:
    """Render the appearance settings panel."""
    appearance = state.appearance
    user = state.session.user

    with ui.column().classes("w-full max-w-3xl mx-auto p-6 gap-6"):
        ui.label("Preferences").classes("text-sm uppercase opacity-60")
        ui.label("Appearance").classes("text-3xl font-bold")
        if user is not None:
            ui.label(f"Signed in as {user.email}").classes("opacity-70")

        # -------- THEME --------
        with ui.card().classes("w-full"):
            ui.label("Theme Preference").classes("text-xl font-semibold")
            ui.toggle(
                THEME_OPTIONS,
                value=appearance.mode.value,
                on_change=lambda e: appearance.set_mode(ThemeMode(e.value)),
            )

        # -------- PRESETS --------
        with ui.card().classes("w-full"):
            ui.label("Palette").classes("text-xl font-semibold")
            ui.select(
                PRESET_OPTIONS,
                value=appearance.palette.value,
                on_change=lambda e: _run(
                    lambda: appearance.select_preset(ColorPalette(e.value)),
                    "Palette updated",
                ),
            ).classes("w-64")

        # -------- CUSTOM PALETTES --------
        with ui.card().classes("w-full"):
            ui.label("Custom Palettes").classes("text-xl font-semibold")
            _custom_palette_list()

            name = ui.input(label="Palette name").classes("w-64")
            seed_inputs = {}
            with ui.grid(columns=5).classes("gap-3"):
                for field in SEED_FIELDS:
                    seed_inputs[field] = ui.color_input(
                        label=_seed_label(field), value=DEFAULT_SEEDS[field]
                    )

            ui.button(
                "Create palette",
                on_click=lambda: _run(
                    lambda: appearance.create_custom_palette(
                        name.value,
                        {field: element.value for field, element in seed_inputs.items()},
                    ),
                    "Custom palette created",
                ),
            )

        ui.button("Log out", on_click=_handle_logout).props("flat")


@ui.refreshable
def _custom_palette_list() -> None:
    appearance = state.appearance
    active = appearance.active_custom_palette

    if not appearance.custom_palettes:
        ui.label("No custom palettes yet.").classes("opacity-60")
        return

    for palette in appearance.custom_palettes:
        with ui.row().classes("items-center gap-3"):
            ui.label(palette.name)
            if active is not None and active.id == palette.id:
                ui.badge("Active")
            else:
                ui.button(
                    "Use",
                    on_click=partial(_select_custom_palette, palette.id),
                ).props("flat dense")


async def _select_custom_palette(palette_id: str) -> None:
    await _run(
        lambda: state.appearance.select_custom_palette(palette_id),
        "Palette updated",
    )


async def _handle_logout() -> None:
    if await state.session.log_out(state.notifications):
        ui.navigate.to("/login")
