"""
Render target for appearance state.

``DocumentElement`` mirrors the attributes and CSS custom properties that the
browser's ``document.documentElement`` should carry. The NiceGUI shell pushes
``to_javascript()`` to the page whenever appearance changes.
"""

import json
from typing import Dict, Optional

from auth_template.api.schemas import ActivePaletteSelection, CustomPalette
from auth_template.appearance.palette import PALETTE_TOKEN_CSS_VARIABLES
from auth_template.appearance.preferences import DEFAULT_PALETTE, ResolvedTheme

THEME_ATTRIBUTE = "data-theme"
PALETTE_ATTRIBUTE = "data-palette"
CUSTOM_PALETTE_ATTRIBUTE_VALUE = "custom"


class DocumentElement:
    """In-memory stand-in for the page's root element."""

    def __init__(self):
        self.attributes: Dict[str, str] = {}
        self.style: Dict[str, str] = {}

    def set_attribute(self, name: str, value: str) -> None:
        self.attributes[name] = value

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def set_property(self, name: str, value: str) -> None:
        self.style[name] = value

    def remove_property(self, name: str) -> None:
        self.style.pop(name, None)

    def to_javascript(self) -> str:
        """
        Build a script that reproduces this element's state in the browser.

        Palette variables not currently set are removed so a deselected custom
        palette leaves nothing behind.
        """
        lines = ["const root = document.documentElement;"]

        for name, value in self.attributes.items():
            lines.append(f"root.setAttribute({json.dumps(name)}, {json.dumps(value)});")

        for variable in PALETTE_TOKEN_CSS_VARIABLES.values():
            if variable in self.style:
                lines.append(
                    f"root.style.setProperty({json.dumps(variable)}, "
                    f"{json.dumps(self.style[variable])});"
                )
            else:
                lines.append(f"root.style.removeProperty({json.dumps(variable)});")

        return "\n".join(lines)


def apply_theme(target: Optional[DocumentElement], theme: ResolvedTheme) -> None:
    if target is None:
        return

    target.set_attribute(THEME_ATTRIBUTE, ResolvedTheme(theme).value)


def clear_custom_palette_tokens(target: DocumentElement) -> None:
    for variable in PALETTE_TOKEN_CSS_VARIABLES.values():
        target.remove_property(variable)


def apply_palette(
    target: Optional[DocumentElement],
    active: ActivePaletteSelection,
    custom_palette: Optional[CustomPalette] = None,
) -> None:
    """
    Apply the active palette.

    Args:
        target: Render target, or None to skip.
        active: Normalized active selection.
        custom_palette: The referenced record when ``active`` is custom.
            Without it the default preset is applied.
    """
    if target is None:
        return

    if active.palette_type == "custom" and custom_palette is not None:
        target.set_attribute(PALETTE_ATTRIBUTE, CUSTOM_PALETTE_ATTRIBUTE_VALUE)
        for token, variable in PALETTE_TOKEN_CSS_VARIABLES.items():
            value = custom_palette.generated_tokens.get(token)
            if value is None:
                target.remove_property(variable)
            else:
                target.set_property(variable, value)
        return

    preset = active.preset_palette or DEFAULT_PALETTE
    target.set_attribute(PALETTE_ATTRIBUTE, preset.value)
    clear_custom_palette_tokens(target)
