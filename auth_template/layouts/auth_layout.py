"""
Fullscreen centered layout.

Wraps login and other anonymous screens in a single card that follows the
active palette through the ``--palette-*`` CSS variables.
"""

from typing import Callable

from nicegui import ui

from auth_template.config import settings
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)


def auth_layout(title: str, content_fn: Callable[[], None]) -> None:
    """
    Render a centered card layout.

    Args:
        title: Heading shown at the top of the card.
        content_fn: Callback that renders the card body.

    Raises:
        RuntimeError: If the body fails to render.
    """
    logger.debug("Rendering auth layout", extra={"title": title})

    with ui.column().classes("w-screen min-h-screen items-center justify-center"):
        with ui.card().classes("w-[380px] p-8 shadow-2xl rounded-2xl"):
            ui.label(title).classes("text-2xl font-bold mb-1")
            ui.label(f"Welcome to {settings.APP_TITLE}").classes("text-sm opacity-70 mb-6")

            try:
                content_fn()
            except Exception as exc:
                logger.exception("Failed to render layout content", extra={"title": title})
                ui.label("Something went wrong. Please refresh the page.").classes(
                    "text-red-400"
                )
                raise RuntimeError("Auth layout rendering failed") from exc
