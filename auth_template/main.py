"""
Application entrypoint and route definitions.

Registers the pages, bootstraps the session on startup and starts the
NiceGUI app.
"""

from nicegui import app, ui

from auth_template.config import settings
from auth_template.layouts.page_shell import page_shell
from auth_template.pages.login_page import show_login_page
from auth_template.pages.settings_appearance_page import show_settings_appearance_page
from auth_template.state.app_state import state
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)


async def _bootstrap_session() -> None:
    await state.session.bootstrap()
    await state.appearance.wait_for_session_sync()


def _shutdown() -> None:
    state.appearance.close()
    state.client.close()


app.on_startup(_bootstrap_session)
app.on_shutdown(_shutdown)


@ui.page("/")
async def root() -> None:
    """Root route – redirects by session state."""
    await page_shell()
    target = "/settings/appearance" if state.session.is_logged_in else "/login"
    logger.debug("Root route accessed", extra={"redirect": target})
    ui.navigate.to(target)


@ui.page("/login")
async def login() -> None:
    """Login page route."""
    await page_shell()

    if state.session.is_logged_in:
        ui.navigate.to("/settings/appearance")
        return

    logger.debug("Login page accessed")
    show_login_page()


@ui.page("/settings/appearance")
async def settings_appearance() -> None:
    """Appearance settings route. Requires a session."""
    await page_shell()

    if not state.session.is_logged_in:
        logger.warning("Unauthorized access to appearance settings; redirecting to login")
        ui.navigate.to("/login")
        return

    logger.debug("Appearance settings page accessed")
    show_settings_appearance_page()


def start_app() -> None:
    """
    Start the NiceGUI application.
    """
    logger.info("Starting client application", extra={"api": settings.API_BASE_URL})

    ui.run(
        title=settings.APP_TITLE,
        reload=False,
        storage_secret=settings.STORAGE_SECRET,
    )


if __name__ in {"__main__", "__mp_main__"}:
    start_app()
