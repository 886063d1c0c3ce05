"""
Login page UI.
"""

from nicegui import ui
from requests import RequestException

from auth_template.api.errors import ApiError, UnauthorizedError, ValidationFailedError
from auth_template.layouts.auth_layout import auth_layout
from auth_template.state.app_state import state
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

AFTER_LOGIN_PATH = "/settings/appearance"


def show_login_page() -> None:
    """Render the login form."""

    def content() -> None:
        email = ui.input(label="Email", placeholder="you@example.com").props(
            "outlined dense"
        ).classes("w-full")

        password = ui.input(
            label="Password",
            password=True,
            password_toggle_button=True,
        ).props("outlined dense").classes("w-full mt-3")

        remember_me = ui.checkbox("Remember me").classes("mt-2")

        login_btn = ui.button(
            "Log in",
            on_click=lambda: _handle_login(
                email.value,
                password.value,
                remember_me.value,
                login_btn,
            ),
        ).classes("w-full mt-5")

    auth_layout("Log in", content)


async def _handle_login(email: str, password: str, remember_me: bool, button) -> None:
    """
    Log in and move on to the settings page.
    """
    if state.logging_in:
        return

    if not email or not password:
        ui.notify("Please enter both email and password", type="warning")
        return

    state.logging_in = True
    button.disable()

    try:
        await state.session.log_in(email, password, remember_me=remember_me)
        ui.notify("Login successful", type="positive")
        ui.navigate.to(AFTER_LOGIN_PATH)

    except ValidationFailedError as exc:
        for field, message in exc.field_errors.items():
            ui.notify(f"{field}: {message}", type="warning")

    except UnauthorizedError:
        ui.notify("Invalid email or password", type="negative")

    except (ApiError, RequestException) as exc:
        logger.exception("Login failed")
        ui.notify(str(exc) or "Login failed", type="negative")

    finally:
        state.logging_in = False
        button.enable()
