"""
Per-page wiring between client state and the browser.

Pushes appearance changes to ``document.documentElement``, reports the
browser's ``prefers-color-scheme`` back to the system theme source, and
turns notifications into toasts.
"""

from nicegui import ui

from auth_template.appearance.preferences import SYSTEM_COLOR_SCHEME_QUERY, ResolvedTheme
from auth_template.state.app_state import state
from auth_template.state.notifications import Notification, NotificationType
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_THEME_EVENT = "system-theme"

_NOTIFY_TYPES = {
    NotificationType.SUCCESS: "positive",
    NotificationType.ERROR: "negative",
    NotificationType.WARNING: "warning",
    NotificationType.INFO: "info",
}

_SYSTEM_THEME_SCRIPT = f"""
const query = window.matchMedia({SYSTEM_COLOR_SCHEME_QUERY!r});
emitEvent({SYSTEM_THEME_EVENT!r}, query.matches);
query.addEventListener("change", (event) => emitEvent({SYSTEM_THEME_EVENT!r}, event.matches));
"""


async def page_shell() -> None:
    """
    Attach appearance and notification bridges to the current page.

    Listeners are removed when the browser tab disconnects. Must be
    awaited from an async page function.
    """
    client = ui.context.client
    dark_mode = ui.dark_mode()

    def push_appearance(controller) -> None:
        dark_mode.set_value(controller.resolved_theme is ResolvedTheme.DARK)
        client.run_javascript(controller.target.to_javascript())

    def show_notification(notification: Notification) -> None:
        with client:
            ui.notify(
                notification.message,
                type=_NOTIFY_TYPES[notification.type],
                caption=notification.title,
            )
        state.notifications.remove(notification.id)

    def on_system_theme(event) -> None:
        state.system_theme.report_dark_match(bool(event.args))

    remove_appearance = state.appearance.add_listener(push_appearance)
    remove_notifications = state.notifications.add_listener(show_notification)

    ui.on(SYSTEM_THEME_EVENT, on_system_theme)

    def detach() -> None:
        logger.debug("Page disconnected; removing listeners")
        remove_appearance()
        remove_notifications()

    client.on_disconnect(detach)

    dark_mode.set_value(state.appearance.resolved_theme is ResolvedTheme.DARK)

    await client.connected()
    client.run_javascript(_SYSTEM_THEME_SCRIPT + state.document.to_javascript())
