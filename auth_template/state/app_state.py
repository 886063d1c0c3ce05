from auth_template.api.http_client import ApiClient
from auth_template.appearance.render import DocumentElement
from auth_template.appearance.storage import JsonFileStorage
from auth_template.appearance.system_theme import StaticSystemTheme
from auth_template.config import settings
from auth_template.state.appearance_state import AppearanceController
from auth_template.state.notifications import NotificationCenter
from auth_template.state.session import SessionController


class AppState:
    def __init__(self):
        self.client = ApiClient()
        self.notifications = NotificationCenter()
        self.session = SessionController(self.client)

        # Appearance
        self.system_theme = StaticSystemTheme()
        self.document = DocumentElement()
        self.appearance = AppearanceController(
            self.client,
            storage=JsonFileStorage(settings.APPEARANCE_STORAGE_PATH),
            system_theme=self.system_theme,
            target=self.document,
            server_palettes=settings.SERVER_PALETTES,
        )
        self.appearance.bind_session(self.session, self.notifications)

        #  UI / FLOW STATE
        self.logging_in = False


state = AppState()
