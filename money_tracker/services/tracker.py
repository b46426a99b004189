"""Wiring of the client-side services"""

from pathlib import Path
from typing import Callable, Optional

import httpx

from money_tracker.config import Settings, get_settings
from money_tracker.services.api_client import ApiClient
from money_tracker.services.dashboard_service import DashboardService
from money_tracker.services.form_service import FormService
from money_tracker.services.notification_service import Notification, Notifier
from money_tracker.services.session_service import SessionStore


class TrackerContext:
    """
    One user's client state: session, notifications, API client,
    dashboard and form handlers.

    Use as an async context manager so the HTTP client is closed.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_path: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        listener: Optional[Callable[[Notification], None]] = None,
    ):
        self.settings = settings or get_settings()
        self.session = SessionStore(session_path)
        self.notifier = Notifier(listener)
        self.client = ApiClient(self.session, self.notifier, self.settings, transport=transport)
        self.dashboard = DashboardService(self.client, self.notifier, self.settings)
        self.client.on_expire = self.dashboard.clear
        self.forms = FormService(self.client, self.session, self.notifier, self.dashboard)

    async def __aenter__(self) -> "TrackerContext":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.client.aclose()
