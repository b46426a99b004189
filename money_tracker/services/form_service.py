"""Form handlers: validate, call the API, notify, reload"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from money_tracker.core.exceptions import (
    AppException,
    NetworkError,
    SessionExpiredError,
    ValidationError,
)
from money_tracker.schemas.auth import Credentials
from money_tracker.schemas.forms import AddPersonForm, MoneyForm
from money_tracker.schemas.person import Person
from money_tracker.schemas.transaction import ReverseResult
from money_tracker.services.api_client import ApiClient
from money_tracker.services.dashboard_service import DashboardService
from money_tracker.services.notification_service import Notifier
from money_tracker.services.session_service import SessionStore
from money_tracker.utils.decimal_utils import format_amount

logger = logging.getLogger(__name__)

FormT = TypeVar("FormT", bound=BaseModel)

CREDENTIALS_MISSING = "Enter both username and password"
USERNAME_INVALID = "Username must be 3-50 characters: letters, digits, '_' or '-'"
NAME_MISSING = "Enter a name"
NAME_TOO_LONG = "Name cannot exceed 100 characters"
MONEY_INVALID = "Select person and enter a valid amount"
DESCRIPTION_TOO_LONG = "Description cannot exceed 255 characters"


class FormService:
    """
    Handlers behind the login, register, add-person, send and receive forms,
    plus delete, reverse and logout actions.

    Each handler validates its input, calls the API, records a notification
    and reloads the dashboard. Failures are notified and re-raised.
    """

    def __init__(
        self,
        client: ApiClient,
        session: SessionStore,
        notifier: Notifier,
        dashboard: DashboardService,
    ):
        self.client = client
        self.session = session
        self.notifier = notifier
        self.dashboard = dashboard

    @property
    def currency(self) -> str:
        return self.dashboard.settings.currency_symbol

    # ----- helpers -----

    def _validate(self, model: Type[FormT], data: Dict[str, Any], messages: Dict[str, str], default: str) -> FormT:
        """
        Validate form data, turning the first failing field into a message.

        Raises:
            ValidationError: With the message registered for the failing field
        """
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            fields = [str(err["loc"][0]) for err in e.errors() if err.get("loc")]
            message = next((messages[f] for f in fields if f in messages), default)
            self.notifier.error(message)
            raise ValidationError(message, details=e.errors()) from e

    def _fail(self, action: str, error: AppException) -> None:
        # The client already surfaced session expiry and network failures
        if isinstance(error, (SessionExpiredError, NetworkError)):
            return
        self.notifier.error(f"{action}: {error.message}")

    async def _reload(self, action: str) -> None:
        try:
            await self.dashboard.reload()
        except AppException as e:
            logger.warning("Reload after %s failed: %s", action, e.message)

    def _credentials(self, username: Optional[str], password: Optional[str]) -> Credentials:
        if not (username or "").strip() or not (password or "").strip():
            self.notifier.error(CREDENTIALS_MISSING)
            raise ValidationError(CREDENTIALS_MISSING)
        return self._validate(
            Credentials,
            {"username": username, "password": password},
            {"username": USERNAME_INVALID, "password": CREDENTIALS_MISSING},
            CREDENTIALS_MISSING,
        )

    # ----- auth -----

    async def login(self, username: Optional[str], password: Optional[str]) -> str:
        """
        Log in and start a session.

        Returns:
            The bearer token
        """
        credentials = self._credentials(username, password)
        try:
            token = await self.client.login(credentials.username, credentials.password)
        except AppException as e:
            self.notifier.error(f"Login failed: {e.message}")
            raise

        self.session.start(token, credentials.username)
        self.notifier.success("Login successful! Redirecting...")
        return token

    async def register(self, username: Optional[str], password: Optional[str]) -> None:
        credentials = self._credentials(username, password)
        try:
            await self.client.register(credentials.username, credentials.password)
        except AppException as e:
            self.notifier.error(f"Registration failed: {e.message}")
            raise

        self.notifier.success("Registration successful! You can now log in.")

    def logout(self) -> None:
        self.session.clear()
        self.dashboard.clear()
        self.notifier.success("Logged out successfully!")

    # ----- people -----

    async def add_person(self, name: Optional[str]) -> Optional[Person]:
        form = self._validate(
            AddPersonForm,
            {"name": name},
            {"name": NAME_MISSING if not (name or "").strip() else NAME_TOO_LONG},
            NAME_MISSING,
        )
        try:
            person = await self.client.add_person(form.name)
        except AppException as e:
            self._fail("Failed to add person", e)
            raise

        self.notifier.success(f'Person "{form.name}" added successfully!')
        await self._reload("add person")
        return person

    async def send(self, name: Optional[str], amount: Any, description: Optional[str] = None) -> None:
        form = self._money_form(name, amount, description)
        self.dashboard.mark_active(form.name)
        try:
            await self.client.send_money(form.name, form.amount, form.description)
        except AppException as e:
            self._fail("Failed to send money", e)
            raise

        self.notifier.success(f"Sent {format_amount(form.amount, self.currency)} to {form.name}")
        await self._reload("send")

    async def receive(self, name: Optional[str], amount: Any, description: Optional[str] = None) -> None:
        form = self._money_form(name, amount, description)
        self.dashboard.mark_active(form.name)
        try:
            await self.client.receive_money(form.name, form.amount, form.description)
        except AppException as e:
            self._fail("Failed to receive money", e)
            raise

        self.notifier.success(f"Received {format_amount(form.amount, self.currency)} from {form.name}")
        await self._reload("receive")

    def _money_form(self, name: Optional[str], amount: Any, description: Optional[str]) -> MoneyForm:
        return self._validate(
            MoneyForm,
            {"name": name, "amount": amount, "description": description},
            {"name": MONEY_INVALID, "amount": MONEY_INVALID, "description": DESCRIPTION_TOO_LONG},
            MONEY_INVALID,
        )

    async def delete_person(self, name: str) -> None:
        """Delete a person together with their transactions"""
        try:
            await self.client.delete_person(name)
        except AppException as e:
            self._fail("Failed to delete person", e)
            raise

        self.notifier.success(f"Deleted {name}")
        await self._reload("delete")

    # ----- transactions -----

    async def reverse(self, transaction_id: Union[int, str]) -> ReverseResult:
        """Reverse a transaction; the dashboard is patched in place, not reloaded"""
        try:
            result = await self.dashboard.reverse(transaction_id)
        except AppException as e:
            self._fail("Failed to reverse transaction", e)
            raise

        self.notifier.success("Transaction reversed successfully!")
        return result
