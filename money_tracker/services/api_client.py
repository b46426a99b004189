"""Authenticated client for the Money Tracker REST API"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from money_tracker.config import Settings, get_settings
from money_tracker.core.exceptions import (
    ApiError,
    AuthenticationError,
    ConflictError,
    NetworkError,
    NotFoundError,
    SessionExpiredError,
    ValidationError,
)
from money_tracker.core.security import is_token_expired
from money_tracker.schemas.auth import Token
from money_tracker.schemas.person import Person
from money_tracker.schemas.transaction import ReverseResult, Transaction
from money_tracker.services.notification_service import Notifier
from money_tracker.services.session_service import SessionStore

logger = logging.getLogger(__name__)

PEOPLE_API = "/api/people"
TRANSACTION_API = "/api/transactions"
AUTH_API = "/api/auth"

SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."
NOT_LOGGED_IN_MESSAGE = "Not logged in. Please login first."
MALFORMED_RESPONSE_MESSAGE = "Malformed response from server"

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_error_text(response: httpx.Response) -> str:
    """
    Pull a human readable error message out of an error response.

    Args:
        response: Non-2xx response

    Returns:
        Message from the JSON body if present, else the raw body text
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("message", "detail", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value

    return response.text.strip()


class ApiClient:
    """
    Client for the people, transactions and auth endpoints.

    Authenticated calls attach the session's bearer token, refuse to send
    a token whose `exp` claim has passed, and end the session on 401/403.
    Transport failures and 5xx responses are retried with exponential
    backoff.
    """

    def __init__(
        self,
        session: SessionStore,
        notifier: Notifier,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_expire: Optional[Callable[[], None]] = None,
    ):
        self.session = session
        self.notifier = notifier
        self.on_expire = on_expire
        self.settings = settings or get_settings()
        self._client = httpx.AsyncClient(
            base_url=self.settings.resolved_api_url,
            timeout=self.settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ----- transport -----

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Send a request, retrying transport failures and 5xx responses.

        Returns:
            The last response received (possibly a 5xx once retries run out)

        Raises:
            NetworkError: If every attempt failed at the transport level
        """
        attempts = self.settings.max_retries + 1

        for attempt in range(attempts):
            is_last = attempt == attempts - 1
            try:
                response = await self._client.request(
                    method, path, params=params, json=json, headers=headers
                )
            except httpx.TransportError as e:
                if is_last:
                    reason = "Request timed out" if isinstance(e, httpx.TimeoutException) else str(e) or type(e).__name__
                    raise NetworkError(reason) from e
                await self._backoff(attempt, method, path, type(e).__name__)
                continue

            if response.status_code >= 500 and not is_last:
                await self._backoff(attempt, method, path, f"HTTP {response.status_code}")
                continue

            return response

        # attempts is always >= 1
        raise NetworkError("No request attempted")

    async def _backoff(self, attempt: int, method: str, path: str, reason: str) -> None:
        delay = self.settings.retry_backoff_seconds * (2 ** attempt)
        logger.warning(
            "%s %s failed (%s); retry %d/%d in %.2fs",
            method, path, reason, attempt + 1, self.settings.max_retries, delay,
        )
        if delay > 0:
            await asyncio.sleep(delay)

    def _expire_session(self) -> SessionExpiredError:
        self.session.clear()
        if self.on_expire is not None:
            self.on_expire()
        self.notifier.error(SESSION_EXPIRED_MESSAGE)
        return SessionExpiredError(SESSION_EXPIRED_MESSAGE, redirect_to=self.settings.login_path)

    async def auth_fetch(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """
        Send an authenticated request.

        Raises:
            SessionExpiredError: If the token is expired or the server answers 401/403
            NetworkError: If the backend cannot be reached
        """
        token = self.session.token
        if not token:
            # Already logged out; a concurrent request may have ended the session
            raise SessionExpiredError(NOT_LOGGED_IN_MESSAGE, redirect_to=self.settings.login_path)
        if is_token_expired(token, self.settings.token_expiry_leeway_seconds):
            logger.info("Token expired locally; not sending %s %s", method, path)
            raise self._expire_session()

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }

        try:
            response = await self._send(method, path, params=params, json=json, headers=headers)
        except NetworkError as e:
            self.notifier.error(f"Network error: {e.message}")
            raise

        if response.status_code in (401, 403):
            raise self._expire_session()

        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response, default_message: str) -> None:
        """Map an error response onto the exception hierarchy"""
        if response.is_success:
            return

        message = extract_error_text(response) or default_message
        status = response.status_code

        if status in (400, 422):
            raise ValidationError(message)
        if status == 401:
            raise AuthenticationError(message)
        if status == 404:
            raise NotFoundError(message)
        if status == 409:
            raise ConflictError(message)
        raise ApiError(message, status_code=status)

    @staticmethod
    def _parse(model: Type[ModelT], data: Any) -> ModelT:
        """
        Validate a response body against a schema.

        Raises:
            ApiError: If the body does not match the schema
        """
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.warning("Malformed %s in response: %s", model.__name__, e)
            raise ApiError(MALFORMED_RESPONSE_MESSAGE, status_code=502, details=e.errors()) from e

    @classmethod
    def _parse_list(cls, model: Type[ModelT], data: Any) -> List[ModelT]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ApiError(MALFORMED_RESPONSE_MESSAGE, status_code=502)
        return [cls._parse(model, item) for item in data]

    @staticmethod
    def _json_or_none(response: httpx.Response) -> Optional[Any]:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # ----- auth -----

    async def login(self, username: str, password: str) -> str:
        """
        Exchange credentials for a bearer token.

        Returns:
            The token

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        response = await self._send(
            "POST", f"{AUTH_API}/login", json={"username": username, "password": password}
        )
        if response.status_code in (401, 403):
            raise AuthenticationError(extract_error_text(response) or "Invalid login")
        self._raise_for_status(response, "Invalid login")

        data = self._json_or_none(response)
        if not isinstance(data, dict) or not data.get("token"):
            raise AuthenticationError("Login response did not contain a token")
        return self._parse(Token, data).token

    async def register(self, username: str, password: str) -> None:
        response = await self._send(
            "POST", f"{AUTH_API}/register", json={"username": username, "password": password}
        )
        self._raise_for_status(response, "Registration failed")

    # ----- people -----

    async def list_people(self) -> List[Person]:
        response = await self.auth_fetch("GET", f"{PEOPLE_API}/all")
        self._raise_for_status(response, "Failed to load people")
        return self._parse_list(Person, self._json_or_none(response))

    async def add_person(self, name: str) -> Optional[Person]:
        response = await self.auth_fetch("POST", f"{PEOPLE_API}/add", params={"name": name})
        self._raise_for_status(response, "Failed to add person")
        data = self._json_or_none(response)
        return self._parse(Person, data) if isinstance(data, dict) else None

    async def send_money(self, name: str, amount: Decimal, description: Optional[str] = None) -> None:
        await self._move_money("send", name, amount, description)

    async def receive_money(self, name: str, amount: Decimal, description: Optional[str] = None) -> None:
        await self._move_money("receive", name, amount, description)

    async def _move_money(self, action: str, name: str, amount: Decimal, description: Optional[str]) -> None:
        params = {"name": name, "amount": str(amount), "description": description or ""}
        response = await self.auth_fetch("POST", f"{PEOPLE_API}/{action}", params=params)
        self._raise_for_status(response, f"Failed to {action} money")

    async def delete_person(self, name: str) -> None:
        response = await self.auth_fetch("DELETE", f"{PEOPLE_API}/{quote(name, safe='')}")
        self._raise_for_status(response, "Failed to delete person")

    # ----- transactions -----

    async def list_transactions(self) -> List[Transaction]:
        response = await self.auth_fetch("GET", f"{TRANSACTION_API}/all")
        self._raise_for_status(response, "Failed to load transactions")
        return self._parse_list(Transaction, self._json_or_none(response))

    async def reverse_transaction(self, transaction_id: Union[int, str]) -> ReverseResult:
        response = await self.auth_fetch("POST", f"{TRANSACTION_API}/reverse/{transaction_id}")
        self._raise_for_status(response, "Failed to reverse transaction")
        data = self._json_or_none(response)
        return self._parse(ReverseResult, data) if isinstance(data, dict) else ReverseResult()

    async def load_all(self) -> Tuple[List[Person], List[Transaction]]:
        """Fetch people and transactions concurrently"""
        people, transactions = await asyncio.gather(
            self.list_people(), self.list_transactions()
        )
        return people, transactions
