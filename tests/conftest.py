"""Pytest fixtures and configuration"""

import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Dict, List

import httpx
import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from jose import JWTError, jwt
from pydantic import BaseModel

from money_tracker.config import Settings
from money_tracker.services.tracker import TrackerContext

TEST_SECRET = "test-secret-key-for-the-fake-backend-000"
TEST_API_URL = "http://backend.test"


def make_token(username: str = "alice", expires_in: int = 3600) -> str:
    """Create a signed token like the backend would"""
    payload = {"sub": username, "exp": int(time.time()) + expires_in}
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")


class _Credentials(BaseModel):
    username: str
    password: str


class FakeBackend:
    """
    In-memory stand-in for the Money Tracker REST API.

    Balances are always the signed sum of non-reversed
    transactions, RECEIVE positive and SEND negative.
    """

    def __init__(self):
        self.users: Dict[str, str] = {}
        self.people: Dict[str, dict] = {}
        self.transactions: List[dict] = []
        self.next_id = 1
        # status codes to answer with before handling the next requests
        self.failures: List[int] = []
        self.requests: List[str] = []
        self.app = self._build_app()

    def add_user(self, username: str, password: str) -> None:
        self.users[username] = password

    def add_person(self, name: str, balance: Decimal = Decimal("0")) -> dict:
        person = {
            "name": name,
            "balance": balance,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        self.people[name] = person
        return person

    def add_transaction(self, name: str, tx_type: str, amount: Decimal, description: str = "") -> dict:
        if name not in self.people:
            self.add_person(name)
        tx = {
            "id": self.next_id,
            "type": tx_type,
            "amount": amount,
            "description": description or None,
            "date": datetime.now(timezone.utc).isoformat(),
            "reversed": False,
            "person": {"name": name},
        }
        self.next_id += 1
        self.transactions.append(tx)
        sign = 1 if tx_type == "RECEIVE" else -1
        self.people[name]["balance"] += sign * amount
        return tx

    @staticmethod
    def _person_json(person: dict) -> dict:
        return {**person, "balance": float(person["balance"])}

    @staticmethod
    def _transaction_json(tx: dict) -> dict:
        return {**tx, "amount": float(tx["amount"])}

    def _build_app(self) -> FastAPI:
        backend = self
        app = FastAPI()

        @app.middleware("http")
        async def inject_failures(request: Request, call_next):
            backend.requests.append(f"{request.method} {request.url.path}?{request.url.query}")
            if backend.failures:
                code = backend.failures.pop(0)
                return PlainTextResponse("Injected failure", status_code=code)
            return await call_next(request)

        def current_user(request: Request) -> str:
            header = request.headers.get("Authorization", "")
            if not header.startswith("Bearer "):
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
            try:
                payload = jwt.decode(header[7:], TEST_SECRET, algorithms=["HS256"])
            except JWTError:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
            return payload["sub"]

        @app.post("/api/auth/login")
        async def login(body: _Credentials):
            if backend.users.get(body.username) != body.password:
                return PlainTextResponse("Invalid username or password", status_code=401)
            return {"token": make_token(body.username)}

        @app.post("/api/auth/register")
        async def register(body: _Credentials):
            if body.username in backend.users:
                return JSONResponse({"message": "Username already exists"}, status_code=409)
            backend.users[body.username] = body.password
            return {"username": body.username}

        @app.get("/api/people/all")
        async def all_people(user: str = Depends(current_user)):
            return [backend._person_json(p) for p in backend.people.values()]

        @app.post("/api/people/add")
        async def add(name: str, user: str = Depends(current_user)):
            if name in backend.people:
                return JSONResponse({"message": f"Person {name} already exists"}, status_code=409)
            return backend._person_json(backend.add_person(name))

        @app.post("/api/people/send")
        async def send(name: str, amount: Decimal, description: str = "", user: str = Depends(current_user)):
            if name not in backend.people:
                return JSONResponse({"message": f"Person {name} not found"}, status_code=404)
            backend.add_transaction(name, "SEND", amount, description)
            return backend._person_json(backend.people[name])

        @app.post("/api/people/receive")
        async def receive(name: str, amount: Decimal, description: str = "", user: str = Depends(current_user)):
            if name not in backend.people:
                return JSONResponse({"message": f"Person {name} not found"}, status_code=404)
            backend.add_transaction(name, "RECEIVE", amount, description)
            return backend._person_json(backend.people[name])

        @app.delete("/api/people/{name}")
        async def delete(name: str, user: str = Depends(current_user)):
            if name not in backend.people:
                return JSONResponse({"message": f"Person {name} not found"}, status_code=404)
            del backend.people[name]
            backend.transactions = [t for t in backend.transactions if t["person"]["name"] != name]
            return PlainTextResponse("Deleted")

        @app.get("/api/transactions/all")
        async def all_transactions(user: str = Depends(current_user)):
            return [backend._transaction_json(t) for t in backend.transactions]

        @app.post("/api/transactions/reverse/{tx_id}")
        async def reverse(tx_id: int, user: str = Depends(current_user)):
            tx = next((t for t in backend.transactions if t["id"] == tx_id), None)
            if tx is None:
                return JSONResponse({"message": "Transaction not found"}, status_code=404)
            if tx["reversed"]:
                return JSONResponse({"message": "Transaction already reversed"}, status_code=400)
            tx["reversed"] = True
            person = backend.people[tx["person"]["name"]]
            sign = 1 if tx["type"] == "RECEIVE" else -1
            person["balance"] -= sign * tx["amount"]
            return {
                "person": backend._person_json(person),
                "transaction": backend._transaction_json(tx),
            }

        return app

    @property
    def transport(self) -> httpx.ASGITransport:
        return httpx.ASGITransport(app=self.app)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at the fake backend with instant retries"""
    return Settings(
        api_base_url=TEST_API_URL,
        max_retries=2,
        retry_backoff_seconds=0,
        request_timeout_seconds=5,
        session_file=tmp_path / "session.json",
    )


@pytest.fixture
def backend() -> FakeBackend:
    """Fresh fake backend with one registered user"""
    fake = FakeBackend()
    fake.add_user("alice", "secret123")
    return fake


@pytest_asyncio.fixture
async def tracker(settings: Settings, backend: FakeBackend) -> AsyncGenerator[TrackerContext, None]:
    """Client context wired to the fake backend, not logged in"""
    async with TrackerContext(settings, transport=backend.transport) as ctx:
        yield ctx


@pytest_asyncio.fixture
async def logged_in_tracker(tracker: TrackerContext) -> TrackerContext:
    """Client context with an active session for alice"""
    await tracker.forms.login("alice", "secret123")
    return tracker


@pytest.fixture
def token_factory():
    """Factory for backend-signed tokens"""
    return make_token
