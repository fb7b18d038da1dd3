"""Shared fixtures: in-memory database, fake Expo transport and fake FCM sender."""

from __future__ import annotations

import json
import os
from types import SimpleNamespace

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ.pop("FCM_CREDENTIALS_PATH", None)
os.environ.pop("FCM_PROJECT_ID", None)

from app.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from app.application.use_cases.notifications import NotificationDispatcher  # noqa: E402
from app.domain.entities import User  # noqa: E402
from app.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from app.infrastructure.notifications import ExpoPushAdapter, FcmPushAdapter  # noqa: E402
from app.infrastructure.notifications import fcm as fcm_module  # noqa: E402
from app.infrastructure.repositories import UserRepository  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure every test starts from empty tables."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    return SessionLocal


@pytest.fixture
def create_user():
    """Insert a user and return the stored entity."""

    def _create(
        email: str,
        *,
        push_token: str | None = None,
        groups: list[str] | None = None,
        role: str = "user",
    ) -> User:
        with SessionLocal() as session:
            return UserRepository(session).create(
                User(
                    id=None,
                    name=email.split("@")[0].title(),
                    email=email,
                    role=role,
                    push_token=push_token,
                    user_groups=list(groups or []),
                )
            )

    return _create


@pytest.fixture
def stored_token():
    """Return the push token currently stored for a user id."""

    def _stored(user_id: str) -> str | None:
        with SessionLocal() as session:
            user = UserRepository(session).get(user_id)
            assert user is not None
            return user.push_token

    return _stored


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code: int = 200, payload=None, content: bytes | None = None):
        self.status_code = status_code
        self._payload = payload
        if content is None:
            content = json.dumps(payload).encode() if payload is not None else b""
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeExpoSession:
    """Record Expo push requests and answer them.

    Queued ``responses`` (or exceptions) are consumed first. Afterwards every
    message gets the ticket registered for its address in ``tickets``, or an
    ``ok`` ticket.
    """

    def __init__(self) -> None:
        self.requests: list[dict] = []
        self.responses: list = []
        self.tickets: dict[str, dict] = {}
        self.closed = False

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        tickets = [
            self.tickets.get(message["to"], {"status": "ok", "id": f"ticket-{index}"})
            for index, message in enumerate(json)
        ]
        return FakeResponse(200, {"data": tickets})

    def close(self) -> None:
        self.closed = True

    @property
    def sent_addresses(self) -> list[str]:
        return [message["to"] for request in self.requests for message in request["json"]]


class FakeFcmSender:
    """Replacement for ``messaging.send_each_for_multicast``.

    Tokens listed in ``errors`` fail with the given exception; ``raise_error``
    fails the whole request.
    """

    def __init__(self) -> None:
        self.calls: list[SimpleNamespace] = []
        self.errors: dict[str, Exception] = {}
        self.raise_error: Exception | None = None

    def __call__(self, multicast, dry_run=False, app=None):
        self.calls.append(SimpleNamespace(message=multicast, app=app))
        if self.raise_error is not None:
            raise self.raise_error
        responses = [
            SimpleNamespace(
                success=token not in self.errors,
                exception=self.errors.get(token),
                message_id=None if token in self.errors else f"msg-{token}",
            )
            for token in multicast.tokens
        ]
        return SimpleNamespace(responses=responses)

    @property
    def sent_tokens(self) -> list[str]:
        return [token for call in self.calls for token in call.message.tokens]


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def expo_session() -> FakeExpoSession:
    return FakeExpoSession()


@pytest.fixture
def expo_adapter(expo_session) -> ExpoPushAdapter:
    return ExpoPushAdapter(session=expo_session, access_token="expo-secret")


@pytest.fixture
def fcm_sender(monkeypatch) -> FakeFcmSender:
    sender = FakeFcmSender()
    monkeypatch.setattr(fcm_module.messaging, "send_each_for_multicast", sender)
    return sender


@pytest.fixture
def firebase_app() -> SimpleNamespace:
    return SimpleNamespace(name="festival-push-test", project_id="festival-test")


@pytest.fixture
def fcm_adapter(firebase_app, fcm_sender) -> FcmPushAdapter:
    return FcmPushAdapter(firebase_app)


@pytest.fixture
def dispatcher(session_factory, expo_adapter, fcm_adapter) -> NotificationDispatcher:
    return NotificationDispatcher(
        session_factory=session_factory, expo=expo_adapter, fcm=fcm_adapter
    )
