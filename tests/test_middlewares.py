"""Tests for the bot middlewares."""
from datetime import datetime

import pytest
from aiogram.types import Chat, Message, User
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nuzdex.bot.middlewares.database import STORAGE_ERROR, DatabaseMiddleware
from nuzdex.bot.middlewares.identity import IdentityMiddleware


def make_message(sender: User | None) -> Message:
    return Message(
        message_id=1,
        date=datetime(2024, 1, 1),
        chat=Chat(id=1, type="private"),
        from_user=sender,
        text="/runs",
    )


async def call_middleware(event) -> dict:
    seen: dict = {}

    async def handler(event, data):
        seen.update(data)
        return "handled"

    result = await IdentityMiddleware()(handler, event, {})
    assert result == "handled"
    return seen


async def test_user_id_from_sender():
    data = await call_middleware(make_message(User(id=42, is_bot=False, first_name="Ash")))
    assert data["user_id"] == "42"


async def test_bots_have_no_identity():
    data = await call_middleware(make_message(User(id=7, is_bot=True, first_name="Rotom")))
    assert data["user_id"] is None


async def test_missing_sender_has_no_identity():
    data = await call_middleware(make_message(None))
    assert data["user_id"] is None


class TestDatabaseMiddleware:
    @pytest.fixture
    def middleware(self, engine):
        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        return DatabaseMiddleware(session_factory=factory)

    @pytest.fixture
    def replies(self, monkeypatch):
        sent: list[str] = []

        async def answer(self, text, **kwargs):
            sent.append(text)

        monkeypatch.setattr(Message, "answer", answer)
        return sent

    async def test_session_passed_to_handler(self, middleware):
        async def handler(event, data):
            result = await data["session"].execute(text("SELECT 1"))
            return result.scalar_one()

        assert await middleware(handler, make_message(None), {}) == 1

    async def test_database_error_is_reported_and_reraised(self, middleware, replies):
        async def handler(event, data):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(OperationalError):
            await middleware(handler, make_message(None), {})
        assert replies == [STORAGE_ERROR]

    async def test_other_errors_pass_through_silently(self, middleware, replies):
        async def handler(event, data):
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            await middleware(handler, make_message(None), {})
        assert replies == []
