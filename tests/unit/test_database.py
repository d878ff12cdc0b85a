"""Unit tests for database engine helpers."""

import json
import logging

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from attachment_hub.core.config import Settings
from attachment_hub.core.database import async_database_url, install_slow_query_logging


def _slow_query_events(caplog) -> list[dict]:
    return [
        json.loads(record.getMessage())
        for record in caplog.records
        if record.name == "attachment_hub.core.database"
    ]


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ("sqlite://", "sqlite+aiosqlite://"),
        ("postgresql+asyncpg://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
    ],
)
def test_async_database_url(url, expected):
    assert async_database_url(url) == expected


def test_slow_query_threshold_defaults_to_disabled():
    settings = Settings(database_url="sqlite://")

    assert settings.slow_query_ms == 0


def test_slow_query_threshold_is_read_from_environment(monkeypatch):
    monkeypatch.setenv("SLOW_QUERY_MS", "250")

    settings = Settings(database_url="sqlite://")

    assert settings.slow_query_ms == 250


@pytest.mark.asyncio
async def test_statements_over_threshold_are_logged(caplog):
    engine = create_async_engine("sqlite+aiosqlite://")
    install_slow_query_logging(engine, threshold_ms=0.000001)

    try:
        with caplog.at_level(logging.WARNING, logger="attachment_hub.core.database"):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    finally:
        await engine.dispose()

    events = _slow_query_events(caplog)
    assert any(
        event["event"] == "slow_query" and event["statement"] == "SELECT 1"
        for event in events
    )
    assert all(event["duration_ms"] >= 0 for event in events)


@pytest.mark.asyncio
async def test_statements_under_threshold_are_not_logged(caplog):
    engine = create_async_engine("sqlite+aiosqlite://")
    install_slow_query_logging(engine, threshold_ms=60_000)

    try:
        with caplog.at_level(logging.WARNING, logger="attachment_hub.core.database"):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    finally:
        await engine.dispose()

    assert _slow_query_events(caplog) == []
