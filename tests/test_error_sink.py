"""Tests for the error notification side channel."""

import asyncio

import pytest
from loguru import logger

from schema_store.error_sink import ErrorSink


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(messages.append, level="ERROR")
    yield messages
    logger.remove(handler_id)


def test_callback_receives_error():
    received = []
    sink = ErrorSink(received.append)
    error = ValueError("boom")

    sink.on_uncaught(error)

    assert received == [error]


def test_logs_without_callback(log_messages):
    ErrorSink().on_uncaught(ValueError("boom"))

    assert len(log_messages) == 1
    assert "no error callback configured: boom" in str(log_messages[0])


def test_callback_result_is_ignored():
    sink = ErrorSink(lambda error: "ignored")
    sink.on_uncaught(ValueError("boom"))


def test_failing_callback_is_logged(log_messages):
    def callback(error):
        raise RuntimeError("callback broke")

    ErrorSink(callback).on_uncaught(ValueError("boom"))

    assert any("Error callback failed while handling: boom" in str(m) for m in log_messages)


@pytest.mark.asyncio
async def test_async_callback_is_scheduled():
    received = []

    async def callback(error):
        await asyncio.sleep(0)
        received.append(error)

    sink = ErrorSink(callback)
    error = ValueError("boom")
    sink.on_uncaught(error)
    assert received == []

    await sink.drain()
    assert received == [error]


@pytest.mark.asyncio
async def test_failing_async_callback_is_logged(log_messages):
    async def callback(error):
        raise RuntimeError("async callback broke")

    sink = ErrorSink(callback)
    sink.on_uncaught(ValueError("boom"))
    await sink.drain()
    # let done callbacks run
    await asyncio.sleep(0)

    assert any("Async error callback failed" in str(m) for m in log_messages)


@pytest.mark.asyncio
async def test_drain_without_pending():
    await ErrorSink().drain()
