"""Unit tests for per-request log suppression."""

import asyncio
import logging

import pytest

from backend.app.utils.logging import get_logger, logs_silenced, silence_logs

logger = get_logger("backend.app.tests.silence")


def test_silenced_block_drops_records(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    with silence_logs():
        logger.info("secret upload")
        assert logs_silenced()

    logger.info("after upload")

    messages = [r.getMessage() for r in caplog.records]
    assert "secret upload" not in messages
    assert "after upload" in messages


def test_disabled_silence_is_a_no_op(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    with silence_logs(enabled=False):
        logger.info("regular upload")
        assert not logs_silenced()

    assert "regular upload" in [r.getMessage() for r in caplog.records]


def test_flag_reset_after_exception() -> None:
    with pytest.raises(RuntimeError):
        with silence_logs():
            raise RuntimeError("boom")

    assert not logs_silenced()


@pytest.mark.asyncio
async def test_silence_does_not_leak_to_concurrent_tasks(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    entered = asyncio.Event()
    release = asyncio.Event()

    async def secure_request() -> None:
        with silence_logs():
            entered.set()
            await release.wait()
            logger.info("secure request")

    async def regular_request() -> None:
        await entered.wait()
        logger.info("regular request")
        release.set()

    await asyncio.gather(secure_request(), regular_request())

    messages = [r.getMessage() for r in caplog.records]
    assert "regular request" in messages
    assert "secure request" not in messages
