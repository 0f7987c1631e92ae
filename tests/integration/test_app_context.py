import asyncio

import pytest

from feedpoller.config import Settings
from feedpoller.context import AppContext
from feedpoller.main import parse_args
from feedpoller.scheduler import FeedScheduler
from feedpoller.storage.memory import MemoryFeedStore


@pytest.mark.asyncio
async def test_context_wires_components_and_shuts_down():
    context = AppContext(Settings())
    await context.initialize()

    assert isinstance(context.store, MemoryFeedStore)
    assert isinstance(context.scheduler, FeedScheduler)
    assert context.scheduler.store is context.store
    assert context.scheduler.fetcher is context.fetcher

    await context.shutdown()

    assert context.shutdown_event.is_set()


@pytest.mark.asyncio
async def test_shutdown_cancels_polling_task():
    context = AppContext(Settings())
    await context.initialize()

    task = context.start_polling()
    await asyncio.sleep(0)
    await context.shutdown()

    assert task.cancelled()
    assert not context.active_tasks


def test_parse_args_defaults():
    args = parse_args([])
    assert not args.once
    assert not args.no_api
    assert args.log_level is None


def test_parse_args_flags():
    args = parse_args(["--once", "--no-api", "--log-level", "DEBUG"])
    assert args.once
    assert args.no_api
    assert args.log_level == "DEBUG"
