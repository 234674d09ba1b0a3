"""Shared fixtures and fake collaborators."""

import asyncio
import json

import pytest

from digestigo.exceptions import ClassifierUnavailable, StorageWriteError
from digestigo.services import EntryStore, MemoryStore, TrackingService
from digestigo.utils.config import Settings

PIZZA_MESSAGE = "I ate pizza and got bloated"
PIZZA_REPLY = json.dumps({
    "categories": ["dietary", "trigger"],
    "foodCategory": "carbs",
    "keywords": ["pizza", "bloating"],
    "summaries": {
        "dietary": "Ate pizza",
        "trigger": "Pizza may trigger bloating - watch out",
    },
    "extractedSymptom": "bloating",
})


class CannedClassifier:
    """Replies with fixed text, in order, repeating the last one."""

    def __init__(self, *replies: str):
        self.replies = list(replies) or ["{}"]
        self.requests = []

    async def classify(self, request) -> str:
        self.requests.append(request)
        index = min(len(self.requests), len(self.replies)) - 1
        return self.replies[index]


class UnavailableClassifier:
    async def classify(self, request) -> str:
        raise ClassifierUnavailable("network down")


class BrokenClassifier:
    """Fails with something other than ClassifierUnavailable."""

    async def classify(self, request) -> str:
        raise RuntimeError("client misconfigured")


class SlowClassifier:
    """Waits for a signal before answering, so tests can act meanwhile."""

    def __init__(self, reply: str):
        self.reply = reply
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def classify(self, request) -> str:
        self.started.set()
        await self.release.wait()
        return self.reply


class BrokenStore(MemoryStore):
    """Reads work, writes fail."""

    async def set(self, key, value):
        raise StorageWriteError("disk full")

    async def remove(self, key):
        raise StorageWriteError("disk full")


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def entry_store(memory_store):
    return EntryStore(memory_store)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        data_dir=tmp_path,
        groq_api_key=None,
        anthropic_api_key=None,
        classifier_timeout=5.0,
    )


@pytest.fixture
def make_service(memory_store, settings):
    def _make(*replies: str) -> TrackingService:
        return TrackingService(
            store=memory_store,
            classifier=CannedClassifier(*replies),
            settings=settings,
        )
    return _make
