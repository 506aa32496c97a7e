"""
Pytest configuration and fixtures for INFT tests.
"""

import os

import pytest

from inft.content import (
    ContentNotFoundError,
    ContentStorage,
    StorageConnectionError,
    StorageError,
    StorageType,
    StoreResult,
)
from inft.manager import MetadataManager
from inft.metadata import create_test_metadata
from inft_crypto.hashing import keccak256


class InMemoryStorage(ContentStorage):
    """Storage backend double keeping blobs in a dictionary."""

    def __init__(self, fail_connect: bool = False, fail_store: bool = False):
        self.fail_connect = fail_connect
        self.fail_store = fail_store
        self.blobs = {}
        self.connect_calls = 0
        self.store_calls = 0
        self.retrieve_calls = 0

    def connect(self) -> None:
        self.connect_calls += 1
        if self.fail_connect:
            raise StorageConnectionError("storage node offline")

    def store(self, data: bytes) -> StoreResult:
        self.store_calls += 1
        if self.fail_store:
            raise StorageError("upload rejected")

        root_hash = keccak256(data)
        self.blobs[root_hash] = data
        return StoreResult(root_hash=root_hash, size=len(data))

    def retrieve(self, root_hash: str) -> bytes:
        self.retrieve_calls += 1
        if root_hash not in self.blobs:
            raise ContentNotFoundError(f"no content for {root_hash}")
        return self.blobs[root_hash]

    def exists(self, root_hash: str) -> bool:
        return root_hash in self.blobs

    def get_storage_type(self) -> StorageType:
        return StorageType.ZEROG


@pytest.fixture
def owner_key():
    """Owner address used across tests."""
    return "0x" + "ab" * 20


@pytest.fixture
def sample_model_data():
    """Sample AI model data."""
    return create_test_metadata()


@pytest.fixture
def memory_storage():
    """Healthy in-memory storage backend."""
    return InMemoryStorage()


@pytest.fixture
def failing_storage():
    """Storage backend whose uploads always fail."""
    return InMemoryStorage(fail_store=True)


@pytest.fixture
def offline_storage():
    """Storage backend that cannot be connected to."""
    return InMemoryStorage(fail_connect=True)


@pytest.fixture
def manager(memory_storage):
    """Metadata manager backed by healthy storage."""
    return MetadataManager(storage=memory_storage)


@pytest.fixture
def fallback_manager(failing_storage):
    """Metadata manager whose remote storage always fails."""
    return MetadataManager(storage=failing_storage)


@pytest.fixture
def clean_config_env(tmp_path, monkeypatch):
    """Isolate configuration lookup from the developer's machine."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in list(os.environ):
        if key.startswith("INFT_"):
            monkeypatch.delenv(key)
    return tmp_path
