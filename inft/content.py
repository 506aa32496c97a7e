"""
INFT - Content Storage Abstraction

This module defines the storage backend interface used by the metadata
manager, the result returned by a store operation, and storage errors.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class StorageError(Exception):
    """Base exception for content storage failures."""
    pass


class StorageConnectionError(StorageError):
    """Raised when a storage backend cannot be reached."""
    pass


class ContentNotFoundError(StorageError):
    """Raised when requested content does not exist in storage."""
    pass


class StorageType(str, Enum):
    """Content storage types."""
    ZEROG = "zerog"
    DATA_URI = "data_uri"


@dataclass
class StoreResult:
    """Result of storing content in a backend."""

    root_hash: str
    size: int
    storage_type: StorageType = StorageType.ZEROG
    uri: Optional[str] = None
    tx_hash: Optional[str] = None
    stored_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        result = {
            "root_hash": self.root_hash,
            "size": self.size,
            "storage_type": self.storage_type.value,
            "stored_at": self.stored_at.isoformat(),
            "metadata": self.metadata
        }

        if self.uri:
            result["uri"] = self.uri
        if self.tx_hash:
            result["tx_hash"] = self.tx_hash

        return result


class ContentStorage(ABC):
    """Abstract base class for content storage systems."""

    @abstractmethod
    def connect(self) -> None:
        """Establish and verify the backend connection."""
        pass

    @abstractmethod
    def store(self, data: bytes) -> StoreResult:
        """Store content and return the store result."""
        pass

    @abstractmethod
    def retrieve(self, root_hash: str) -> bytes:
        """Retrieve content by root hash."""
        pass

    @abstractmethod
    def exists(self, root_hash: str) -> bool:
        """Check if content exists in the backend."""
        pass

    @abstractmethod
    def get_storage_type(self) -> StorageType:
        """Get storage type identifier."""
        pass
