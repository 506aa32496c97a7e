"""
INFT - Intelligent NFT Metadata System

This package provides off-chain metadata handling for ERC-7857 Intelligent
NFTs including the agent metadata record, 0G storage integration, data: URI
fallback locators and the metadata manager facade.
"""

# Core metadata
from .metadata import (
    AgentMetadata,
    AgentMetadataSchema,
    MetadataValidator,
    increment_version,
    validate_ai_model_data,
    create_test_metadata,
)

# Storage
from .content import (
    ContentStorage,
    StoreResult,
    StorageType,
    StorageError,
    StorageConnectionError,
    ContentNotFoundError,
)

from .zerog import ZeroGConfig, ZeroGStorage

# Locators
from .gateway import (
    LocatorScheme,
    UnsupportedLocatorError,
    create_fallback_uri,
    create_zerog_uri,
    parse_locator,
    retrieve_from_fallback,
)

from .manager import MetadataManager, AgentStorageResult

__version__ = "1.0.0"

__all__ = [
    # Metadata components
    "AgentMetadata",
    "AgentMetadataSchema",
    "MetadataValidator",
    "increment_version",
    "validate_ai_model_data",
    "create_test_metadata",

    # Storage
    "ContentStorage",
    "StoreResult",
    "StorageType",
    "StorageError",
    "StorageConnectionError",
    "ContentNotFoundError",
    "ZeroGConfig",
    "ZeroGStorage",

    # Locators
    "LocatorScheme",
    "UnsupportedLocatorError",
    "create_fallback_uri",
    "create_zerog_uri",
    "parse_locator",
    "retrieve_from_fallback",

    # Manager
    "MetadataManager",
    "AgentStorageResult",
]
