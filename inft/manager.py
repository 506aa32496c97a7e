"""
INFT - Metadata Manager

This module provides the metadata storage facade for Intelligent NFTs: it
serializes agent metadata, encodes it under a fresh per-record key, persists
it to 0G storage and returns a locator, hash and key for minting. When remote
storage fails the encoded payload is embedded in a data: URI instead.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from inft_crypto.codec import (
    PayloadCodec,
    get_codec,
    generate_encryption_key,
    key_from_hex,
    key_to_hex,
)
from inft_crypto.exceptions import DecodeError
from inft_crypto.hashing import metadata_hash

from .content import ContentStorage, StorageError
from .gateway import (
    LocatorScheme,
    create_fallback_uri,
    create_zerog_uri,
    parse_locator,
    retrieve_from_fallback,
)
from .metadata import (
    AgentMetadata,
    MetadataValidator,
    create_test_metadata,
    increment_version,
    utc_timestamp,
    validate_ai_model_data,
)
from .zerog import ZeroGConfig, ZeroGStorage


@dataclass
class AgentStorageResult:
    """Locator, hash and key for a stored agent record."""

    encrypted_uri: str
    metadata_hash: str
    encryption_key: str
    data_descriptions: List[str] = field(default_factory=list)
    storage_hash: Optional[str] = None
    # Location reported by the storage node, informational only
    storage_uri: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        """True when the payload is embedded in the locator."""
        return self.storage_hash is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        result = {
            "encrypted_uri": self.encrypted_uri,
            "metadata_hash": self.metadata_hash,
            "data_descriptions": self.data_descriptions,
            "encryption_key": self.encryption_key
        }

        if self.storage_hash:
            result["storage_hash"] = self.storage_hash
        if self.storage_uri:
            result["storage_uri"] = self.storage_uri

        return result


class MetadataManager:
    """Creates, retrieves and updates encrypted AI agent metadata."""

    def __init__(self, rpc_url: Optional[str] = None, storage_url: Optional[str] = None,
                 storage: Optional[ContentStorage] = None,
                 codec: Optional[PayloadCodec] = None):
        """
        Initialize metadata manager.

        Args:
            rpc_url: Chain RPC endpoint for the default 0G client
            storage_url: 0G storage service URL for the default 0G client
            storage: Storage backend to use instead of the default 0G client
            codec: Payload codec (defaults to the base64 placeholder codec)
        """
        if storage is None:
            config = ZeroGConfig(rpc_url=rpc_url)
            if storage_url:
                config.storage_url = storage_url
            storage = ZeroGStorage(config)

        self.storage = storage
        self.codec = codec or get_codec()
        self.validator = MetadataValidator()
        self.initialized = False
        self.logger = logging.getLogger(__name__)

    def initialize(self) -> None:
        """Connect the storage backend once."""
        if self.initialized:
            return

        try:
            self.storage.connect()
            self.initialized = True
        except Exception as e:
            self.logger.error(f"Failed to initialize 0G Storage: {e}")
            raise

    def create_ai_agent(self, ai_model_data: Mapping, owner_public_key: str) -> AgentStorageResult:
        """
        Create an AI agent with encrypted metadata storage.

        Args:
            ai_model_data: Model data (model, weights, description, capabilities, version)
            owner_public_key: Owner's public key or address

        Returns:
            AgentStorageResult with locator, metadata hash and hex encryption key

        Raises:
            ValueError: If the model data is not a mapping or the owner is empty
        """
        if not isinstance(ai_model_data, Mapping):
            raise ValueError(f"AI model data must be a mapping, got {type(ai_model_data).__name__}")
        if not owner_public_key:
            raise ValueError("Owner public key is required")

        metadata = AgentMetadata.from_model_data(ai_model_data, owner_public_key)
        return self.store_metadata(metadata)

    def retrieve_ai_agent(self, encrypted_uri: str, encryption_key: str,
                          validate: bool = False) -> Dict[str, Any]:
        """
        Retrieve and decrypt AI agent metadata.

        Args:
            encrypted_uri: Locator returned by create_ai_agent()
            encryption_key: Hex encryption key returned alongside it
            validate: Also validate the record against the agent schema

        Returns:
            Decrypted metadata record

        Raises:
            UnsupportedLocatorError: If the locator scheme is not recognised
            InvalidKeyError: If the key is not valid hex
            DecodeError: If the payload cannot be decoded to a JSON object
            StorageError: If remote retrieval fails
        """
        try:
            scheme, payload = parse_locator(encrypted_uri)

            if scheme == LocatorScheme.ZEROG:
                self.initialize()
                encrypted_data = self.storage.retrieve(payload)
            else:
                encrypted_data = retrieve_from_fallback(payload)

            decrypted = self.codec.decrypt(encrypted_data, key_from_hex(encryption_key))
            record = self._parse_record(decrypted)

            if validate:
                self.validator.validate(record)

            return record

        except Exception as e:
            self.logger.error(f"Failed to retrieve AI agent metadata: {e}")
            raise

    def update_ai_agent(self, original_uri: str, original_key: str,
                        updates: Mapping) -> AgentStorageResult:
        """
        Update existing AI agent metadata.

        The stored record is shallow-merged with updates, its version patch
        number bumped and the result stored under a new locator and key.

        Args:
            original_uri: Original locator
            original_key: Original hex encryption key
            updates: Fields to overwrite

        Returns:
            AgentStorageResult for the updated record
        """
        original = self.retrieve_ai_agent(original_uri, original_key)
        return self.store_metadata(self.apply_update(original, updates))

    def apply_update(self, record: Mapping, updates: Mapping) -> AgentMetadata:
        """
        Merge updates into a retrieved record without storing it.

        The patch version is bumped, updatedAt set to now, and the
        original owner and createdAt kept.
        """
        original = AgentMetadata.from_dict(record)

        updated = original.merge(updates)
        updated.version = increment_version(original.version)
        updated.updated_at = utc_timestamp()
        updated.owner = original.owner
        updated.created_at = original.created_at

        self.logger.info(f"Updating agent metadata {original.version} -> {updated.version}")
        return updated

    def validate_ai_model_data(self, ai_model_data: Mapping) -> bool:
        """Validate AI model data structure."""
        return validate_ai_model_data(ai_model_data)

    def create_test_metadata(self) -> Dict[str, Any]:
        """Create metadata for testing."""
        return create_test_metadata()

    def store_metadata(self, metadata: AgentMetadata) -> AgentStorageResult:
        """Encode and store a record, falling back to a data: URI if storage fails."""
        data = metadata.to_json()
        data_hash = metadata_hash(data)

        encryption_key = generate_encryption_key()
        encrypted_data = self.codec.encrypt(data.encode('utf-8'), encryption_key)

        try:
            self.initialize()
            storage_result = self.storage.store(encrypted_data)

            return AgentStorageResult(
                encrypted_uri=create_zerog_uri(storage_result.root_hash),
                metadata_hash=data_hash,
                data_descriptions=[metadata.description],
                encryption_key=key_to_hex(encryption_key),
                storage_hash=storage_result.root_hash,
                storage_uri=storage_result.uri
            )

        except StorageError as e:
            self.logger.warning(f"Failed to store data with 0G storage, embedding payload in URI: {e}")

            return AgentStorageResult(
                encrypted_uri=create_fallback_uri(encrypted_data),
                metadata_hash=data_hash,
                data_descriptions=[metadata.description],
                encryption_key=key_to_hex(encryption_key)
            )

    def _parse_record(self, decrypted: bytes) -> Dict[str, Any]:
        try:
            record = json.loads(decrypted.decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"Decrypted metadata is not valid JSON: {e}")

        if not isinstance(record, dict):
            raise DecodeError(f"Decrypted metadata is not a JSON object: {type(record).__name__}")

        return record
