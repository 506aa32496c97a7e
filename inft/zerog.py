"""
INFT - 0G Decentralized Storage Integration

This module provides an HTTP client for a 0G storage node/indexer used to
persist encrypted agent metadata, with connection checks against both the
storage service and the chain RPC endpoint, retrying sessions and statistics.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .content import (
    ContentNotFoundError,
    ContentStorage,
    StorageConnectionError,
    StorageError,
    StorageType,
    StoreResult,
)


ZEROG_URI_PREFIX = "0g://"


@dataclass
class ZeroGConfig:
    """0G storage client configuration."""

    # Endpoints
    rpc_url: Optional[str] = None
    storage_url: str = "http://localhost:5678"

    # Service paths
    status_path: str = "/status"
    upload_path: str = "/file"
    download_path: str = "/file"

    # Behavior
    timeout: int = 30  # seconds

    # Retry configuration
    max_retries: int = 3
    retry_delay: float = 1.0

    def get_endpoint(self, path: str) -> str:
        """Join the storage base URL and a service path."""
        return f"{self.storage_url.rstrip('/')}/{path.lstrip('/')}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rpc_url": self.rpc_url,
            "storage_url": self.storage_url,
            "status_path": self.status_path,
            "upload_path": self.upload_path,
            "download_path": self.download_path,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "retry_delay": self.retry_delay
        }


class ZeroGStorage(ContentStorage):
    """0G decentralized storage over HTTP."""

    def __init__(self, config: Optional[ZeroGConfig] = None):
        self.config = config or ZeroGConfig()
        self.logger = logging.getLogger(__name__)

        self.node_status: Dict[str, Any] = {}
        self.chain_id: Optional[int] = None

        # Statistics
        self._stats = {
            "uploads": 0,
            "downloads": 0,
            "upload_failures": 0,
            "download_failures": 0,
            "bytes_uploaded": 0,
            "bytes_downloaded": 0
        }

        # Session for HTTP requests
        self.session = requests.Session()
        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.retry_delay,
            status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def connect(self) -> None:
        """
        Verify the storage service and, when configured, the chain RPC.

        Raises:
            StorageConnectionError: If either endpoint is unreachable
        """
        status_url = self.config.get_endpoint(self.config.status_path)

        try:
            response = self.session.get(status_url, timeout=self.config.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(f"Failed to reach 0G storage at {status_url}: {e}")
            raise StorageConnectionError(f"Storage node unreachable at {status_url}: {e}")

        self.node_status = self._parse_json(response) or {}

        if self.config.rpc_url:
            self.chain_id = self._fetch_chain_id()

        self.logger.info(
            f"Connected to 0G storage at {self.config.storage_url}"
            + (f" (chain id {self.chain_id})" if self.chain_id is not None else "")
        )

    def _fetch_chain_id(self) -> int:
        """Query eth_chainId on the configured RPC endpoint."""
        payload = {"jsonrpc": "2.0", "method": "eth_chainId", "params": [], "id": 1}

        try:
            response = self.session.post(self.config.rpc_url, json=payload, timeout=self.config.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(f"Failed to reach chain RPC at {self.config.rpc_url}: {e}")
            raise StorageConnectionError(f"Chain RPC unreachable at {self.config.rpc_url}: {e}")

        body = self._parse_json(response)
        if not body or "result" not in body:
            error = body.get("error") if body else None
            raise StorageConnectionError(f"Invalid eth_chainId response from {self.config.rpc_url}: {error}")

        try:
            return int(body["result"], 16)
        except (TypeError, ValueError):
            raise StorageConnectionError(f"Invalid chain id: {body['result']!r}")

    def store(self, data: bytes) -> StoreResult:
        """
        Upload content to 0G storage.

        Args:
            data: Encoded payload bytes

        Returns:
            StoreResult with the root hash assigned by the storage service

        Raises:
            StorageError: If the upload fails or the response has no root hash
        """
        upload_url = self.config.get_endpoint(self.config.upload_path)
        files = {"file": ("metadata.bin", data, "application/octet-stream")}

        try:
            response = self.session.post(upload_url, files=files, timeout=self.config.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self._stats["upload_failures"] += 1
            self.logger.error(f"Failed to upload content to 0G storage: {e}")
            raise StorageError(f"Upload failed: {e}")

        body = self._parse_json(response) or {}
        root_hash = body.get("root") or body.get("rootHash") or body.get("hash")

        if not root_hash:
            self._stats["upload_failures"] += 1
            raise StorageError(f"Upload response missing root hash: {body}")

        self._stats["uploads"] += 1
        self._stats["bytes_uploaded"] += len(data)
        self.logger.info(f"Stored {len(data)} bytes on 0G storage: {root_hash}")

        return StoreResult(
            root_hash=root_hash,
            size=len(data),
            storage_type=self.get_storage_type(),
            uri=body.get("uri"),
            tx_hash=body.get("txHash"),
            metadata={"storage_url": self.config.storage_url}
        )

    def retrieve(self, root_hash: str) -> bytes:
        """
        Download content from 0G storage.

        Args:
            root_hash: Root hash returned by store()

        Returns:
            Content bytes

        Raises:
            ContentNotFoundError: If the storage service has no such content
            StorageError: For any other download failure
        """
        if root_hash.startswith(ZEROG_URI_PREFIX):
            root_hash = root_hash[len(ZEROG_URI_PREFIX):]

        download_url = self.config.get_endpoint(self.config.download_path)

        try:
            response = self.session.get(
                download_url,
                params={"root": root_hash},
                timeout=self.config.timeout
            )
            if response.status_code == 404:
                raise ContentNotFoundError(f"Content not found in 0G storage: {root_hash}")
            response.raise_for_status()
        except requests.RequestException as e:
            self._stats["download_failures"] += 1
            self.logger.error(f"Failed to download {root_hash} from 0G storage: {e}")
            raise StorageError(f"Download failed for {root_hash}: {e}")
        except ContentNotFoundError:
            self._stats["download_failures"] += 1
            raise

        content = response.content
        self._stats["downloads"] += 1
        self._stats["bytes_downloaded"] += len(content)
        self.logger.debug(f"Retrieved {len(content)} bytes from 0G storage: {root_hash}")

        return content

    def exists(self, root_hash: str) -> bool:
        """Check if content exists in 0G storage."""
        if root_hash.startswith(ZEROG_URI_PREFIX):
            root_hash = root_hash[len(ZEROG_URI_PREFIX):]

        try:
            response = self.session.head(
                self.config.get_endpoint(self.config.download_path),
                params={"root": root_hash},
                timeout=self.config.timeout
            )
            return response.status_code == 200
        except requests.RequestException as e:
            self.logger.debug(f"Existence check failed for {root_hash}: {e}")
            return False

    def get_storage_type(self) -> StorageType:
        return StorageType.ZEROG

    def get_statistics(self) -> Dict[str, Any]:
        """Get client statistics."""
        return {
            **self._stats,
            "storage_url": self.config.storage_url,
            "chain_id": self.chain_id
        }

    def close(self):
        """Close the HTTP session."""
        self.session.close()

    def _parse_json(self, response) -> Optional[Dict[str, Any]]:
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None
