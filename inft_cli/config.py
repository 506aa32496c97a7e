"""
Configuration for the INFT CLI

Settings are assembled from layers (built-in defaults, a named profile, a
YAML or JSON file, INFT_* environment variables) and turned into a wired
MetadataManager.
"""

import copy
import json
import logging
import os
from functools import reduce
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from inft.manager import MetadataManager
from inft.zerog import ZeroGConfig, ZeroGStorage
from inft_crypto.codec import EncryptionMethod, get_codec

ENV_PREFIX = 'INFT_'
ENV_NESTING_SEPARATOR = '__'

PROJECT_CONFIG_NAME = '.inft'

DEFAULT_CONFIG = {
    'storage': {
        'rpc_url': 'https://evmrpc-testnet.0g.ai',
        'storage_url': 'https://indexer-storage-testnet-turbo.0g.ai',
        'status_path': '/status',
        'upload_path': '/file',
        'download_path': '/file',
        'timeout': 30,
        'max_retries': 3,
        'retry_delay': 1.0
    },
    'encryption': {
        'method': EncryptionMethod.BASE64.value
    },
    'cli': {
        'output_format': 'table',
        'verbose': 0
    }
}

PROFILES = {
    'testnet': {
        'storage': {
            'rpc_url': 'https://evmrpc-testnet.0g.ai',
            'storage_url': 'https://indexer-storage-testnet-turbo.0g.ai'
        }
    },
    'local': {
        'storage': {
            'rpc_url': 'http://localhost:8545',
            'storage_url': 'http://localhost:5678',
            'max_retries': 0
        },
        'cli': {'verbose': 1}
    }
}

VALID_OUTPUT_FORMATS = ['table', 'json', 'yaml']

_FILE_LOADERS = {
    '.yml': yaml.safe_load,
    '.yaml': yaml.safe_load,
    '.json': json.load,
}

_TRUE_WORDS = ('yes', 'on')
_FALSE_WORDS = ('no', 'off')

Layer = Tuple[str, Dict[str, Any]]


def get_config_search_paths() -> List[Path]:
    """Config files tried when none is given explicitly; the first existing one wins."""
    user_dir = Path.home() / PROJECT_CONFIG_NAME
    return [
        Path.cwd() / f'{PROJECT_CONFIG_NAME}.yml',
        Path.cwd() / f'{PROJECT_CONFIG_NAME}.json',
        user_dir / 'config.yml',
        user_dir / 'config.json',
    ]


def merge_config(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively overlay override on base, returning a new dict."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_env_value(raw: str) -> Any:
    """
    Interpret an environment variable value.

    JSON literals (numbers, true/false/null, lists, objects) are decoded;
    yes/no and on/off become booleans; anything else stays a string.
    """
    try:
        return json.loads(raw)
    except ValueError:
        pass

    lowered = raw.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    return raw


def environment_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Collect INFT_* variables into a nested dict.

    INFT_STORAGE__RPC_URL=... becomes {'storage': {'rpc_url': ...}}.
    """
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}

    for name in sorted(environ):
        if not name.startswith(ENV_PREFIX):
            continue

        *sections, leaf = name[len(ENV_PREFIX):].lower().split(ENV_NESTING_SEPARATOR)
        target = overrides
        for section in sections:
            if not isinstance(target.get(section), dict):
                target[section] = {}
            target = target[section]
        target[leaf] = parse_env_value(environ[name])

    return overrides


class ConfigurationManager:
    """Layered CLI configuration with dot-path access."""

    def __init__(self, config_file: Optional[str] = None, profile: Optional[str] = None):
        """
        Args:
            config_file: Config file to use instead of the search paths
            profile: Named profile applied over the defaults (testnet, local)
        """
        self.logger = logging.getLogger('inft-cli.config')
        self.config_file = config_file
        self.profile = profile
        self._config: Optional[Dict[str, Any]] = None
        self._sources: List[str] = []

    def load(self) -> Dict[str, Any]:
        """Merge every layer once and cache the result."""
        if self._config is None:
            layers = self._collect_layers()
            self._sources = [label for label, _ in layers]
            self._config = reduce(merge_config, (data for _, data in layers), {})
        return self._config

    def _collect_layers(self) -> List[Layer]:
        layers: List[Layer] = [('defaults', copy.deepcopy(DEFAULT_CONFIG))]

        if self.profile:
            if self.profile in PROFILES:
                layers.append((f'profile:{self.profile}', copy.deepcopy(PROFILES[self.profile])))
            else:
                self.logger.warning(f"Unknown profile ignored: {self.profile}")

        file_layer = self._file_layer()
        if file_layer:
            layers.append(file_layer)

        env = environment_overrides()
        if env:
            layers.append(('environment', env))

        return layers

    def _file_layer(self) -> Optional[Layer]:
        if self.config_file:
            candidates = [Path(self.config_file)]
        else:
            candidates = [p for p in get_config_search_paths() if p.exists()][:1]

        for path in candidates:
            data = self._read_config_file(path)
            if data:
                self.logger.debug(f"Loaded config from {path}")
                return f'file:{path}', data
        return None

    def _read_config_file(self, path: Path) -> Optional[Dict[str, Any]]:
        loader = _FILE_LOADERS.get(path.suffix)
        if loader is None:
            self.logger.warning(f"Unsupported config file type: {path}")
            return None
        if not path.exists():
            self.logger.warning(f"Config file not found: {path}")
            return None

        try:
            with open(path, 'r') as f:
                data = loader(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            self.logger.error(f"Could not read config file {path}: {e}")
            return None

        if data is None:
            return None
        if not isinstance(data, dict):
            self.logger.error(f"Ignoring {path}: top level must be a mapping")
            return None
        return data

    def get(self, key_path: str, default: Any = None) -> Any:
        """Look up a dotted key such as 'storage.rpc_url'."""
        node: Any = self.load()
        for part in key_path.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key_path: str, value: Any):
        """Set a dotted key in the loaded configuration, creating sections as needed."""
        *sections, leaf = key_path.split('.')
        node = self.load()
        for section in sections:
            if not isinstance(node.get(section), dict):
                node[section] = {}
            node = node[section]
        node[leaf] = value

    def save(self, path: Optional[str] = None, format: str = 'yaml') -> Path:
        """
        Write the merged configuration to disk.

        Without a path the project file (.inft.yml or .inft.json) in the
        current directory is used.

        Returns:
            The path written
        """
        suffix = '.yml' if format == 'yaml' else '.json'
        target = Path(path) if path else Path.cwd() / f'{PROJECT_CONFIG_NAME}{suffix}'
        target.parent.mkdir(parents=True, exist_ok=True)

        with open(target, 'w') as f:
            if format == 'yaml':
                yaml.safe_dump(self.load(), f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(self.load(), f, indent=2)

        self.logger.info(f"Configuration saved to {target}")
        return target

    def validate(self) -> List[str]:
        """Check the merged configuration; returns one message per problem."""
        config = self.load()
        return (
            _storage_errors(config.get('storage') or {})
            + _encryption_errors(config.get('encryption') or {})
            + _cli_errors(config.get('cli') or {})
        )

    def get_sources(self) -> List[str]:
        """Labels of the layers that contributed, lowest precedence first."""
        self.load()
        return list(self._sources)

    def reset(self):
        """Drop the cached configuration so the next access reloads it."""
        self._config = None
        self._sources = []


def _is_http_url(value: Any) -> bool:
    return str(value).startswith(('http://', 'https://'))


def _storage_errors(storage: Mapping[str, Any]) -> List[str]:
    errors = []

    storage_url = storage.get('storage_url')
    if not storage_url:
        errors.append("Storage URL is required")
    elif not _is_http_url(storage_url):
        errors.append(f"Storage URL must be http(s): {storage_url}")

    rpc_url = storage.get('rpc_url')
    if rpc_url and not _is_http_url(rpc_url):
        errors.append(f"RPC URL must be http(s): {rpc_url}")

    timeout = storage.get('timeout')
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        errors.append("Storage timeout must be a positive number")

    retries = storage.get('max_retries')
    if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
        errors.append("Storage max_retries must be a non-negative integer")

    return errors


def _encryption_errors(encryption: Mapping[str, Any]) -> List[str]:
    method = encryption.get('method')
    if method not in [m.value for m in EncryptionMethod]:
        return [f"Invalid encryption method: {method}"]
    return []


def _cli_errors(cli: Mapping[str, Any]) -> List[str]:
    output_format = cli.get('output_format')
    if output_format not in VALID_OUTPUT_FORMATS:
        return [f"Invalid output format: {output_format}"]
    return []


def build_storage_config(config: Mapping[str, Any]) -> ZeroGConfig:
    """Create a ZeroGConfig from the 'storage' section, falling back to client defaults."""
    storage = config.get('storage') or {}
    settings = {
        name: storage[name]
        for name in ('storage_url', 'status_path', 'upload_path', 'download_path',
                     'timeout', 'max_retries', 'retry_delay')
        if storage.get(name) is not None
    }
    # An empty rpc_url disables the chain check
    return ZeroGConfig(rpc_url=storage.get('rpc_url') or None, **settings)


def build_manager(config: Mapping[str, Any]) -> MetadataManager:
    """
    Create a MetadataManager from loaded configuration.

    Raises:
        CodecError: If encryption.method names no known codec
    """
    method = (config.get('encryption') or {}).get('method', EncryptionMethod.BASE64)
    return MetadataManager(
        storage=ZeroGStorage(build_storage_config(config)),
        codec=get_codec(method)
    )
