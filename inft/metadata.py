"""
INFT - AI Agent Metadata

This module provides the off-chain metadata record describing an AI agent,
including default filling, JSON serialization, semantic version bumping and
JSON schema validation.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from jsonschema import Draft7Validator, ValidationError


DEFAULT_MODEL = "Unknown Model"
DEFAULT_WEIGHTS = ""
DEFAULT_DESCRIPTION = "AI Agent Description"
DEFAULT_VERSION = "1.0.0"

REQUIRED_MODEL_FIELDS = ("model", "description")

# Wire names of the record fields, in serialization order
KNOWN_FIELDS = (
    "model", "weights", "description", "capabilities",
    "version", "createdAt", "owner", "updatedAt"
)


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _copy_sequence(value: Any) -> Any:
    return list(value) if isinstance(value, (list, tuple)) else value


@dataclass
class AgentMetadata:
    """Off-chain metadata record for an AI agent."""

    model: str = DEFAULT_MODEL
    weights: str = DEFAULT_WEIGHTS
    description: str = DEFAULT_DESCRIPTION
    # Usually a list of strings; other values are kept as given
    capabilities: Any = field(default_factory=list)
    version: str = DEFAULT_VERSION
    created_at: str = field(default_factory=utc_timestamp)
    owner: Optional[str] = None
    updated_at: Optional[str] = None

    # Keys outside the standard record, kept as-is
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_model_data(cls, data: Mapping[str, Any], owner: Optional[str]) -> 'AgentMetadata':
        """
        Build a fresh record from caller-supplied model data.

        Missing or empty values take their defaults; the creation time is
        always the current time.
        """
        return cls(
            model=data.get("model") or DEFAULT_MODEL,
            weights=data.get("weights") or DEFAULT_WEIGHTS,
            description=data.get("description") or DEFAULT_DESCRIPTION,
            capabilities=data.get("capabilities") or [],
            version=data.get("version") or DEFAULT_VERSION,
            owner=owner
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'AgentMetadata':
        """Create AgentMetadata from a stored (wire format) dictionary."""
        return cls(
            model=data.get("model") or DEFAULT_MODEL,
            weights=data.get("weights") or DEFAULT_WEIGHTS,
            description=data.get("description") or DEFAULT_DESCRIPTION,
            capabilities=data.get("capabilities") or [],
            version=data.get("version") or DEFAULT_VERSION,
            created_at=data.get("createdAt") or utc_timestamp(),
            owner=data.get("owner"),
            updated_at=data.get("updatedAt"),
            extra={k: v for k, v in data.items() if k not in KNOWN_FIELDS}
        )

    @classmethod
    def from_json(cls, json_str: str) -> 'AgentMetadata':
        """Create AgentMetadata from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to wire-format dictionary."""
        result = {
            "model": self.model,
            "weights": self.weights,
            "description": self.description,
            "capabilities": _copy_sequence(self.capabilities),
            "version": self.version,
            "createdAt": self.created_at,
            "owner": self.owner
        }

        if self.updated_at:
            result["updatedAt"] = self.updated_at

        result.update(self.extra)
        return result

    def to_json(self, indent: Optional[int] = None) -> str:
        """
        Convert to JSON string.

        Without indent the output is compact, matching the text that is
        hashed and stored.
        """
        if indent is None:
            return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def merge(self, patch: Mapping[str, Any]) -> 'AgentMetadata':
        """Return a new record with patch shallow-merged over this one."""
        return AgentMetadata.from_dict({**self.to_dict(), **patch})


def increment_version(version: Optional[str]) -> str:
    """
    Bump the patch component of a semantic version string.

    "1.0.0" -> "1.0.1". Missing components default to major 1, minor 0 and
    patch 0; a non-numeric patch counts as 0.
    """
    parts = str(version or "").split(".")

    major = parts[0] if parts[0] else "1"
    minor = parts[1] if len(parts) > 1 and parts[1] else "0"

    patch_match = re.match(r"\s*(\d+)", parts[2]) if len(parts) > 2 else None
    patch = int(patch_match.group(1)) if patch_match else 0

    return f"{major}.{minor}.{patch + 1}"


def validate_ai_model_data(data: Mapping[str, Any]) -> bool:
    """Check that model and description are present and non-empty."""
    for field_name in REQUIRED_MODEL_FIELDS:
        value = data.get(field_name)
        if not value or not hasattr(value, "__len__"):
            return False
    return True


def create_test_metadata() -> Dict[str, Any]:
    """Create sample model data for testing."""
    return {
        "model": "GPT-4",
        "weights": "https://example.com/weights",
        "description": "Advanced AI language model for text generation",
        "capabilities": ["text-generation", "question-answering", "summarization"],
        "version": "1.0.0"
    }


class AgentMetadataSchema:
    """JSON Schema definitions for agent metadata validation."""

    # Stored agent record
    AGENT_SCHEMA = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "INFT AI Agent Metadata",
        "type": "object",
        "required": ["model", "description", "version", "createdAt"],
        "properties": {
            "model": {
                "type": "string",
                "minLength": 1,
                "description": "Model name or identifier"
            },
            "weights": {
                "type": "string",
                "description": "Location of the model weights"
            },
            "description": {
                "type": "string",
                "minLength": 1,
                "maxLength": 2000
            },
            "capabilities": {
                "type": "array",
                "items": {"type": "string", "minLength": 1}
            },
            "version": {
                "type": "string",
                "pattern": "^[0-9]+\\.[0-9]+\\.[0-9]+"
            },
            "createdAt": {
                "type": "string",
                "format": "date-time"
            },
            "updatedAt": {
                "type": "string",
                "format": "date-time"
            },
            "owner": {
                "type": ["string", "null"]
            }
        }
    }

    # Caller-supplied model data before defaults are applied
    MODEL_DATA_SCHEMA = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "INFT AI Model Data",
        "type": "object",
        "required": list(REQUIRED_MODEL_FIELDS),
        "properties": {
            "model": {"type": "string", "minLength": 1},
            "weights": {"type": "string"},
            "description": {"type": "string", "minLength": 1},
            "capabilities": {"type": "array", "items": {"type": "string"}},
            "version": {"type": "string"}
        }
    }

    @classmethod
    def get_schema(cls, schema_type: str = "agent") -> Dict[str, Any]:
        """Get schema by type."""
        schemas = {
            "agent": cls.AGENT_SCHEMA,
            "model_data": cls.MODEL_DATA_SCHEMA
        }
        return schemas.get(schema_type, cls.AGENT_SCHEMA)


class MetadataValidator:
    """Validates agent metadata against JSON schemas."""

    def __init__(self):
        self.validators = {
            "agent": Draft7Validator(AgentMetadataSchema.AGENT_SCHEMA),
            "model_data": Draft7Validator(AgentMetadataSchema.MODEL_DATA_SCHEMA)
        }

    def validate(self, metadata: Union[Mapping[str, Any], AgentMetadata],
                 schema_type: str = "agent") -> bool:
        """
        Validate metadata against specified schema.

        Args:
            metadata: Metadata to validate
            schema_type: Schema type to use ('agent', 'model_data')

        Returns:
            True if valid

        Raises:
            ValidationError: If metadata is invalid
        """
        if schema_type not in self.validators:
            raise ValueError(f"Unknown schema type: {schema_type}")

        data = metadata.to_dict() if isinstance(metadata, AgentMetadata) else dict(metadata)
        self.validators[schema_type].validate(data)
        return True

    def get_validation_errors(self, metadata: Union[Mapping[str, Any], AgentMetadata],
                              schema_type: str = "agent") -> List[str]:
        """
        Get list of validation errors without raising exception.

        Returns:
            List of error messages (empty if valid)
        """
        if schema_type not in self.validators:
            return [f"Unknown schema type: {schema_type}"]

        data = metadata.to_dict() if isinstance(metadata, AgentMetadata) else dict(metadata)
        errors = []

        for error in self.validators[schema_type].iter_errors(data):
            error_path = " -> ".join(str(p) for p in error.path) if error.path else "root"
            errors.append(f"{error_path}: {error.message}")

        return errors

    def is_valid(self, metadata: Union[Mapping[str, Any], AgentMetadata],
                 schema_type: str = "agent") -> bool:
        """Check if metadata is valid without raising exceptions."""
        try:
            return self.validate(metadata, schema_type)
        except ValidationError:
            return False
