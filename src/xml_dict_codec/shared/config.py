"""Configuration classes for XML/tree-value conversion.

This module provides configuration objects for the decoder, the encoder and
the ambient behavior shared by both, enabling control over the key naming
convention and the tokenizer settings.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

_COMPONENTS = ("decoding", "encoding", "global_")


def _validate_naming(attribute_prefix: str, text_key: str) -> None:
    if not attribute_prefix:
        raise ValueError("attribute_prefix cannot be empty")
    if not text_key:
        raise ValueError("text_key cannot be empty")
    if text_key.startswith(attribute_prefix):
        raise ValueError("text_key cannot start with attribute_prefix")


@dataclass(frozen=True)
class DecodeConfig:
    """Configuration for turning XML text into tree values."""

    attribute_prefix: str = "@"
    text_key: str = "#text"
    strip_text: bool = True

    # Tokenizer settings
    chunk_size: int = 65536
    huge_tree: bool = False

    def __post_init__(self) -> None:
        """Validate decode configuration."""
        _validate_naming(self.attribute_prefix, self.text_key)
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")


@dataclass(frozen=True)
class EncodeConfig:
    """Configuration for turning tree values into XML text."""

    attribute_prefix: str = "@"
    text_key: str = "#text"
    xml_declaration: bool = True
    strict_single_root: bool = False

    def __post_init__(self) -> None:
        """Validate encode configuration."""
        _validate_naming(self.attribute_prefix, self.text_key)


@dataclass(frozen=True)
class GlobalConfig:
    """Settings that apply to every component."""

    enable_metrics: bool = True
    preview_length: int = 100  # Max characters of input echoed in debug logs

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.preview_length < 0:
            raise ValueError("preview_length must be >= 0")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class CodecConfig:
    """Complete configuration for decode and encode operations.

    Immutable, so a single instance can be shared between threads and
    between codec instances.
    """

    decoding: DecodeConfig = field(default_factory=DecodeConfig)
    encoding: EncodeConfig = field(default_factory=EncodeConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete codec configuration."""
        try:
            self.decoding.__post_init__()
            self.encoding.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        self._validate_cross_component_dependencies()

    def _validate_cross_component_dependencies(self) -> None:
        """Decode and encode must agree on the key convention to round-trip."""
        if self.decoding.attribute_prefix != self.encoding.attribute_prefix:
            raise ConfigValidationError(
                "Decoding and encoding use different attribute prefixes",
                field_name="attribute_prefix",
                suggestions=["Set decoding__attribute_prefix and "
                             "encoding__attribute_prefix to the same value"]
            )
        if self.decoding.text_key != self.encoding.text_key:
            raise ConfigValidationError(
                "Decoding and encoding use different text keys",
                field_name="text_key",
                suggestions=["Set decoding__text_key and encoding__text_key "
                             "to the same value"]
            )

    def override(self, **kwargs: Any) -> "CodecConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override,
                using ``component__field`` for nested fields

        Returns:
            New CodecConfig instance with overrides applied

        Example:
            >>> config = CodecConfig()
            >>> strict = config.override(encoding__strict_single_root=True)
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            # global_ ends in an underscore, so match on the full prefix
            component = next(
                (name for name in _COMPONENTS if key.startswith(name + "__")), None
            )
            if component is not None:
                field_name = key[len(component) + 2:]
                nested_overrides.setdefault(component, {})[field_name] = value
            elif "__" in key:
                raise ConfigValidationError(
                    f"Unknown configuration component: {key.split('__', 1)[0]}",
                    field_name=key,
                    suggestions=[f"Use one of {list(_COMPONENTS)}"]
                )
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for component in _COMPONENTS:
            current = getattr(self, component)
            if component in nested_overrides and isinstance(nested_overrides[component], dict):
                try:
                    new_fields[component] = replace(current, **nested_overrides[component])
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=component) from e
            else:
                new_fields[component] = nested_overrides.get(component, current)

        for key, value in nested_overrides.items():
            if key not in _COMPONENTS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary representation of the configuration
        """
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodecConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored so that files written by newer versions
        still load.

        Args:
            data: Dictionary containing configuration data

        Returns:
            CodecConfig instance created from dictionary
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                if hasattr(field_info.type, "__dataclass_fields__"):
                    field_values[field_name] = _dict_to_dataclass(value, field_info.type)
                else:
                    field_values[field_name] = value
            return target_class(**field_values)

        try:
            result = _dict_to_dataclass(data, cls)
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e
        return result

    @classmethod
    def from_json(cls, json_str: str) -> "CodecConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def default(cls) -> "CodecConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "CodecConfig":
        """Create a preset that refuses to emit multi-rooted documents."""
        return cls(
            encoding=EncodeConfig(strict_single_root=True),
            name="strict",
        )
