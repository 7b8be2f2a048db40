"""Shared utilities for XML/tree-value conversion.

This module provides the configuration objects, error hierarchy, metrics and
logging helpers used across the tokenization, tree and API layers.
"""

from .config import (
    CodecConfig,
    ConfigError,
    ConfigValidationError,
    DecodeConfig,
    EncodeConfig,
    GlobalConfig,
)
from .errors import (
    CodecError,
    DecodeError,
    EmptyDocumentError,
    EncodeError,
    EncodingError,
    MalformedXmlError,
    MultipleRootsError,
    UnsupportedValueTypeError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import ConversionMetrics

__all__ = [
    "CodecConfig",
    "ConfigError",
    "ConfigValidationError",
    "DecodeConfig",
    "EncodeConfig",
    "GlobalConfig",
    "CodecError",
    "DecodeError",
    "EmptyDocumentError",
    "EncodeError",
    "EncodingError",
    "MalformedXmlError",
    "MultipleRootsError",
    "UnsupportedValueTypeError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "ConversionMetrics",
]
