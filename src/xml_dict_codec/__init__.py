"""XML Dict Codec.

Converts XML documents into plain Python values (dicts, lists, strings) and
back, using the ``@attribute`` / ``#text`` key convention.

Progressive API Disclosure:
- Level 1: Simple functions - decode(), encode(), decode_file(), encode_file()
- Level 2: Configured codec - XMLDictCodec class
"""

__version__ = "0.1.0"
__author__ = "XML Dict Codec Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured codec
from .api import XMLDictCodec, decode, decode_file, encode, encode_file

# Configuration classes for advanced usage
from .shared.config import CodecConfig, DecodeConfig, EncodeConfig, GlobalConfig

# Error hierarchy
from .shared.errors import (
    CodecError,
    DecodeError,
    EmptyDocumentError,
    EncodeError,
    EncodingError,
    MalformedXmlError,
    MultipleRootsError,
    UnsupportedValueTypeError,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple conversion functions
    "decode",
    "decode_file",
    "encode",
    "encode_file",

    # Level 2: Configured codec
    "XMLDictCodec",

    # Configuration classes for advanced usage
    "CodecConfig",
    "DecodeConfig",
    "EncodeConfig",
    "GlobalConfig",

    # Errors
    "CodecError",
    "DecodeError",
    "EmptyDocumentError",
    "EncodeError",
    "EncodingError",
    "MalformedXmlError",
    "MultipleRootsError",
    "UnsupportedValueTypeError",
]
