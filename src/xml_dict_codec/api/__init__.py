"""Public API for XML/tree-value conversion."""

from .codec import XMLDictCodec, decode, decode_file, encode, encode_file

__all__ = [
    "XMLDictCodec",
    "decode",
    "decode_file",
    "encode",
    "encode_file",
]
