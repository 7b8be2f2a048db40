"""Exception hierarchy for XML/tree-value conversion.

Every failure aborts the whole conversion; callers never receive a partial
result. All codec errors derive from ``ValueError`` so that code written
against a plain ``ValueError`` keeps working.
"""

from typing import Optional


class CodecError(ValueError):
    """Base exception for all conversion errors."""


class DecodeError(CodecError):
    """Raised when XML text cannot be turned into a tree value."""


class MalformedXmlError(DecodeError):
    """The tokenizer reported a syntax problem.

    Attributes:
        message: Message reported by the tokenizer
        offset: Byte offset into the UTF-8 input, when known
        line: 1-based line number, when known
        column: Column reported by the tokenizer, when known
    """

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column
        if offset is not None:
            super().__init__(f"XML parsing error: Error at position {offset}: {message}")
        else:
            super().__init__(f"XML parsing error: {message}")


class EmptyDocumentError(DecodeError):
    """The input produced no root element."""

    def __init__(self, message: str = "Empty XML document") -> None:
        super().__init__(f"XML parsing error: {message}")


class EncodeError(CodecError):
    """Raised when a tree value cannot be turned into XML text."""


class UnsupportedValueTypeError(EncodeError):
    """A value outside the closed tree-value set was encountered.

    Attributes:
        path: Location of the offending value, e.g. ``$.root.items[2]``
        value_type: Name of the offending Python type
    """

    def __init__(self, message: str, path: str = "$", value_type: Optional[str] = None) -> None:
        self.path = path
        self.value_type = value_type
        super().__init__(f"Unsupported value at {path}: {message}")


class EncodingError(EncodeError):
    """The assembled output is not valid text in the declared encoding."""

    def __init__(self, message: str) -> None:
        super().__init__(f"XML generation error: {message}")


class MultipleRootsError(EncodeError):
    """A strict encode was asked to emit anything but exactly one root."""

    def __init__(self, root_count: int) -> None:
        self.root_count = root_count
        super().__init__(
            f"XML generation error: expected exactly one root element, got {root_count}"
        )
