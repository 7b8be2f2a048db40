"""Streaming XML event reader backed by lxml.

The reader drives an ``lxml.etree.XMLParser`` through its parser-target
interface and turns the callbacks into a flat stream of start, text and end
events. Input is fed to the parser in chunks and events are yielded as soon as
each chunk has been parsed, so consumers never wait for a finished tree.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from lxml import etree

from xml_dict_codec.shared import (
    DecodeConfig,
    EmptyDocumentError,
    MalformedXmlError,
    get_logger,
)

XMLSource = Union[str, bytes]


class EventType(Enum):
    """Kinds of events emitted by the reader."""

    START = auto()   # Opening tag, carries name and attributes
    TEXT = auto()    # Contiguous run of character data
    END = auto()     # Closing tag


@dataclass(frozen=True)
class XMLEvent:
    """Single parse event.

    ``depth`` is the nesting level of the element the event belongs to; the
    document root is at depth 1.
    """

    type: EventType
    name: Optional[str] = None
    attributes: Mapping[str, str] = field(default_factory=dict)
    text: Optional[str] = None
    depth: int = 0

    @classmethod
    def for_start(
        cls, name: str, attributes: Optional[Mapping[str, str]] = None, depth: int = 0
    ) -> "XMLEvent":
        return cls(EventType.START, name=name, attributes=dict(attributes or {}), depth=depth)

    @classmethod
    def for_text(cls, text: str, depth: int = 0) -> "XMLEvent":
        return cls(EventType.TEXT, text=text, depth=depth)

    @classmethod
    def for_end(cls, name: str, depth: int = 0) -> "XMLEvent":
        return cls(EventType.END, name=name, depth=depth)


class _EventCollector:
    """lxml parser target that buffers events until the reader drains them."""

    def __init__(self) -> None:
        self._pending: List[XMLEvent] = []
        self._text_run: List[str] = []
        self._depth = 0
        self.start_count = 0

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        self._flush_text()
        self._depth += 1
        self.start_count += 1
        self._pending.append(XMLEvent.for_start(tag, attrib, self._depth))

    def end(self, tag: str) -> None:
        self._flush_text()
        self._pending.append(XMLEvent.for_end(tag, self._depth))
        self._depth -= 1

    def data(self, data: str) -> None:
        self._text_run.append(data)

    # Comments and processing instructions are dropped but still split text runs.
    def comment(self, text: str) -> None:
        self._flush_text()

    def pi(self, target: str, data: Optional[str] = None) -> None:
        self._flush_text()

    def close(self) -> None:
        self._flush_text()

    def drain(self) -> List[XMLEvent]:
        events, self._pending = self._pending, []
        return events

    def _flush_text(self) -> None:
        if self._text_run:
            self._pending.append(XMLEvent.for_text("".join(self._text_run), self._depth))
            self._text_run = []


class XMLEventReader:
    """Turns XML text into a stream of ``XMLEvent`` objects.

    Examples:
        >>> reader = XMLEventReader()
        >>> [event.type.name for event in reader.iter_events("<a>x</a>")]
        ['START', 'TEXT', 'END']
    """

    def __init__(
        self,
        config: Optional[DecodeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize event reader.

        Args:
            config: Decode configuration supplying tokenizer settings
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or DecodeConfig()
        self.logger = get_logger(__name__, correlation_id, "xml_event_reader")

    def iter_events(self, source: XMLSource) -> Iterator[XMLEvent]:
        """Yield parse events for ``source``.

        Args:
            source: XML document as text or as encoded bytes

        Raises:
            EmptyDocumentError: If the input holds no element at all
            MalformedXmlError: If the tokenizer rejects the input
        """
        data, encoding = _prepare_source(source)
        if not data.strip():
            raise EmptyDocumentError()

        collector = _EventCollector()
        parser = etree.XMLParser(
            target=collector,
            encoding=encoding,
            # external entities stay unresolved
            resolve_entities="internal",
            no_network=True,
            huge_tree=self.config.huge_tree,
        )

        chunk_size = self.config.chunk_size
        try:
            for start in range(0, len(data), chunk_size):
                parser.feed(data[start:start + chunk_size])
                yield from collector.drain()
            parser.close()
        except etree.XMLSyntaxError as e:
            raise self._translate_error(e, data, collector) from e

        yield from collector.drain()

    def _translate_error(
        self, error: etree.XMLSyntaxError, data: bytes, collector: _EventCollector
    ) -> Exception:
        """Map an lxml syntax error onto the codec error hierarchy."""
        if (
            collector.start_count == 0
            and error.code == etree.ErrorTypes.ERR_DOCUMENT_EMPTY
        ):
            return EmptyDocumentError()

        line, column = error.position if error.position else (None, None)
        offset = _byte_offset(data, line, column)

        self.logger.debug(
            "Tokenizer rejected input",
            extra={"line": line, "column": column, "offset": offset, "error_code": error.code}
        )
        return MalformedXmlError(str(error), offset=offset, line=line, column=column)


def _prepare_source(source: XMLSource) -> Tuple[bytes, Optional[str]]:
    """Return the bytes to feed and the encoding to force, if any."""
    if isinstance(source, str):
        return source.encode("utf-8"), "utf-8"
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), None
    raise TypeError(f"XML source must be str or bytes, not {type(source).__name__}")


def _byte_offset(data: bytes, line: Optional[int], column: Optional[int]) -> Optional[int]:
    """Convert a 1-based line/column pair into a byte offset into ``data``."""
    if not line or line < 1:
        return None

    offset = 0
    for _ in range(line - 1):
        newline = data.find(b"\n", offset)
        if newline < 0:
            return len(data)
        offset = newline + 1

    return min(offset + max((column or 1) - 1, 0), len(data))
