"""Tree-value builder: folds a stream of XML events into nested dicts.

The builder keeps an explicit stack of open-element frames. Each frame stores
what is needed to resume building the parent once the element closes: the
element's tag name, the parent's partially-built value and the parent's
pending attributes. The element currently being built lives in two local
slots, its value and its attributes, which are reassigned as events arrive.

Conversion rules:
    * attribute ``a`` becomes key ``@a``
    * text inside a childless element becomes the element's value, or the
      value under ``#text`` when the element also has attributes
    * a child tag seen once becomes a key, seen twice or more a list
    * an empty element becomes ``{}``

Text is not concatenated: when an element has several text runs the last
non-blank one wins, and text is dropped once the element has a child.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from xml_dict_codec.shared import (
    ConversionMetrics,
    DecodeConfig,
    EmptyDocumentError,
    MalformedXmlError,
    get_logger,
)
from xml_dict_codec.tokenization import EventType, XMLEvent, XMLEventReader
from xml_dict_codec.tokenization.events import XMLSource

TreeValue = Any


@dataclass
class Frame:
    """Open element on the builder stack."""

    name: str
    parent_value: TreeValue
    parent_attributes: Dict[str, str]


def merge_child(parent: Dict[str, TreeValue], name: str, value: TreeValue) -> None:
    """Insert ``value`` under ``name``, collapsing repeated names into a list."""
    if name not in parent:
        parent[name] = value
        return

    existing = parent[name]
    if isinstance(existing, list):
        existing.append(value)
    else:
        parent[name] = [existing, value]


class TreeValueBuilder:
    """Builds a tree value from XML events.

    Instances hold no state between calls apart from the metrics of the last
    build, so one builder can be reused for many documents.
    """

    def __init__(
        self,
        config: Optional[DecodeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree-value builder.

        Args:
            config: Decode configuration (defaults to ``DecodeConfig()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or DecodeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_value_builder")
        self.metrics = ConversionMetrics()

    def decode(self, source: XMLSource) -> Dict[str, TreeValue]:
        """Parse ``source`` and build its tree value.

        Args:
            source: XML document as text or bytes

        Returns:
            One-entry dict mapping the root tag name to its converted value

        Raises:
            MalformedXmlError: If the XML is not well-formed
            EmptyDocumentError: If the document has no root element
        """
        reader = XMLEventReader(self.config, self.correlation_id)
        root = self.build(reader.iter_events(source))
        self.metrics.characters_processed = len(source)
        return root

    def build(self, events: Iterable[XMLEvent]) -> Dict[str, TreeValue]:
        """Fold ``events`` into a tree value.

        Args:
            events: Start, text and end events in document order

        Returns:
            One-entry dict mapping the root tag name to its converted value
        """
        start_time = time.time()
        metrics = ConversionMetrics()
        prefix = self.config.attribute_prefix
        text_key = self.config.text_key
        strip_text = self.config.strip_text

        stack: List[Frame] = []
        current_value: TreeValue = {}
        current_attributes: Dict[str, str] = {}
        root: Optional[Dict[str, TreeValue]] = None

        for event in events:
            metrics.events_processed += 1

            if event.type is EventType.START:
                if root is not None:
                    raise MalformedXmlError(
                        f"Extra content at the end of the document: <{event.name}>"
                    )
                stack.append(Frame(event.name, current_value, current_attributes))
                current_attributes = {
                    prefix + name: value for name, value in event.attributes.items()
                }
                current_value = {}
                metrics.elements_processed += 1
                metrics.max_depth = max(metrics.max_depth, len(stack))

            elif event.type is EventType.TEXT:
                if not stack or not event.text or not event.text.strip():
                    continue
                # A child element already claimed this element's value.
                if isinstance(current_value, dict) and current_value:
                    continue
                current_value = event.text.strip() if strip_text else event.text

            elif event.type is EventType.END:
                if not stack:
                    raise MalformedXmlError(f"Unexpected closing tag </{event.name}>")
                frame = stack.pop()
                if event.name is not None and event.name != frame.name:
                    raise MalformedXmlError(
                        f"Opening and ending tag mismatch: {frame.name} and {event.name}"
                    )

                if isinstance(current_value, dict):
                    closed = dict(current_attributes)
                    for key, value in current_value.items():
                        closed.setdefault(key, value)
                elif current_attributes:
                    closed = dict(current_attributes)
                    closed.setdefault(text_key, current_value)
                else:
                    closed = current_value

                current_value = frame.parent_value
                current_attributes = frame.parent_attributes

                if not stack:
                    root = {frame.name: closed}
                    continue

                if not isinstance(current_value, dict):
                    current_value = {}
                merge_child(current_value, frame.name, closed)

        if stack:
            raise MalformedXmlError(
                f"Premature end of data: {len(stack)} unclosed element(s), "
                f"innermost <{stack[-1].name}>"
            )
        if root is None:
            raise EmptyDocumentError()

        metrics.processing_time_ms = (time.time() - start_time) * 1000
        self.metrics = metrics
        return root
