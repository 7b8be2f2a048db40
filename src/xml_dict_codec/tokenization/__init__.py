"""Tokenization layer: XML text to a flat stream of parse events.

Key Components:
    XMLEventReader: lxml-backed streaming reader
    XMLEvent: Single start, text or end event
    EventType: Kinds of events
"""

from .events import EventType, XMLEvent, XMLEventReader

__all__ = [
    "EventType",
    "XMLEvent",
    "XMLEventReader",
]
