"""Tree-value serializer: the inverse of ``TreeValueBuilder``.

Each top-level key of the input dict becomes one top-level element. Inside a
dict, keys carrying the attribute prefix become attributes, the text key
becomes the element text and every other key becomes a child element; a list
under a child key becomes one sibling element per entry. Any non-dict value is
written as the element text.

Elements are pushed through ``lxml.etree.TreeBuilder`` and serialized with
``lxml.etree.tostring``, which takes care of escaping and of writing empty
elements in their self-closing form.
"""

import math
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple

from lxml import etree

from xml_dict_codec.shared import (
    ConversionMetrics,
    EncodeConfig,
    EncodingError,
    MultipleRootsError,
    UnsupportedValueTypeError,
    get_logger,
)

TreeValue = Any

XML_DECLARATION = b'<?xml version="1.0" encoding="utf-8"?>'


def format_scalar(value: TreeValue) -> Optional[str]:
    """Render a scalar tree value as XML text.

    Returns ``None`` for null so that the caller can leave the text out.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, int):
        return str(value)
    raise UnsupportedValueTypeError(
        "expected a scalar", value_type=type(value).__name__
    )


def _check_key(key: Any, path: str) -> None:
    if not isinstance(key, str):
        raise UnsupportedValueTypeError(
            f"mapping key {key!r} is not a string",
            path=path,
            value_type=type(key).__name__,
        )


class TreeValueSerializer:
    """Serializes tree values to XML text.

    Examples:
        >>> TreeValueSerializer().serialize({"item": {"@id": "5", "#text": "x"}})
        '<?xml version="1.0" encoding="utf-8"?><item id="5">x</item>'
    """

    def __init__(
        self,
        config: Optional[EncodeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize serializer.

        Args:
            config: Encode configuration (defaults to ``EncodeConfig()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or EncodeConfig()
        self.logger = get_logger(__name__, correlation_id, "tree_value_serializer")
        self.metrics = ConversionMetrics()

    def serialize(self, root: Mapping[str, TreeValue]) -> str:
        """Serialize ``root`` to an XML document.

        Args:
            root: Dict mapping each top-level tag name to its value

        Returns:
            XML text starting with the XML declaration

        Raises:
            UnsupportedValueTypeError: If ``root`` is not a dict or holds a
                value the encoding convention cannot express
            MultipleRootsError: If ``strict_single_root`` is set and ``root``
                does not have exactly one key
            EncodingError: If lxml rejects a name or character, or the output
                is not valid UTF-8
        """
        start_time = time.time()
        self._metrics = ConversionMetrics()

        if not isinstance(root, Mapping):
            raise UnsupportedValueTypeError(
                "top-level value must be a mapping", value_type=type(root).__name__
            )
        if self.config.strict_single_root:
            # a top-level list emits one root per entry
            root_count = sum(
                len(value) if isinstance(value, list) else 1 for value in root.values()
            )
            if root_count != 1:
                raise MultipleRootsError(root_count)

        parts: List[bytes] = []
        if self.config.xml_declaration:
            parts.append(XML_DECLARATION)

        for name, value in root.items():
            _check_key(name, "$")
            for entry in self._entries(value, f"$.{name}"):
                builder = etree.TreeBuilder()
                self._emit(builder, name, entry, f"$.{name}", depth=1)
                element = builder.close()
                parts.append(etree.tostring(element, encoding="utf-8", xml_declaration=False))

        try:
            document = b"".join(parts).decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"UTF-8 conversion error: {e}") from e

        self._metrics.processing_time_ms = (time.time() - start_time) * 1000
        self._metrics.characters_processed = len(document)
        self.metrics = self._metrics
        return document

    def _emit(self, builder: etree.TreeBuilder, tag: str, value: TreeValue,
              path: str, depth: int) -> None:
        """Write one element and, recursively, its children."""
        self._metrics.elements_processed += 1
        self._metrics.max_depth = max(self._metrics.max_depth, depth)

        attributes, text, children = self._partition(value, path)

        self._call(builder.start, tag, attributes)
        if text is not None:
            self._call(builder.data, text)
        for child_name, child_value in children:
            child_path = f"{path}.{child_name}"
            for entry in self._entries(child_value, child_path):
                self._emit(builder, child_name, entry, child_path, depth + 1)
        self._call(builder.end, tag)

    def _partition(
        self, value: TreeValue, path: str
    ) -> Tuple[Dict[str, str], Optional[str], List[Tuple[str, TreeValue]]]:
        """Split a value into attributes, text and child entries."""
        if not isinstance(value, Mapping):
            return {}, self._scalar(value, path), []

        prefix = self.config.attribute_prefix
        attributes: Dict[str, str] = {}
        text: Optional[str] = None
        children: List[Tuple[str, TreeValue]] = []

        for key, item in value.items():
            _check_key(key, path)
            if key.startswith(prefix):
                rendered = self._scalar(item, f"{path}.{key}")
                attributes[key[len(prefix):]] = rendered if rendered is not None else ""
            elif key == self.config.text_key:
                text = self._scalar(item, f"{path}.{key}")
            else:
                children.append((key, item))

        return attributes, text, children

    @staticmethod
    def _entries(value: TreeValue, path: str) -> List[TreeValue]:
        """A list under a key stands for repeated sibling elements."""
        if not isinstance(value, list):
            return [value]
        for index, entry in enumerate(value):
            if isinstance(entry, list):
                raise UnsupportedValueTypeError(
                    "nested lists have no XML representation",
                    path=f"{path}[{index}]",
                    value_type="list",
                )
        return value

    @staticmethod
    def _scalar(value: TreeValue, path: str) -> Optional[str]:
        if isinstance(value, (Mapping, list)):
            raise UnsupportedValueTypeError(
                "attribute and text values must be scalars",
                path=path,
                value_type=type(value).__name__,
            )
        try:
            return format_scalar(value)
        except UnsupportedValueTypeError as e:
            raise UnsupportedValueTypeError(
                "expected a scalar", path=path, value_type=e.value_type
            ) from e

    @staticmethod
    def _call(method: Any, *args: Any) -> None:
        """Invoke a TreeBuilder method, mapping lxml's rejections."""
        try:
            method(*args)
        except (ValueError, TypeError) as e:
            raise EncodingError(str(e)) from e
