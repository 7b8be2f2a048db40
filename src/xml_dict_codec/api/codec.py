"""Public conversion API with progressive disclosure.

Level 1 is a set of module-level functions (``decode``, ``encode`` and their
file variants); level 2 is the ``XMLDictCodec`` class, which binds a
configuration and correlation ID once and keeps running statistics across
calls.
"""

import time
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from xml_dict_codec.shared import (
    CodecConfig,
    CodecError,
    get_logger,
)
from xml_dict_codec.tokenization.events import XMLSource
from xml_dict_codec.tree import (
    TreeValueBuilder,
    TreeValueSerializer,
    from_tree_value,
    to_tree_value,
)

PathLike = Union[str, Path]

MS_PER_SECOND = 1000


def decode(
    xml_input: XMLSource,
    config: Optional[CodecConfig] = None,
    correlation_id: Optional[str] = None
) -> Dict[str, Any]:
    """Convert an XML document into a tree value.

    Args:
        xml_input: XML content as string or bytes
        config: Optional codec configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        One-entry dict mapping the root tag name to its converted value

    Raises:
        MalformedXmlError: If the XML is not well-formed
        EmptyDocumentError: If the document has no root element

    Examples:
        >>> decode('<root><tag>1</tag><tag>2</tag></root>')
        {'root': {'tag': ['1', '2']}}

        >>> decode('<item id="5">x</item>')
        {'item': {'@id': '5', '#text': 'x'}}
    """
    config = config or CodecConfig()
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "decode")

    logger.debug(
        "Starting decode operation",
        extra={
            "input_type": type(xml_input).__name__,
            "content_length": len(xml_input),
            "preview": _preview(xml_input, config.global_.preview_length),
        }
    )

    builder = TreeValueBuilder(config.decoding, correlation_id)
    try:
        result = from_tree_value(builder.decode(xml_input))
    except CodecError as e:
        logger.warning(
            "Decode operation failed",
            extra={
                "error_type": type(e).__name__,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
        raise

    if config.global_.enable_metrics:
        logger.info("Decode operation completed", extra=builder.metrics.to_dict())
    return result


def decode_file(
    file_path: PathLike,
    config: Optional[CodecConfig] = None,
    correlation_id: Optional[str] = None
) -> Dict[str, Any]:
    """Convert an XML file into a tree value.

    The file is read as bytes so that its XML declaration decides the
    encoding.

    Args:
        file_path: Path to the XML file
        config: Optional codec configuration
        correlation_id: Optional correlation ID for request tracking

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(file_path)
    return decode(path.read_bytes(), config, correlation_id)


def encode(
    value: Mapping[str, Any],
    config: Optional[CodecConfig] = None,
    correlation_id: Optional[str] = None
) -> str:
    """Convert a mapping into an XML document.

    The whole value is validated and converted before any XML is produced.

    Args:
        value: Mapping from top-level tag name to element value
        config: Optional codec configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        XML text starting with ``<?xml version="1.0" encoding="utf-8"?>``

    Raises:
        UnsupportedValueTypeError: If ``value`` is not a mapping or contains a
            value outside the tree-value set
        MultipleRootsError: In strict mode, if ``value`` has other than one key
        EncodingError: If the output cannot be assembled as UTF-8 XML

    Examples:
        >>> encode({'e': {}})
        '<?xml version="1.0" encoding="utf-8"?><e/>'
    """
    config = config or CodecConfig()
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "encode")

    logger.debug(
        "Starting encode operation",
        extra={"input_type": type(value).__name__}
    )

    serializer = TreeValueSerializer(config.encoding, correlation_id)
    try:
        tree = to_tree_value(value)
        result = serializer.serialize(tree)
    except CodecError as e:
        logger.warning(
            "Encode operation failed",
            extra={
                "error_type": type(e).__name__,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
        raise

    if config.global_.enable_metrics:
        logger.info("Encode operation completed", extra=serializer.metrics.to_dict())
    return result


def encode_file(
    value: Mapping[str, Any],
    file_path: PathLike,
    config: Optional[CodecConfig] = None,
    correlation_id: Optional[str] = None
) -> Path:
    """Convert a mapping into an XML document and write it as UTF-8.

    Nothing is written when the conversion fails.

    Returns:
        Path of the written file
    """
    document = encode(value, config, correlation_id)
    path = Path(file_path)
    path.write_text(document, encoding="utf-8")
    return path


class XMLDictCodec:
    """Reusable codec bound to one configuration.

    Attributes:
        config: Codec configuration used for every call
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> codec = XMLDictCodec(CodecConfig.strict())
        >>> codec.decode('<a><b/></a>')
        {'a': {'b': {}}}
        >>> codec.encode({'a': {'b': {}}})
        '<?xml version="1.0" encoding="utf-8"?><a><b/></a>'
    """

    def __init__(
        self,
        config: Optional[CodecConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize codec.

        Args:
            config: Codec configuration (defaults to ``CodecConfig()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or CodecConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "xml_dict_codec")

        self._decode_count = 0
        self._encode_count = 0
        self._failure_count = 0
        self._total_processing_time = 0.0

        self.logger.debug(
            "XMLDictCodec initialized",
            extra={"config_name": self.config.name}
        )

    def decode(self, xml_input: XMLSource) -> Dict[str, Any]:
        """Convert XML text into a tree value using the bound configuration."""
        return self._run("decode", decode, xml_input)

    def decode_file(self, file_path: PathLike) -> Dict[str, Any]:
        """Convert an XML file into a tree value using the bound configuration."""
        return self._run("decode", decode_file, file_path)

    def encode(self, value: Mapping[str, Any]) -> str:
        """Convert a mapping into XML text using the bound configuration."""
        return self._run("encode", encode, value)

    def encode_file(self, value: Mapping[str, Any], file_path: PathLike) -> Path:
        """Convert a mapping into an XML file using the bound configuration."""
        start_time = time.time()
        try:
            return encode_file(value, file_path, self.config, self.correlation_id)
        except CodecError:
            self._failure_count += 1
            raise
        finally:
            self._encode_count += 1
            self._total_processing_time += (time.time() - start_time) * MS_PER_SECOND

    def _run(self, operation: str, function: Any, argument: Any) -> Any:
        start_time = time.time()
        try:
            return function(argument, self.config, self.correlation_id)
        except CodecError:
            self._failure_count += 1
            raise
        finally:
            if operation == "decode":
                self._decode_count += 1
            else:
                self._encode_count += 1
            self._total_processing_time += (time.time() - start_time) * MS_PER_SECOND

    @property
    def statistics(self) -> Dict[str, Any]:
        """Call counts and cumulative timing for this codec."""
        total_calls = self._decode_count + self._encode_count
        return {
            "decode_count": self._decode_count,
            "encode_count": self._encode_count,
            "failure_count": self._failure_count,
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / total_calls if total_calls else 0.0
            ),
            "config_name": self.config.name,
        }

    def reset_statistics(self) -> None:
        """Reset call counts and timings."""
        self._decode_count = 0
        self._encode_count = 0
        self._failure_count = 0
        self._total_processing_time = 0.0


def _preview(xml_input: XMLSource, length: int) -> str:
    if isinstance(xml_input, (bytes, bytearray)):
        text = bytes(xml_input[:length]).decode("utf-8", errors="replace")
    else:
        text = xml_input[:length]
    return text + "..." if len(xml_input) > length else text
