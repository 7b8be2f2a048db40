"""Tests for the public conversion API.

Covers the module-level functions and the XMLDictCodec class, including the
documented lossy normalizations of the encoding convention.
"""

import logging
from unittest.mock import patch

import pytest

from xml_dict_codec.api.codec import (
    XMLDictCodec,
    decode,
    decode_file,
    encode,
    encode_file,
)
from xml_dict_codec.shared import (
    CodecConfig,
    CodecError,
    EmptyDocumentError,
    MalformedXmlError,
    MultipleRootsError,
    UnsupportedValueTypeError,
)
from xml_dict_codec.tree import from_tree_value

DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


class TestDecode:
    """Test Level 1 decode functions."""

    def test_duplicate_siblings_merge_into_list(self):
        assert decode("<root><tag>1</tag><tag>2</tag></root>") == {
            "root": {"tag": ["1", "2"]}
        }

    def test_empty_element(self):
        assert decode("<e/>") == {"e": {}}

    def test_attributes_and_text(self):
        assert decode('<item id="5">x</item>') == {"item": {"@id": "5", "#text": "x"}}

    def test_every_attribute_gets_prefixed_key(self):
        result = decode('<a x="1" y="2" text="3"><x>4</x></a>')

        assert result == {"a": {"@x": "1", "@y": "2", "@text": "3", "x": "4"}}

    def test_bytes_input(self):
        assert decode(b'<?xml version="1.0" encoding="UTF-8"?><a>b</a>') == {"a": "b"}

    def test_malformed_input_never_returns_partial_tree(self):
        with pytest.raises(MalformedXmlError):
            decode("<a><b></a>")

    def test_empty_input(self):
        with pytest.raises(EmptyDocumentError):
            decode("")

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError, match="XML parsing error"):
            decode("<a>")

    def test_custom_key_convention(self):
        config = CodecConfig().override(
            decoding__attribute_prefix="-",
            encoding__attribute_prefix="-",
        )
        assert decode('<a id="1"/>', config) == {"a": {"-id": "1"}}

    def test_results_are_independent(self):
        first = decode("<a><b/></a>")
        first["a"]["b"]["changed"] = "yes"

        assert decode("<a><b/></a>") == {"a": {"b": {}}}

    @patch("xml_dict_codec.api.codec.from_tree_value", wraps=from_tree_value)
    def test_result_passes_through_native_adapter(self, adapter):
        result = decode("<a><b>1</b><b>2</b></a>")

        adapter.assert_called_once_with({"a": {"b": ["1", "2"]}})
        assert result == {"a": {"b": ["1", "2"]}}


class TestEncode:
    """Test Level 1 encode functions."""

    def test_attribute_element(self):
        document = encode({"item": {"@id": "5", "#text": "x"}})

        assert document == DECLARATION + '<item id="5">x</item>'

    def test_empty_element(self):
        assert encode({"e": {}}) == DECLARATION + "<e/>"

    def test_duplicate_siblings(self):
        assert encode({"root": {"tag": ["1", "2"]}}) == (
            DECLARATION + "<root><tag>1</tag><tag>2</tag></root>"
        )

    def test_integers_are_written_without_fraction(self):
        assert encode({"a": {"@n": 3, "b": 4}}) == DECLARATION + '<a n="3"><b>4</b></a>'

    def test_tuples_are_sequences(self):
        assert encode({"a": {"b": ("1", "2")}}) == DECLARATION + "<a><b>1</b><b>2</b></a>"

    def test_multiple_roots_by_default(self):
        assert encode({"a": "1", "b": "2"}) == DECLARATION + "<a>1</a><b>2</b>"

    def test_top_level_list_emits_one_root_per_entry(self):
        assert encode({"a": [1, 2]}) == DECLARATION + "<a>1</a><a>2</a>"

    def test_multiple_roots_rejected_when_strict(self):
        with pytest.raises(MultipleRootsError):
            encode({"a": "1", "b": "2"}, CodecConfig.strict())

    def test_function_value_is_unsupported(self):
        with pytest.raises(UnsupportedValueTypeError, match=r"\$\.a\.callback"):
            encode({"a": {"callback": print}})

    def test_non_mapping_is_unsupported(self):
        with pytest.raises(UnsupportedValueTypeError):
            encode(["a"])


class TestRoundTrip:
    """Test decode/encode symmetry and its documented normalizations."""

    def test_text_key_without_attributes_collapses(self):
        assert decode(encode({"a": {"#text": "hi"}})) == {"a": "hi"}

    def test_attribute_round_trip(self):
        value = {"item": {"@id": "5", "#text": "x"}}
        assert decode(encode(value)) == value

    def test_markup_characters_in_attributes_round_trip(self):
        value = {"item": {"@q": 'a & b < c "d"', "#text": "x & y"}}

        assert decode(encode(value)) == value

    def test_numbers_come_back_as_text(self):
        assert decode(encode({"a": {"@n": 2.5, "b": True}})) == {
            "a": {"@n": "2.5", "b": "true"}
        }

    def test_single_item_list_collapses(self):
        assert decode(encode({"a": {"b": ["only"]}})) == {"a": {"b": "only"}}

    def test_mixed_content_loses_text(self):
        assert decode("<a>lost<b>kept</b>lost too</a>") == {"a": {"b": "kept"}}

    def test_document_round_trip(self):
        xml = (
            DECLARATION
            + '<cave name="Kazumura">'
            + '<passage id="1"><length unit="m">65500</length></passage>'
            + '<passage id="2"/>'
            + "<notes>lava tube &amp; skylights</notes>"
            + "</cave>"
        )

        assert encode(decode(xml)) == xml


class TestFileFunctions:
    """Test file-based convenience functions."""

    def test_encode_file_then_decode_file(self, tmp_path):
        target = tmp_path / "out.xml"

        written = encode_file({"a": {"@x": "caf\xe9"}}, target)

        assert written == target
        assert target.read_bytes().startswith(DECLARATION.encode("utf-8"))
        assert decode_file(target) == {"a": {"@x": "caf\xe9"}}

    def test_encode_file_writes_nothing_on_failure(self, tmp_path):
        target = tmp_path / "out.xml"

        with pytest.raises(UnsupportedValueTypeError):
            encode_file({"a": object()}, target)

        assert not target.exists()

    def test_decode_file_accepts_string_path(self, tmp_path):
        source = tmp_path / "in.xml"
        source.write_text("<a><b>1</b></a>", encoding="utf-8")

        assert decode_file(str(source)) == {"a": {"b": "1"}}

    def test_decode_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            decode_file(tmp_path / "missing.xml")


class TestLogging:
    """Test correlation-aware logging of conversions."""

    def test_decode_logs_completion_with_metrics(self, caplog):
        caplog.set_level(logging.INFO, logger="xml_dict_codec")

        decode("<a><b/><b/></a>", correlation_id="req-1")

        records = [r for r in caplog.records if r.getMessage() == "Decode operation completed"]
        assert len(records) == 1
        assert records[0].correlation_id == "req-1"
        assert records[0].component == "decode"
        assert records[0].elements_processed == 3

    def test_encode_failure_is_logged_and_raised(self, caplog):
        caplog.set_level(logging.WARNING, logger="xml_dict_codec")

        with pytest.raises(UnsupportedValueTypeError):
            encode({"a": object()}, correlation_id="req-2")

        records = [r for r in caplog.records if r.getMessage() == "Encode operation failed"]
        assert len(records) == 1
        assert records[0].error_type == "UnsupportedValueTypeError"
        assert records[0].correlation_id == "req-2"

    def test_metrics_logging_can_be_disabled(self, caplog):
        caplog.set_level(logging.INFO, logger="xml_dict_codec")
        config = CodecConfig().override(global___enable_metrics=False)

        encode({"a": "1"}, config)

        assert not [r for r in caplog.records if r.getMessage() == "Encode operation completed"]


class TestXMLDictCodec:
    """Test Level 2 configured codec."""

    def test_default_configuration(self):
        codec = XMLDictCodec()

        assert codec.config == CodecConfig()
        assert codec.correlation_id is None

    def test_decode_and_encode(self):
        codec = XMLDictCodec()
        value = codec.decode("<a><b>1</b><b>2</b></a>")

        assert value == {"a": {"b": ["1", "2"]}}
        assert codec.encode(value) == DECLARATION + "<a><b>1</b><b>2</b></a>"

    def test_bound_configuration_is_used(self):
        codec = XMLDictCodec(CodecConfig.strict())

        with pytest.raises(MultipleRootsError):
            codec.encode({"a": "1", "b": "2"})

    def test_statistics_track_calls_and_failures(self):
        codec = XMLDictCodec(correlation_id="batch")

        codec.decode("<a/>")
        codec.encode({"a": {}})
        with pytest.raises(CodecError):
            codec.decode("<a>")

        stats = codec.statistics
        assert stats["decode_count"] == 2
        assert stats["encode_count"] == 1
        assert stats["failure_count"] == 1
        assert stats["total_processing_time_ms"] >= 0.0
        assert stats["average_processing_time_ms"] >= 0.0

    def test_reset_statistics(self):
        codec = XMLDictCodec()
        codec.decode("<a/>")

        codec.reset_statistics()

        assert codec.statistics["decode_count"] == 0
        assert codec.statistics["average_processing_time_ms"] == 0.0

    def test_file_methods(self, tmp_path):
        codec = XMLDictCodec()
        target = tmp_path / "doc.xml"

        codec.encode_file({"a": {"b": "1"}}, target)

        assert codec.decode_file(target) == {"a": {"b": "1"}}
        assert codec.statistics["encode_count"] == 1
        assert codec.statistics["decode_count"] == 1
