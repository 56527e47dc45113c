"""Tests for the file (CSV / JSON / JSONL / Parquet) inferrer."""
import io

import pytest

from catalog_infer.adapters.csv_adapter import CSVOptions
from catalog_infer.inference.config import InferConfig
from catalog_infer.inference.file_inferrer import FileInferenceRequest, FileSchemaInferrer
from catalog_infer.utils.exceptions import (
    CancelledError,
    DeadlineExceededError,
    InvalidSampleShapeError,
    ParseError,
    UnsupportedFormatError,
)


def _by_name(columns):
    return {c.name: c for c in columns}


class TestCSVInference:

    def test_header_and_types(self, sample_csv):
        with open(sample_csv, "rb") as f:
            columns = FileSchemaInferrer().infer_from_file(
                None, FileInferenceRequest(f, "csv")
            )

        assert [c.name for c in columns] == ["id", "name", "active", "score"]
        assert [c.ordinal_position for c in columns] == [1, 2, 3, 4]

        by_name = _by_name(columns)
        assert by_name["id"].data_type == "BIGINT"
        assert by_name["active"].data_type == "BOOLEAN"
        assert by_name["score"].data_type == "DOUBLE"
        assert by_name["score"].source_type == "number"
        assert by_name["name"].data_type == "TEXT"

        assert by_name["name"].nullable is True
        assert by_name["id"].nullable is False
        assert by_name["id"].comment == "Inferred from 3 samples"

    def test_column_order_is_not_sorted(self, csv_request):
        columns = FileSchemaInferrer().infer_from_file(None, csv_request("z,a,m\n1,2,3\n"))
        assert [c.name for c in columns] == ["z", "a", "m"]

    def test_header_only(self, csv_request):
        columns = FileSchemaInferrer().infer_from_file(None, csv_request("a,b\n"))

        assert [c.name for c in columns] == ["a", "b"]
        for column in columns:
            assert column.data_type == "TEXT"
            assert column.source_type == "unknown"
            assert column.nullable is True
            assert column.comment == "No data available for type inference"

    def test_empty_input(self, csv_request):
        assert FileSchemaInferrer().infer_from_file(None, csv_request("")) == []

    def test_no_header(self, csv_request):
        request = csv_request("10,x\n20,y\n", CSVOptions(has_header=False))
        result = FileSchemaInferrer().infer_from_file_with_result(None, request)

        assert [c.name for c in result.columns] == ["column_1", "column_2"]
        assert result.columns[0].source_type == "integer"
        assert result.columns[0].comment == "Inferred from 2 samples"
        assert result.sample_count == 2
        assert result.has_header is False

    def test_skip_rows(self, csv_request):
        request = csv_request("exported by tool\nid\n5\n", CSVOptions(skip_rows=1))
        columns = FileSchemaInferrer().infer_from_file(None, request)

        assert [c.name for c in columns] == ["id"]
        assert columns[0].source_type == "integer"

    def test_skip_past_end(self, csv_request):
        request = csv_request("a\n", CSVOptions(skip_rows=5))
        assert FileSchemaInferrer().infer_from_file(None, request) == []

    def test_tab_delimiter(self, csv_request):
        request = csv_request("a\tb\n1.5\tx\n", CSVOptions.from_dict({"delimiter": "tab"}))
        columns = FileSchemaInferrer().infer_from_file(None, request)

        assert [c.name for c in columns] == ["a", "b"]
        assert columns[0].data_type == "DOUBLE"

    def test_null_cells_make_column_nullable(self, csv_request):
        columns = FileSchemaInferrer().infer_from_file(None, csv_request("a\n5\nNULL\n6\n"))

        assert columns[0].nullable is True
        assert columns[0].source_type == "integer"

    def test_zero_one_policy(self, csv_request):
        text = "flag\n1\n0\n1\n"

        default = FileSchemaInferrer().infer_from_file(None, csv_request(text))
        assert default[0].data_type == "BOOLEAN"

        numeric = FileSchemaInferrer().infer_from_file(
            None, csv_request(text, CSVOptions(zero_one_as_boolean=False))
        )
        assert numeric[0].data_type == "BIGINT"

    def test_union_merge(self, csv_request):
        config = InferConfig(type_merge="union")
        columns = FileSchemaInferrer(config).infer_from_file(None, csv_request("v\n5\nx\n"))

        assert columns[0].source_type == "integer|string"
        assert columns[0].data_type == "TEXT"

    def test_utf8_bom(self):
        request = FileInferenceRequest.from_bytes(b"\xef\xbb\xbfid\n7\n", "csv")
        columns = FileSchemaInferrer().infer_from_file(None, request)

        assert columns[0].name == "id"

    def test_blank_lines_ignored(self, csv_request):
        columns = FileSchemaInferrer().infer_from_file(None, csv_request("a,b\n\n1.5,x\n\n"))
        assert [c.name for c in columns] == ["a", "b"]

    def test_stream_left_open(self, csv_request):
        request = csv_request("a\n1\n")
        FileSchemaInferrer().infer_from_file(None, request)
        assert request.stream.closed is False


class TestCSVSampling:

    def test_sample_cap(self, csv_request):
        text = "n\n" + "".join(f"{i + 10}\n" for i in range(5))
        config = InferConfig(sample_size=2)
        result = FileSchemaInferrer(config).infer_from_file_with_result(None, csv_request(text))

        assert result.sample_count == 2
        assert result.columns[0].comment == "Inferred from 2 samples"

    def test_default_sample_cap(self, csv_request):
        text = "n\n" + "".join(f"{i + 10}\n" for i in range(150))
        result = FileSchemaInferrer().infer_from_file_with_result(None, csv_request(text))

        assert result.sample_count == 100

    def test_malformed_rows_skipped(self, csv_request):
        result = FileSchemaInferrer().infer_from_file_with_result(
            None, csv_request("a,b\n10,x\n11\n12,y\n")
        )

        assert result.sample_count == 2
        assert result.columns[0].source_type == "integer"

    def test_malformed_first_data_row_is_fatal(self, csv_request):
        with pytest.raises(ParseError):
            FileSchemaInferrer().infer_from_file(None, csv_request("a,b\n1\n"))

    def test_malformed_header_is_fatal(self, csv_request):
        with pytest.raises(ParseError):
            FileSchemaInferrer().infer_from_file(None, csv_request('a,"b\n'))

    def test_invalid_utf8(self):
        request = FileInferenceRequest.from_bytes(b"a\n\xff\xfe\n", "csv")
        with pytest.raises(ParseError):
            FileSchemaInferrer().infer_from_file(None, request)


class TestJSONInference:

    def test_array(self):
        request = FileInferenceRequest.from_text(
            '[{"name": "John", "age": 25}, {"name": "Jane"}]', "json"
        )
        result = FileSchemaInferrer().infer_from_file_with_result(None, request)

        assert [c.name for c in result.columns] == ["age", "name"]
        assert result.columns[0].nullable is True
        assert result.sample_count == 2
        assert result.format == "json"

    def test_single_object(self):
        request = FileInferenceRequest.from_text('{"a": {"b": 1.5}}', "JSON")
        columns = FileSchemaInferrer().infer_from_file(None, request)

        assert [c.name for c in columns] == ["a", "a.b"]
        assert columns[1].data_type == "DOUBLE"

    def test_scalar_rejected(self):
        request = FileInferenceRequest.from_text("42", "json")
        with pytest.raises(ParseError, match="expected array or object"):
            FileSchemaInferrer().infer_from_file(None, request)

    def test_malformed(self):
        request = FileInferenceRequest.from_text('{"a": ', "json")
        with pytest.raises(ParseError, match="expected array or object"):
            FileSchemaInferrer().infer_from_file(None, request)

    def test_nan_rejected(self):
        request = FileInferenceRequest.from_text('[{"a": NaN}]', "json")
        with pytest.raises(ParseError):
            FileSchemaInferrer().infer_from_file(None, request)

    def test_array_of_scalars(self):
        request = FileInferenceRequest.from_text("[1, 2]", "json")
        with pytest.raises(InvalidSampleShapeError):
            FileSchemaInferrer().infer_from_file(None, request)

    def test_sample_cap(self):
        request = FileInferenceRequest.from_text(
            '[{"a": 1}, {"a": 2}, {"a": 3}]', "json"
        )
        result = FileSchemaInferrer(InferConfig(sample_size=2)).infer_from_file_with_result(
            None, request
        )
        assert result.sample_count == 2


class TestJSONLinesInference:

    def test_lines(self):
        request = FileInferenceRequest.from_text('{"a": 1}\n\n{"a": 2, "b": true}\n', "jsonl")
        columns = _by_name(FileSchemaInferrer().infer_from_file(None, request))

        assert columns["a"].data_type == "BIGINT"
        assert columns["b"].data_type == "BOOLEAN"
        assert columns["b"].nullable is True

    def test_bad_line(self):
        request = FileInferenceRequest.from_text('{"a": 1}\n[1]\n', "jsonl")
        with pytest.raises(ParseError, match="line 2"):
            FileSchemaInferrer().infer_from_file(None, request)


class TestFormatDispatch:

    def test_parquet_not_implemented(self):
        request = FileInferenceRequest.from_bytes(b"PAR1", "parquet")
        with pytest.raises(UnsupportedFormatError, match="not implemented") as exc:
            FileSchemaInferrer().infer_from_file(None, request)
        assert exc.value.format_name == "parquet"

    def test_unknown_format(self):
        request = FileInferenceRequest.from_bytes(b"<a/>", "xml")
        with pytest.raises(UnsupportedFormatError) as exc:
            FileSchemaInferrer().infer_from_file(None, request)
        assert exc.value.format_name == "xml"

    def test_empty_format(self):
        request = FileInferenceRequest.from_bytes(b"a\n1\n", "")
        with pytest.raises(UnsupportedFormatError):
            FileSchemaInferrer().infer_from_file(None, request)

    def test_disabled_does_not_read(self, csv_request):
        request = csv_request("a\n1\n")
        inferrer = FileSchemaInferrer(InferConfig(enabled=False))

        assert inferrer.infer_from_file(None, request) == []
        assert request.stream.tell() == 0


class TestGenericEntryPoint:

    def test_infer_with_request(self, csv_request):
        columns = FileSchemaInferrer().infer(None, [csv_request("a\n5\n")])
        assert [c.name for c in columns] == ["a"]

    def test_infer_rejects_other_samples(self):
        with pytest.raises(InvalidSampleShapeError):
            FileSchemaInferrer().infer(None, [io.BytesIO(b"a\n1\n")])

    def test_infer_empty(self):
        assert FileSchemaInferrer().infer(None, []) == []


class TestCancellation:

    def test_cancelled_csv(self, cancelled_token, csv_request):
        with pytest.raises(CancelledError):
            FileSchemaInferrer().infer_from_file(cancelled_token, csv_request("a\n1\n2\n"))

    def test_cancelled_header_only(self, cancelled_token, csv_request):
        with pytest.raises(CancelledError):
            FileSchemaInferrer().infer_from_file(cancelled_token, csv_request("a\n"))

    def test_deadline_json(self, expired_token):
        request = FileInferenceRequest.from_text('[{"a": 1}]', "json")
        with pytest.raises(DeadlineExceededError):
            FileSchemaInferrer().infer_from_file(expired_token, request)
