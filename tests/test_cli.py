"""CLI and YAML config execution tests."""
import json

import pytest
import yaml

from catalog_infer.cli import main
from catalog_infer.execution.config_executor import ConfigExecutor
from catalog_infer.utils.exceptions import CancelledError


class TestCLI:

    def test_file(self, sample_csv, tmp_path):
        out = tmp_path / "artifacts"
        response = main(["--file", str(sample_csv), "--output-dir", str(out)])

        assert response["column_count"] == 4

        columns = json.loads((out / "columns.json").read_text(encoding="utf-8"))
        assert [c["name"] for c in columns] == ["id", "name", "active", "score"]

        summary = json.loads((out / "run_summary.json").read_text(encoding="utf-8"))
        assert summary["status"] == "SUCCESS"
        assert summary["schema_hash"] == response["schema_hash"]

        schema_yaml = yaml.safe_load((out / "columns.yaml").read_text(encoding="utf-8"))
        assert len(schema_yaml["columns"]) == 4

    def test_json_output_only(self, sample_csv, tmp_path):
        out = tmp_path / "artifacts"
        main(["--file", str(sample_csv), "--output", "JSON", "--output-dir", str(out)])

        assert (out / "columns.json").exists()
        assert not (out / "columns.yaml").exists()

    def test_keys_detailed(self, tmp_path, session_keys):
        keys = tmp_path / "keys.txt"
        keys.write_text("\n".join(session_keys), encoding="utf-8")
        out = tmp_path / "out"

        main(["--keys", str(keys), "--detailed", "--output-dir", str(out)])

        summary = json.loads((out / "run_summary.json").read_text(encoding="utf-8"))
        assert summary["details"]["patterns"][1]["pattern"] == "session:*:data"

    def test_documents_with_overrides(self, tmp_path):
        docs = tmp_path / "docs.json"
        docs.write_text(json.dumps([{"a": {"b": 1}}, {"a": {"b": "x"}}]), encoding="utf-8")

        response = main([
            "--documents", str(docs),
            "--max-depth", "1",
            "--type-merge", "union",
            "--output-dir", str(tmp_path / "out"),
        ])

        assert [c["name"] for c in response["columns"]] == ["a"]
        assert response["config"]["type_merge"] == "union"

    def test_no_header_and_delimiter(self, tmp_path):
        path = tmp_path / "rows.txt.csv"
        path.write_text("10|x\n20|y\n", encoding="utf-8")

        response = main([
            "--file", str(path),
            "--delimiter", "|",
            "--no-header",
            "--output-dir", str(tmp_path / "out"),
        ])

        assert [c["name"] for c in response["columns"]] == ["column_1", "column_2"]

    def test_disabled(self, sample_csv, tmp_path):
        response = main([
            "--file", str(sample_csv), "--disabled", "--output-dir", str(tmp_path / "out")
        ])
        assert response["columns"] == []

    def test_requires_one_source(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["--output-dir", str(tmp_path / "out")])
        assert exc.value.code == 1

    def test_failure_exits_nonzero(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{", encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            main(["--file", str(bad), "--output-dir", str(tmp_path / "out")])
        assert exc.value.code == 1


@pytest.fixture
def config_file(tmp_path, sample_csv):
    out = tmp_path / "outputs"
    config = {
        "name": "people",
        "inference": {"sample_size": 2, "type_merge": "most_common"},
        "source": {
            "kind": "file",
            "file_path": str(sample_csv),
            "csv_options": {"has_header": True},
        },
        "settings": {"timeout_seconds": 30},
        "output_dir": str(out),
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


class TestConfigExecutor:

    def test_execute(self, config_file, tmp_path):
        result = ConfigExecutor(str(config_file)).execute()

        assert result["sample_count"] == 2
        assert result["config"]["sample_size"] == 2
        assert (tmp_path / "outputs" / "people.json").exists()
        assert (tmp_path / "outputs" / "people.yaml").exists()

    def test_build_payload(self, config_file, sample_csv):
        payload = ConfigExecutor(str(config_file)).build_payload()

        assert payload["source"] == "file"
        assert payload["file_path"] == str(sample_csv)
        assert payload["timeout_seconds"] == 30
        assert payload["output"] == "ALL_FORMATS"

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigExecutor(str(tmp_path / "missing.yaml"))

    def test_cli_config(self, config_file, tmp_path):
        response = main([
            "--config", str(config_file),
            "--sample-size", "3",
            "--output-dir", str(tmp_path / "cli"),
        ])
        assert response["sample_count"] == 3

    def test_cancelled(self, config_file, cancelled_token):
        with pytest.raises(CancelledError):
            ConfigExecutor(str(config_file), token=cancelled_token).execute()
