import argparse
import json
import os
from typing import Any, Dict, List, Optional

from catalog_infer.execution.config_executor import ConfigExecutor
from catalog_infer.router import route


class C:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


def cprint(text: str, color: str = C.RESET, bold: bool = False):
    prefix = (C.BOLD if bold else "") + color
    print(f"{prefix}{text}{C.RESET}")


def _write_json(path: str, payload: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def _persist_artifacts(response: Dict[str, Any], output_dir: str) -> None:
    summary = {
        "status": response.get("status"),
        "request_id": response.get("request_id"),
        "source": response.get("source"),
        "sample_count": response.get("sample_count"),
        "column_count": response.get("column_count"),
        "schema_hash": response.get("schema_hash"),
        "config": response.get("config"),
        "details": response.get("details"),
    }
    # Drop null values
    summary = {k: v for k, v in summary.items() if v is not None}

    _write_json(os.path.join(output_dir, "run_summary.json"), summary)
    _write_json(os.path.join(output_dir, "columns.json"), response.get("columns", []))

    if "schema_yaml" in response:
        _write_text(os.path.join(output_dir, "columns.yaml"), response["schema_yaml"])


def _build_payload_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    sources = [flag for flag in (args.file, args.keys, args.documents) if flag]
    if len(sources) != 1:
        raise ValueError("Exactly one of --file, --keys or --documents is required")

    if args.file:
        payload = {
            "source": "file",
            "file_path": args.file,
            "format": args.format,
            "csv_options": {
                "has_header": not args.no_header,
                "skip_rows": args.skip_rows,
            },
        }
        if args.delimiter:
            payload["csv_options"]["delimiter"] = args.delimiter
    elif args.keys:
        payload = {"source": "key_pattern", "samples_path": args.keys}
    else:
        payload = {"source": "document", "samples_path": args.documents}

    payload["output"] = args.output
    payload["detailed"] = args.detailed
    return payload


def _apply_overrides(payload: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    config = dict(payload.get("config") or {})

    if args.sample_size is not None:
        config["sample_size"] = args.sample_size
    if args.max_depth is not None:
        config["max_depth"] = args.max_depth
    if args.type_merge:
        config["type_merge"] = args.type_merge
    if args.disabled:
        config["enabled"] = False

    payload["config"] = config
    if args.timeout is not None:
        payload["timeout_seconds"] = args.timeout
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Catalog Schema Inference CLI")

    parser.add_argument("--config", help="Path to YAML config file")

    # Sources
    parser.add_argument("--file", help="CSV / JSON / JSONL file to infer")
    parser.add_argument("--keys", help="Text file with one key-value store key per line")
    parser.add_argument("--documents", help="JSON or JSONL file of document samples")

    # File options
    parser.add_argument("--format", choices=["csv", "json", "jsonl", "parquet"],
                        help="File format (detected from extension if omitted)")
    parser.add_argument("--delimiter", help="CSV delimiter (use 'tab' for tabs)")
    parser.add_argument("--no-header", action="store_true", help="CSV has no header row")
    parser.add_argument("--skip-rows", type=int, default=0, help="Leading CSV rows to skip")

    # Inference config
    parser.add_argument("--sample-size", type=int, help="Maximum samples to analyze")
    parser.add_argument("--max-depth", type=int, help="Maximum document nesting depth")
    parser.add_argument("--type-merge", choices=["union", "most_common"],
                        help="Type merge strategy")
    parser.add_argument("--disabled", action="store_true", help="Disable inference")
    parser.add_argument("--timeout", type=float, help="Deadline in seconds")

    # Outputs
    parser.add_argument(
        "--output",
        default="ALL_FORMATS",
        choices=["JSON", "YAML", "ALL_FORMATS"],
        help="Output type",
    )
    parser.add_argument("--detailed", action="store_true",
                        help="Include coverage / pattern statistics")
    parser.add_argument("--output-dir", default="artifacts")

    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    try:
        # Load payload
        if args.config:
            payload = ConfigExecutor(args.config).build_payload()
        else:
            payload = _build_payload_from_args(args)
        payload = _apply_overrides(payload, args)

        cprint("\n[START] Schema inference started", C.BLUE, bold=True)
        cprint(f"[INFO] Source={payload.get('source')}  Output={payload.get('output')}", C.DIM)

        response = route(payload)

        cprint(
            f"[RESULT] {response['column_count']} columns from "
            f"{response['sample_count']} samples",
            C.CYAN,
        )

        # Persist outputs
        if args.output_dir:
            os.makedirs(args.output_dir, exist_ok=True)
            _persist_artifacts(response, args.output_dir)
            cprint(f"\n[DONE] Artifacts written to: {args.output_dir}", C.GREEN, bold=True)

        cprint("[COMPLETE] Schema inference completed", C.GREEN, bold=True)
        return response

    except Exception as e:
        cprint("\n[FAILED] Schema inference failed.", C.RED, bold=True)
        cprint(str(e), C.RED)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
