import json
import os
from typing import Dict, Optional

import yaml

from catalog_infer.inference.cancellation import CancellationToken
from catalog_infer.router import route


class ConfigExecutor:
    """
    Runs schema inference from a YAML configuration file.
    """

    def __init__(self, config_path: str, token: Optional[CancellationToken] = None):
        self.config_path = config_path
        self.token = token
        self.config = self._load_config()

    # ------------------------------------------
    # Load YAML
    # ------------------------------------------
    def _load_config(self) -> Dict:
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError(f"Config file must contain a mapping: {self.config_path}")

        return config

    # ------------------------------------------
    # Build Router Payload
    # ------------------------------------------
    def build_payload(self) -> Dict:
        cfg = self.config

        source_cfg = cfg.get("source") or {}
        settings = cfg.get("settings") or {}

        return {
            "source": source_cfg.get("kind", "file"),
            "file_path": source_cfg.get("file_path"),
            "format": source_cfg.get("format"),
            "csv_options": source_cfg.get("csv_options"),
            "samples_path": source_cfg.get("samples_path"),
            "config": cfg.get("inference"),
            "timeout_seconds": settings.get("timeout_seconds"),
            "detailed": settings.get("detailed", False),
            "output": cfg.get("output", "ALL_FORMATS"),
        }

    # ------------------------------------------
    # Execute
    # ------------------------------------------
    def execute(self) -> Dict:
        payload = self.build_payload()
        result = route(payload, self.token)
        self._save_outputs(result)
        return result

    # ------------------------------------------
    # Save Outputs
    # ------------------------------------------
    def _save_outputs(self, result: Dict):
        output_dir = self.config.get("output_dir", "outputs")
        name = self.config.get("name", "schema")
        os.makedirs(output_dir, exist_ok=True)

        with open(os.path.join(output_dir, f"{name}.json"), "w", encoding="utf-8") as f:
            json.dump(result["columns"], f, indent=2)

        if "schema_yaml" in result:
            with open(os.path.join(output_dir, f"{name}.yaml"), "w", encoding="utf-8") as f:
                f.write(result["schema_yaml"])
