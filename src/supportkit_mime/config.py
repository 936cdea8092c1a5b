"""Configuration model for the supportkit-mime engine.

Provides ``MimeProcessorConfig`` with all tunable parameters and sensible
defaults.  Supports loading overrides from YAML or JSON files via the
``from_file()`` classmethod.
"""

from __future__ import annotations

import json
import pathlib
from typing import Literal

import yaml
from pydantic import BaseModel, Field


class MimeProcessorConfig(BaseModel):
    """All tunable parameters with sensible defaults."""

    # --- Identity ---
    parser_version: str = "supportkit_mime:1.0.0"
    tenant_id: str | None = None

    # --- MIME Extraction ---
    max_nesting_depth: int = Field(default=10, ge=1)
    default_charset: str = "utf-8"
    duplicate_part_policy: Literal["last", "first"] = "last"

    # --- Security / Resource Limits ---
    max_body_size_mb: int = 25

    # --- Display Cleaner ---
    collapse_forwarded: bool = False
    truncate_urls: bool = True
    max_url_length: int = 80

    # --- Backfill ---
    backfill_limit: int = 100
    dry_run: bool = False

    # --- Logging / PII Safety ---
    log_sample_data: bool = False

    @classmethod
    def from_file(cls, path: str) -> MimeProcessorConfig:
        """Load configuration from a YAML or JSON file.

        File format is detected by extension: ``.yaml`` / ``.yml`` for YAML,
        ``.json`` for JSON.  Keys present in the file override the
        corresponding defaults; keys not present retain their defaults.
        """
        file_path = pathlib.Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = file_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            with open(file_path) as fh:
                data = yaml.safe_load(fh)
        elif suffix == ".json":
            with open(file_path) as fh:
                data = json.load(fh)
        else:
            raise ValueError(
                f"Unsupported config file extension '{suffix}'. "
                "Use .yaml, .yml, or .json."
            )

        if data is None:
            data = {}

        return cls(**data)
