"""Tests for supportkit_mime.config."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from supportkit_mime.config import MimeProcessorConfig


class TestMimeProcessorConfig:
    def test_defaults(self):
        """All defaults match the documented values."""
        cfg = MimeProcessorConfig()
        assert cfg.parser_version == "supportkit_mime:1.0.0"
        assert cfg.tenant_id is None
        assert cfg.max_nesting_depth == 10
        assert cfg.default_charset == "utf-8"
        assert cfg.duplicate_part_policy == "last"
        assert cfg.max_body_size_mb == 25
        assert cfg.collapse_forwarded is False
        assert cfg.truncate_urls is True
        assert cfg.max_url_length == 80
        assert cfg.backfill_limit == 100
        assert cfg.dry_run is False
        assert cfg.log_sample_data is False

    def test_from_file_json(self, tmp_path):
        """JSON override loads correctly."""
        data = {"tenant_id": "acme", "max_nesting_depth": 4}
        p = tmp_path / "config.json"
        p.write_text(json.dumps(data))

        cfg = MimeProcessorConfig.from_file(str(p))
        assert cfg.tenant_id == "acme"
        assert cfg.max_nesting_depth == 4
        # Defaults preserved
        assert cfg.default_charset == "utf-8"

    def test_from_file_yaml(self, tmp_path):
        """YAML override loads correctly."""
        yaml_content = "duplicate_part_policy: first\ncollapse_forwarded: true\n"
        p = tmp_path / "config.yaml"
        p.write_text(yaml_content)

        cfg = MimeProcessorConfig.from_file(str(p))
        assert cfg.duplicate_part_policy == "first"
        assert cfg.collapse_forwarded is True

    def test_from_file_empty_yaml(self, tmp_path):
        """An empty YAML file yields the defaults."""
        p = tmp_path / "config.yml"
        p.write_text("")

        cfg = MimeProcessorConfig.from_file(str(p))
        assert cfg == MimeProcessorConfig()

    def test_from_file_not_found(self):
        """Raises FileNotFoundError for missing file."""
        with pytest.raises(FileNotFoundError):
            MimeProcessorConfig.from_file("/nonexistent/config.json")

    def test_from_file_unsupported_extension(self, tmp_path):
        """Raises ValueError for an unknown extension."""
        p = tmp_path / "config.toml"
        p.write_text("tenant_id = 'acme'")
        with pytest.raises(ValueError, match="Unsupported"):
            MimeProcessorConfig.from_file(str(p))

    def test_invalid_policy_rejected(self):
        """Only 'last' and 'first' are accepted as duplicate policies."""
        with pytest.raises(ValidationError):
            MimeProcessorConfig(duplicate_part_policy="middle")

    def test_depth_must_be_positive(self):
        with pytest.raises(ValidationError):
            MimeProcessorConfig(max_nesting_depth=0)

    def test_parser_version_format(self):
        """Parser version starts with 'supportkit_mime:'."""
        assert MimeProcessorConfig().parser_version.startswith("supportkit_mime:")
