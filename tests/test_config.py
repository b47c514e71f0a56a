"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.utils.config import (
    DEFAULT_KNOWN_STORES,
    AppConfig,
    OCRConfig,
    ParserConfig,
    PreprocessingConfig,
    StorageConfig,
    load_config,
)


class TestPreprocessingConfig:
    """Tests for PreprocessingConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = PreprocessingConfig()
        assert cfg.min_size == 1200
        assert cfg.contrast == 1.5
        assert cfg.block_size == 15
        assert cfg.threshold_constant == 10
        assert cfg.sharpen_strength == 1.0
        assert cfg.threshold_method == "adaptive"
        assert cfg.denoise_enabled is False

    def test_override(self) -> None:
        cfg = PreprocessingConfig(min_size=1000, contrast=2.0)
        assert cfg.min_size == 1000
        assert cfg.contrast == 2.0

    def test_rejects_out_of_range_threshold(self) -> None:
        with pytest.raises(ValidationError):
            PreprocessingConfig(global_threshold=300)


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "por"
        assert cfg.psm == 6
        assert cfg.pdf_dpi == 300
        assert cfg.tesseract_cmd is None


class TestParserConfig:
    """Tests for ParserConfig defaults."""

    def test_defaults(self) -> None:
        cfg = ParserConfig()
        assert cfg.known_stores == DEFAULT_KNOWN_STORES
        assert cfg.known_stores[0] == "FESTVAL"
        assert cfg.store_search_lines == 10
        assert cfg.address_search_lines == 15

    def test_known_stores_not_shared(self) -> None:
        cfg = ParserConfig()
        cfg.known_stores.append("NOVA LOJA")
        assert "NOVA LOJA" not in DEFAULT_KNOWN_STORES


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.preprocessing, PreprocessingConfig)
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.parser, ParserConfig)
        assert isinstance(cfg.storage, StorageConfig)
        assert cfg.log_level == "INFO"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_default_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "por"
        assert cfg.preprocessing.min_size == 1200
        assert cfg.parser.known_stores == DEFAULT_KNOWN_STORES

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "preprocessing": {"threshold_method": "global"},
            "parser": {"known_stores": ["LOJA A"]},
            "storage": {"db_path": ":memory:"},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.preprocessing.threshold_method == "global"
        assert cfg.parser.known_stores == ["LOJA A"]
        assert cfg.storage.db_path == ":memory:"
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert load_config(config_file) == AppConfig()
