"""Configuration management for the receipt scanner.

Loads and validates YAML configuration with defaults tuned for
thermal-paper NFC-e receipts.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_KNOWN_STORES: list[str] = [
    "FESTVAL",
    "CONDOR",
    "CARREFOUR",
    "PAO DE ACUCAR",
    "EXTRA",
    "BIG",
    "WALMART",
    "ATACADAO",
    "ASSAI",
    "MAKRO",
    "ANGELONI",
    "MUFFATO",
    "SUPER MUFFATO",
    "CIDADE CANCAO",
    "SUPER CENTER",
]


class PreprocessingConfig(BaseModel):
    """Configuration for the image preprocessing pipeline."""

    scale_enabled: bool = True
    min_size: int = Field(default=1200, ge=1)
    grayscale_enabled: bool = True
    contrast_enabled: bool = True
    contrast: float = 1.5
    denoise_enabled: bool = False
    median_radius: int = Field(default=1, ge=0)
    threshold_enabled: bool = True
    threshold_method: str = "adaptive"
    block_size: int = Field(default=15, ge=1)
    threshold_constant: int = 10
    global_threshold: int = Field(default=128, ge=0, le=255)
    sharpen_enabled: bool = True
    sharpen_strength: float = 1.0


class OCRConfig(BaseModel):
    """Configuration for the Tesseract recognizer."""

    tesseract_cmd: str | None = None
    default_lang: str = "por"
    psm: int = 6
    pdf_dpi: int = 300


class ParserConfig(BaseModel):
    """Configuration for receipt text parsing."""

    known_stores: list[str] = Field(
        default_factory=lambda: list(DEFAULT_KNOWN_STORES)
    )
    store_search_lines: int = 10
    address_search_lines: int = 15


class StorageConfig(BaseModel):
    """Configuration for the local receipt store."""

    db_path: str = "~/.local/share/nfce-scanner/receipts.db"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
