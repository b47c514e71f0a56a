"""Shared test fixtures for the receipt scanner test suite."""

from pathlib import Path

import numpy as np
import pytest

SAMPLE_RECEIPT = """FESTVAL SUPERMERCADOS LTDA
CNPJ: 12.345.678/0001-90
RUA XV DE NOVEMBRO, 1234 - CENTRO
CURITIBA - PR
DOCUMENTO AUXILIAR DA NOTA FISCAL DE CONSUMIDOR ELETRONICA
ITEM COD DESC QTD UN VL UNIT VL TOTAL
001 7891234567890 ARROZ BRANCO TIPO 1 1 UN 24,90 24,90
002 7899876543210 FEIJAO PRETO 2 UN 7,49 14,98
003 7891111111111 BANANA PRATA KG 1.500 x 5.99 8,99
DESCONTO ITEM -2,00
SUBTOTAL R$ 48,87
DESCONTO R$ 2,00
TOTAL R$ 46,87
FORMA DE PAGAMENTO
CARTAO DE CREDITO 46,87
MASTERCARD 5555********1234
Tributos Totais Incidentes R$ 9,12
Federal R$ 5,40
Estadual R$ 3,72
NFC-e N 000123456 Serie 001
15/03/2024 14:32:10
CHAVE DE ACESSO
4124 0312 3456 7800 0190 6500 1000 1234 5612 3456 7890
"""


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a small synthetic grayscale receipt-like image."""
    image = np.full((60, 40), 200, dtype=np.uint8)
    image[20:40, 10:30] = 30
    return image


@pytest.fixture
def sample_rgba_image() -> np.ndarray:
    """Create a small synthetic RGBA image with a dark block."""
    image = np.zeros((60, 40, 4), dtype=np.uint8)
    image[..., :3] = (220, 180, 140)
    image[..., 3] = 255
    image[20:40, 10:30, :3] = (20, 40, 60)
    return image


@pytest.fixture
def receipt_text() -> str:
    """Return a complete recognized NFC-e receipt."""
    return SAMPLE_RECEIPT


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
