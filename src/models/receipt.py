"""Domain model for parsed NFC-e receipts.

Receipts and their items are immutable once built. Absent values are
represented by ``0.0`` for numbers and ``""`` for strings, never ``None``.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from enum import StrEnum
from typing import Any

from src.utils.logger import get_logger

logger = get_logger(__name__)


class Unit(StrEnum):
    """Units of measure printed on NFC-e item lines."""

    UN = "UN"
    KG = "KG"
    PC = "PC"
    LT = "LT"
    ML = "ML"
    G = "G"


@dataclass(frozen=True)
class ReceiptItem:
    """A single purchased line, or a negative-valued discount line."""

    item_number: str = ""
    barcode: str = ""
    description: str = ""
    quantity: float = 1.0
    unit: Unit = Unit.UN
    unit_price: float = 0.0
    total_price: float = 0.0
    is_discount: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["unit"] = self.unit.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReceiptItem":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "unit" in values:
            values["unit"] = Unit(str(values["unit"]).upper())
        return cls(**values)


@dataclass(frozen=True)
class Receipt:
    """Structured content of one scanned receipt.

    ``id`` and ``created_at`` are left at 0 by the parser and assigned by
    the persistence layer on save.
    """

    id: int = 0
    created_at: int = 0
    store_name: str = ""
    cnpj: str = ""
    address: str = ""
    date_time: str = ""
    items: tuple[ReceiptItem, ...] = field(default_factory=tuple)
    subtotal: float = 0.0
    discount: float = 0.0
    total_amount: float = 0.0
    total_taxes: float = 0.0
    federal_taxes: float = 0.0
    state_taxes: float = 0.0
    payment_method: str = ""
    card_number: str = ""
    access_key: str = ""
    nfce_number: str = ""
    raw_text: str = ""

    @property
    def items_total(self) -> float:
        """Sum of item totals, discounts included."""
        return round(sum(item.total_price for item in self.items), 2)

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["items"] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Receipt":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["items"] = tuple(
            ReceiptItem.from_dict(item) for item in values.get("items") or []
        )
        return cls(**values)


def items_to_json(items: tuple[ReceiptItem, ...] | list[ReceiptItem]) -> str:
    """Serialize an item list into the blob stored alongside a receipt."""
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


def items_from_json(blob: str) -> list[ReceiptItem]:
    """Rehydrate an item list, returning an empty list for a corrupt blob."""
    try:
        raw = json.loads(blob)
        return [ReceiptItem.from_dict(entry) for entry in raw]
    except (TypeError, ValueError, AttributeError) as exc:
        logger.warning("Discarding unreadable item blob: %s", exc)
        return []
