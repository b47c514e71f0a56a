"""Line-item extraction from the body of an NFC-e receipt.

Items are read in one forward pass over the lines between the column
header and the totals block. Each line in that window goes through an
ordered list of matchers; the first one that recognises the line wins.
Discount lines are detected independently and appended as negative items.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from src.models.receipt import ReceiptItem, Unit
from src.utils.logger import get_logger

from .normalize import PRICE, parse_number, price_at_end, strip_trailing_price

logger = get_logger(__name__)

NON_ITEM_KEYWORDS: tuple[str, ...] = (
    "CNPJ",
    "CPF",
    "CONSUMIDOR",
    "DOCUMENTO",
    "FISCAL",
    "ELETRONICA",
    "ELETRÔNICA",
    "CONSULTA",
    "CHAVE",
    "ACESSO",
    "TRIBUTOS",
    "FEDERAL",
    "ESTADUAL",
    "MUNICIPAL",
    "NFC-E",
    "PROTOCOLO",
    "AUTORIZACAO",
    "AUTORIZAÇÃO",
    "QR",
    "HTTP",
    "WWW",
    "FAZENDA",
    "ITEM COD",
    "DESC QTD",
    "VL.UNIT",
    "VL.ITEM",
    "TOTAL",
    "SUBTOTAL",
    "DESCONTO",
    "TROCO",
    "DINHEIRO",
    "CARTAO",
    "CARTÃO",
    "CREDITO",
    "CRÉDITO",
    "DEBITO",
    "DÉBITO",
    "MASTERCARD",
    "VISA",
    "ELO",
    "OPERADOR",
    "CAIXA",
    "DATA",
    "HORA",
    "SERIE",
    "SÉRIE",
    "NUMERO",
    "NÚMERO",
    "VALOR A PAGAR",
)

# Keywords must stand alone so descriptions like "AMARELO" survive.
_NON_ITEM = re.compile(
    r"(?<![A-Z0-9ÀÁÂÃÇÉÊÍÓÔÕÚ])(?:"
    + "|".join(re.escape(k) for k in NON_ITEM_KEYWORDS)
    + r")(?![A-Z0-9ÀÁÂÃÇÉÊÍÓÔÕÚ])"
)
_NUMERIC_LINE = re.compile(r"^[\d/.:\-* ]+$")
_MIN_ITEM_LINE = 5
_MIN_DESCRIPTION = 3

_UNITS = "|".join(unit.value for unit in Unit)
_QUANTITY = r"[0-9]+[.,]?[0-9]*"

_CODED_ITEM = re.compile(
    rf"^(\d{{3}})\s+(\d{{7,14}})\s+(.+?)\s+"
    rf"(?:({_QUANTITY})\s*({_UNITS})\b|({_UNITS})\s+({_QUANTITY}))",
    re.IGNORECASE,
)
_PLAIN_ITEM = re.compile(rf"^(.+?)\s+({PRICE})$")
_BARCODE_LINE = re.compile(r"^\d{3}\s+(\d{7,14})")
_WEIGHT = re.compile(
    r"(?:([0-9]+[.,][0-9]+)\s*KG|KG\s*([0-9]+[.,][0-9]+))"
    r"\s*[xX*]\s*([0-9]+[.,][0-9]+)",
    re.IGNORECASE,
)
_TRAILING_CURRENCY = re.compile(r"\s*R\$\s*$")
_DISCOUNT_VALUE = re.compile(rf"-\s*{PRICE}")
_FIRST_VALUE = re.compile(rf"-?\s*({PRICE})")


def is_non_item_line(line: str) -> bool:
    """Whether a line is receipt boilerplate rather than a purchased item."""
    if _NON_ITEM.search(line.upper()):
        return True
    if len(line) < _MIN_ITEM_LINE:
        return True
    return bool(_NUMERIC_LINE.match(line))


def is_skipped_in_window(line: str) -> bool:
    """Whether the item scan passes over a line without trying the matchers.

    Barcode-only lines stay eligible for the split-item matcher.
    """
    return is_non_item_line(line) and not _BARCODE_LINE.match(line)


def _weight(line: str) -> tuple[float, float] | None:
    """Return ``(kilograms, price_per_kg)`` from ``1,500 KG x 5,99``."""
    match = _WEIGHT.search(line)
    if match is None:
        return None
    return parse_number(match.group(1) or match.group(2)), parse_number(match.group(3))


@dataclass(frozen=True)
class ItemMatch:
    """A recognised item and how many input lines it used."""

    item: ReceiptItem
    lines_used: int = 1


class ItemLineMatcher(Protocol):
    """Recognises one physical layout of an item line."""

    def match(self, lines: Sequence[str], index: int) -> ItemMatch | None: ...


class CodedItemMatcher:
    """``<seq> <barcode> <description> <qty> <unit> ...`` lines."""

    def match(self, lines: Sequence[str], index: int) -> ItemMatch | None:
        line = lines[index]
        found = _CODED_ITEM.search(line)
        if found is None:
            return None

        barcode = found.group(2)
        description = found.group(3).strip()
        price = price_at_end(line)
        weight = _weight(line)

        if weight is not None:
            kilograms, price_per_kg = weight
            item = ReceiptItem(
                barcode=barcode,
                description=description,
                quantity=kilograms,
                unit=Unit.KG,
                unit_price=price_per_kg,
                total_price=price if price is not None else kilograms * price_per_kg,
            )
        else:
            item = ReceiptItem(
                barcode=barcode,
                description=description,
                unit_price=price or 0.0,
                total_price=price or 0.0,
            )
        return ItemMatch(item)


class PlainItemMatcher:
    """``<description> <price>`` lines without a code column."""

    def match(self, lines: Sequence[str], index: int) -> ItemMatch | None:
        line = lines[index]
        found = _PLAIN_ITEM.search(line)
        if found is None:
            return None

        description = _TRAILING_CURRENCY.sub("", found.group(1)).strip()
        if len(description) < _MIN_DESCRIPTION or is_non_item_line(description):
            return None

        price = parse_number(found.group(2))
        weight = _weight(line)
        if weight is None:
            item = ReceiptItem(
                description=description, unit_price=price, total_price=price
            )
            return ItemMatch(item)

        kilograms, price_per_kg = weight
        return ItemMatch(
            ReceiptItem(
                description=_WEIGHT.sub("", description).strip(),
                quantity=kilograms,
                unit=Unit.KG,
                unit_price=price_per_kg,
                total_price=price,
            )
        )


class SplitItemMatcher:
    """A barcode line whose description and price wrapped to the next line."""

    def match(self, lines: Sequence[str], index: int) -> ItemMatch | None:
        line = lines[index]
        found = _BARCODE_LINE.match(line)
        if found is None or index + 1 >= len(lines):
            return None

        next_line = lines[index + 1]
        if is_non_item_line(next_line):
            return None

        price = price_at_end(next_line)
        if price is None:
            price = price_at_end(line)
        if price is None or price <= 0:
            return None

        description = strip_trailing_price(next_line)
        if len(description) < _MIN_DESCRIPTION:
            return None

        item = ReceiptItem(
            barcode=found.group(1),
            description=description,
            unit_price=price,
            total_price=price,
        )
        return ItemMatch(item, lines_used=2)


def parse_discount(line: str) -> ReceiptItem | None:
    """Turn a ``DESCONTO ... -2,00`` line into a negative discount item."""
    upper_line = line.upper()
    if "DESCONTO" not in upper_line and "DESC " not in upper_line:
        return None
    if "ITEM" not in upper_line and not _DISCOUNT_VALUE.search(line):
        return None

    found = _FIRST_VALUE.search(line)
    if found is None:
        return None

    value = parse_number(found.group(1))
    return ReceiptItem(
        description=line.strip(),
        unit_price=-value,
        total_price=-value,
        is_discount=True,
    )


class ScanState(Enum):
    """Position of the item scan relative to the item window."""

    SEEKING = "seeking"
    IN_ITEMS = "in_items"
    DONE = "done"


def find_items_start(lines: Sequence[str]) -> int:
    """Index of the first line after the code/description column header."""
    for i, line in enumerate(lines):
        upper_line = line.upper()
        if "COD" in upper_line and ("DESC" in upper_line or "PROD" in upper_line):
            return i + 1
    return 0


def find_items_end(lines: Sequence[str], start: int = 0) -> int:
    """Index of the first totals or payment line at or after ``start``."""
    for i in range(start, len(lines)):
        upper_line = lines[i].upper()
        if (
            ("TOTAL" in upper_line and "SUBTOTAL" not in upper_line)
            or "VALOR A PAGAR" in upper_line
            or "FORMA DE PAGAMENTO" in upper_line
            or "FORMA PAGAMENTO" in upper_line
            or "CARTAO" in upper_line
            or "CARTÃO" in upper_line
        ):
            return i
    return len(lines)


DEFAULT_MATCHERS: tuple[ItemLineMatcher, ...] = (
    CodedItemMatcher(),
    PlainItemMatcher(),
    SplitItemMatcher(),
)


class ItemExtractor:
    """Single-pass item scanner over a receipt's lines.

    Args:
        matchers: Item line matchers tried in order for each line.
            Defaults to coded, plain, then split layouts.
    """

    def __init__(self, matchers: Sequence[ItemLineMatcher] | None = None) -> None:
        self.matchers: tuple[ItemLineMatcher, ...] = tuple(
            matchers if matchers is not None else DEFAULT_MATCHERS
        )

    def extract(self, lines: Sequence[str]) -> list[ReceiptItem]:
        """Extract purchased and discount items in order of appearance.

        Args:
            lines: Trimmed, non-empty receipt lines.

        Returns:
            Items numbered ``001``, ``002``, ... followed in place by any
            discount items their lines produced.
        """
        start = find_items_start(lines)
        end = find_items_end(lines, start)
        items: list[ReceiptItem] = []
        state = ScanState.SEEKING
        index = 0

        while state is not ScanState.DONE:
            if state is ScanState.SEEKING:
                index = start
                state = ScanState.IN_ITEMS
            if index >= end:
                state = ScanState.DONE
                continue

            line = lines[index]
            step = 1
            if not is_skipped_in_window(line):
                found = self._match(lines, index)
                if found is not None:
                    number = sum(1 for item in items if not item.is_discount) + 1
                    items.append(replace(found.item, item_number=f"{number:03d}"))
                    step = found.lines_used

            discount = parse_discount(line)
            if discount is not None:
                items.append(discount)

            index += step

        logger.debug(
            "Scanned item window [%d, %d) and found %d items", start, end, len(items)
        )
        return items

    def _match(self, lines: Sequence[str], index: int) -> ItemMatch | None:
        for matcher in self.matchers:
            found = matcher.match(lines, index)
            if found is not None:
                return found
        return None
