"""Table-driven extraction of receipt header and footer fields.

Each field owns one compiled pattern and one converter; the first match
in the text wins and a miss yields the field's default. Adding a receipt
layout means adding or adjusting a row, not another branch.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.utils.logger import get_logger

from .normalize import PRICE, format_cnpj, parse_number

logger = get_logger(__name__)

FieldValue = str | float


@dataclass(frozen=True)
class FieldRule:
    """A single field pattern with its converter and fallback."""

    name: str
    pattern: re.Pattern[str]
    convert: Callable[[re.Match[str]], FieldValue]
    default: FieldValue

    def extract(self, text: str) -> FieldValue:
        match = self.pattern.search(text)
        if match is None:
            return self.default
        return self.convert(match)


def _money(match: re.Match[str]) -> float:
    return parse_number(match.group(1))


def _text(match: re.Match[str]) -> str:
    return match.group(1)


def _cnpj(match: re.Match[str]) -> str:
    return format_cnpj(match.group(1))


def _date_time(match: re.Match[str]) -> str:
    return f"{match.group(1)} {match.group(2) or ''}".strip()


def _whole(match: re.Match[str]) -> str:
    return match.group(0).strip()


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        "cnpj",
        re.compile(
            r"CNPJ[:\s-]*([0-9]{2}[./]?[0-9]{3}[./]?[0-9]{3}/?[0-9]{4}-?[0-9]{2})",
            re.IGNORECASE,
        ),
        _cnpj,
        "",
    ),
    FieldRule(
        "date_time",
        re.compile(r"(\d{2}/\d{2}/\d{4})\s*(\d{2}:\d{2}:\d{2})?"),
        _date_time,
        "",
    ),
    FieldRule(
        "subtotal",
        re.compile(
            rf"(?:VALOR\s*TOTAL|SUBTOTAL|V\.?\s*TOTAL)[:\s]*R?\$?\s*({PRICE})",
            re.IGNORECASE,
        ),
        _money,
        0.0,
    ),
    FieldRule(
        "discount",
        re.compile(rf"DESCONTO[:\s]*R?\$?\s*-?\s*({PRICE})", re.IGNORECASE),
        _money,
        0.0,
    ),
    FieldRule(
        "total_amount",
        re.compile(
            r"(?:VALOR\s*A\s*PAGAR|V\.?\s*PAGAR|(?<!SUB)TOTAL)"
            rf"[:\s]*R?\$?\s*({PRICE})",
            re.IGNORECASE,
        ),
        _money,
        0.0,
    ),
    FieldRule(
        "total_taxes",
        re.compile(rf"Tributos.*?R\$\s*({PRICE})", re.IGNORECASE),
        _money,
        0.0,
    ),
    FieldRule(
        "federal_taxes",
        re.compile(rf"Federa(?:l|is).*?R\$\s*({PRICE})", re.IGNORECASE),
        _money,
        0.0,
    ),
    FieldRule(
        "state_taxes",
        re.compile(rf"Estadua(?:l|is).*?R\$\s*({PRICE})", re.IGNORECASE),
        _money,
        0.0,
    ),
    FieldRule(
        "card_number",
        re.compile(r"([0-9]{4,6}\*+[0-9]{4})"),
        _text,
        "",
    ),
    FieldRule(
        "access_key",
        re.compile(r"(?<![0-9])(?:[0-9]{4}[ \t]*){10}[0-9]{4}(?![0-9])"),
        _whole,
        "",
    ),
    FieldRule(
        "nfce_number",
        re.compile(r"NFC-?e\s*(?:N[º°o]?\.?)?[:\s]*([0-9]+)", re.IGNORECASE),
        _text,
        "",
    ),
)


def extract_fields(text: str) -> dict[str, FieldValue]:
    """Run every field rule over ``text``.

    Args:
        text: Full recognized receipt text.

    Returns:
        Mapping of field name to extracted value or default.
    """
    values = {rule.name: rule.extract(text) for rule in FIELD_RULES}
    found = sum(1 for rule in FIELD_RULES if values[rule.name] != rule.default)
    logger.debug("Field rules matched %d of %d fields", found, len(FIELD_RULES))
    return values


_ADDRESS_KEYWORDS: tuple[str, ...] = (
    "RUA",
    "AV ",
    "AVENIDA",
    "R.",
    "BR-",
    "BR ",
    "ROD",
    "ALAMEDA",
    "AL.",
    "PRACA",
    "PRAÇA",
    "PCA",
)

# Lines with these markers are never taken as the store name.
_STORE_NAME_EXCLUDED: tuple[str, ...] = ("CNPJ", "RUA", "AV ", "AVENIDA")

_ONLY_DIGITS_AND_PUNCTUATION = re.compile(r"^[\d\s/.,:;*\-]+$")

_PAYMENT_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"CR[EÉ]DITO"), "Credit Card"),
    (re.compile(r"D[EÉ]BITO"), "Debit Card"),
    (re.compile(r"\bPIX\b"), "PIX"),
    (re.compile(r"DINHEIRO"), "Cash"),
    (re.compile(r"MASTERCARD|\bVISA\b|\bELO\b"), "Credit Card"),
)

UNKNOWN_PAYMENT = "Unknown"


def extract_store_name(
    lines: Sequence[str],
    text: str,
    known_stores: Sequence[str],
    max_lines: int = 10,
) -> str:
    """Identify the store, preferring known chain names anywhere in the text.

    Falls back to the first plausible line near the top of the receipt:
    3 to 50 characters, not an address or CNPJ line, no e-mail, and not
    made only of digits and punctuation.
    """
    upper_text = text.upper()
    for store in known_stores:
        if store.upper() in upper_text:
            return store

    for line in lines[:max_lines]:
        upper_line = line.upper()
        if any(marker in upper_line for marker in _STORE_NAME_EXCLUDED):
            continue
        if not 3 <= len(line) <= 50 or "@" in line:
            continue
        if _ONLY_DIGITS_AND_PUNCTUATION.match(line):
            continue
        return line

    return ""


def extract_address(lines: Sequence[str], max_lines: int = 15) -> str:
    """Return the first early line that names a street type."""
    for line in lines[:max_lines]:
        upper_line = line.upper()
        if any(keyword in upper_line for keyword in _ADDRESS_KEYWORDS):
            return line
    return ""


def classify_payment(text: str) -> str:
    """Map payment keywords to a payment method label."""
    upper_text = text.upper()
    for pattern, label in _PAYMENT_RULES:
        if pattern.search(upper_text):
            return label
    return UNKNOWN_PAYMENT
