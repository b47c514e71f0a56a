"""Value normalisation for Brazilian receipt text.

Receipts print decimals with a comma (``20,37``) and CNPJs with fixed
punctuation; OCR frequently drops or swaps both.
"""

import re

PRICE = r"[0-9]+[.,][0-9]{2}"

_NON_NUMERIC = re.compile(r"[^0-9.]")
_NON_DIGIT = re.compile(r"[^0-9]")
_PRICE_AT_END = re.compile(rf"({PRICE})\s*$")
_TRAILING_PRICE = re.compile(rf"R?\$?\s*{PRICE}\s*$")


def parse_number(text: str) -> float:
    """Parse a receipt number, treating a comma as the decimal separator.

    Characters other than digits and dots are discarded. Anything that
    still fails to parse yields ``0.0``.

    Args:
        text: Raw number as printed, e.g. ``"R$ 20,37"``.

    Returns:
        Parsed float, or ``0.0``.
    """
    cleaned = _NON_NUMERIC.sub("", text.replace(",", "."))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def format_cnpj(value: str) -> str:
    """Format a CNPJ as ``NN.NNN.NNN/NNNN-NN``.

    Args:
        value: CNPJ with or without punctuation.

    Returns:
        The canonical form if exactly 14 digits are present, otherwise
        ``value`` unchanged.
    """
    digits = _NON_DIGIT.sub("", value)
    if len(digits) != 14:
        return value
    return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}"


def price_at_end(line: str) -> float | None:
    """Return the currency value that ends ``line``, if there is one."""
    match = _PRICE_AT_END.search(line)
    if match is None:
        return None
    return parse_number(match.group(1))


def strip_trailing_price(line: str) -> str:
    """Remove a trailing ``R$ 0,00``-style value from ``line``."""
    return _TRAILING_PRICE.sub("", line).strip()
