"""Parser for Brazilian NFC-e (Nota Fiscal de Consumidor Eletrônica) receipts.

Turns recognized receipt text into a :class:`~src.models.receipt.Receipt`.
Parsing is deterministic and never raises: fields that cannot be found
keep their empty defaults.
"""

from src.models.receipt import Receipt
from src.utils.config import ParserConfig
from src.utils.logger import get_logger

from .fields import (
    classify_payment,
    extract_address,
    extract_fields,
    extract_store_name,
)
from .items import ItemExtractor

logger = get_logger(__name__)


def split_lines(raw_text: str) -> list[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


class BrazilianReceiptParser:
    """Rule-based extractor for NFC-e receipt text.

    Args:
        config: Parser settings (known store names and search windows).
        item_extractor: Item scanner; override to plug in extra line layouts.
    """

    def __init__(
        self,
        config: ParserConfig | None = None,
        item_extractor: ItemExtractor | None = None,
    ) -> None:
        self.config = config or ParserConfig()
        self.item_extractor = item_extractor or ItemExtractor()

    def parse(self, raw_text: str) -> Receipt:
        """Extract a structured receipt from recognized text.

        Args:
            raw_text: Plain text returned by the recognizer.

        Returns:
            Parsed receipt; blank input gives a receipt holding only
            ``raw_text``.
        """
        if not raw_text or not raw_text.strip():
            logger.warning("Received blank receipt text, returning empty receipt")
            return Receipt(raw_text=raw_text or "")

        lines = split_lines(raw_text)
        fields = extract_fields(raw_text)
        items = self.item_extractor.extract(lines)

        receipt = Receipt(
            store_name=extract_store_name(
                lines,
                raw_text,
                self.config.known_stores,
                max_lines=self.config.store_search_lines,
            ),
            address=extract_address(lines, max_lines=self.config.address_search_lines),
            items=tuple(items),
            payment_method=classify_payment(raw_text),
            raw_text=raw_text,
            **fields,
        )

        logger.info(
            "Parsed receipt from %s: %d items, total %.2f",
            receipt.store_name or "unknown store",
            len(receipt.items),
            receipt.total_amount,
        )
        return receipt


def parse_receipt(raw_text: str) -> Receipt:
    """Parse ``raw_text`` with the default parser settings."""
    return BrazilianReceiptParser().parse(raw_text)
