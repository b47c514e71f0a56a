"""NFC-e Receipt Scanner.

Turns photographs and PDFs of Brazilian NFC-e receipts into structured
records: OpenCV/numpy preprocessing, Tesseract recognition, and a
rule-based parser for store, item, tax, and payment fields.
"""
