"""Command-line interface for scanning NFC-e receipts.

Provides subcommands to scan a single receipt, parse recognized text,
write the preprocessed image for inspection, and batch-export a folder
of receipts to CSV.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

import numpy as np
from PIL import Image

from src.errors import ScanError
from src.models.receipt import Receipt
from src.ocr.scanner import ReceiptScanner
from src.preprocessing.pipeline import PreprocessingPipeline
from src.storage.repository import ReceiptRepository
from src.utils.config import AppConfig, load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.pdf")
_CSV_COLUMNS = [
    "filename",
    "status",
    "store_name",
    "cnpj",
    "date_time",
    "item_count",
    "subtotal",
    "discount",
    "total_amount",
    "total_taxes",
    "payment_method",
    "access_key",
    "nfce_number",
    "processing_time_s",
    "error",
]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported receipt files in a directory.

    Args:
        input_dir: Directory to scan for receipts.

    Returns:
        Sorted list of receipt file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _summary_row(filename: str, receipt: Receipt) -> dict[str, object]:
    return {
        "filename": filename,
        "status": "success",
        "store_name": receipt.store_name,
        "cnpj": receipt.cnpj,
        "date_time": receipt.date_time,
        "item_count": sum(1 for item in receipt.items if not item.is_discount),
        "subtotal": receipt.subtotal,
        "discount": receipt.discount,
        "total_amount": receipt.total_amount,
        "total_taxes": receipt.total_taxes,
        "payment_method": receipt.payment_method,
        "access_key": receipt.access_key,
        "nfce_number": receipt.nfce_number,
        "error": None,
    }


def process_folder(
    input_dir: Path,
    output_csv: Path,
    config: AppConfig | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Scan all receipts in a folder and export a summary CSV.

    Args:
        input_dir: Directory containing receipt images or PDFs.
        output_csv: Path for the output CSV file.
        config: Application configuration; loaded from disk when omitted.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    scanner = ReceiptScanner(config or load_config())

    files = _find_documents(input_dir)
    if not files:
        logger.warning("No receipts found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d receipts to process", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            receipt = scanner.scan(file_path, file_path.name)
            row = _summary_row(file_path.name, receipt)
            row["processing_time_s"] = round(time.time() - start_time, 2)
            results.append(row)
            successful += 1
        except ScanError as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            failed += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write receipt summaries to a CSV file.

    Args:
        results: List of summary rows.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Batch Scan Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def scan_single(
    file_path: Path, config: AppConfig | None = None, save: bool = False
) -> dict[str, object]:
    """Scan one receipt and return it as a JSON-ready dict.

    Args:
        file_path: Path to the receipt image or PDF.
        config: Application configuration; loaded from disk when omitted.
        save: Whether to persist the receipt to the configured store.

    Returns:
        Receipt fields, items included.
    """
    config = config or load_config()
    receipt = ReceiptScanner(config).scan(file_path, file_path.name)
    if save:
        repository = ReceiptRepository(config.storage.db_path)
        try:
            receipt = repository.save(receipt)
        finally:
            repository.close()
    return receipt.to_dict()


def parse_text_file(text_path: Path, config: AppConfig | None = None) -> dict[str, object]:
    """Parse a file of already-recognized receipt text."""
    scanner = ReceiptScanner(config or load_config())
    text = text_path.read_text(encoding="utf-8")
    return scanner.parse_text(text).to_dict()


def preprocess_image(
    image_path: Path, output_path: Path, config: AppConfig | None = None
) -> None:
    """Write the preprocessed version of a receipt image for inspection."""
    config = config or load_config()
    scanner = ReceiptScanner(config)
    pipeline = PreprocessingPipeline(config.preprocessing)
    images = scanner.load_images(image_path)
    processed, metrics = pipeline.process(images[0])
    output_path.parent.mkdir(parents=True, exist_ok=True)
    # Pipeline output is opaque, so alpha is dropped for formats like JPEG.
    Image.fromarray(np.ascontiguousarray(processed)).convert("RGB").save(output_path)
    print(
        f"Wrote {output_path} "
        f"(sharpness {metrics.sharpness_before:.1f}->{metrics.sharpness_after:.1f})"
    )


def _emit(result: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(result, indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="NFC-e Receipt Scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, help="YAML configuration file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="Scan a single receipt")
    scan_parser.add_argument("file", type=Path, help="Receipt image or PDF")
    scan_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")
    scan_parser.add_argument(
        "--save", action="store_true", help="Store the receipt in the database"
    )

    parse_parser = subparsers.add_parser("parse", help="Parse recognized text")
    parse_parser.add_argument("file", type=Path, help="Text file to parse")
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    pre_parser = subparsers.add_parser(
        "preprocess", help="Write the preprocessed image"
    )
    pre_parser.add_argument("file", type=Path, help="Receipt image")
    pre_parser.add_argument(
        "-o", "--output", type=Path, required=True, help="Output image file"
    )

    batch_parser = subparsers.add_parser("batch", help="Scan a folder of receipts")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with receipts"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, config, args.verbose)
        return

    if not args.file.exists():
        print(f"Error: {args.file} does not exist", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "scan":
            _emit(scan_single(args.file, config, args.save), args.output)
        elif args.command == "parse":
            _emit(parse_text_file(args.file, config), args.output)
        elif args.command == "preprocess":
            preprocess_image(args.file, args.output, config)
    except ScanError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except (OSError, ValueError) as exc:
        if args.command != "preprocess":
            raise
        print(f"Error: cannot write {args.output}: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
