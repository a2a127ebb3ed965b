#!/usr/bin/env python3
"""
Tire Intake CLI - Extract stock rows from photographed tire price lists.

Usage:
    tire-intake -f photo.jpg                      # Cloud model, output to stdout and file
    tire-intake -f photo.jpg --engine local       # Offline Tesseract OCR
    tire-intake -d ./photos/ -o file              # Directory of images, files only
    tire-intake -f photo.jpg --stock --shop-id 2  # Stock entries instead of raw rows
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tire_intake.core import config
from tire_intake.core.errors import TireIntakeError
from tire_intake.pipelines.stock_import import import_image

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}


# =============================================================================
# Output Functions
# =============================================================================

def save_json_output(data: Any, image_path: str, output_dir: Optional[str] = None) -> str:
    """
    Save extracted JSON data next to the image or in `output_dir`.

    Returns:
        Path to the saved JSON file
    """
    image_path = Path(image_path)

    if output_dir:
        output_path = Path(output_dir) / f"{image_path.stem}.json"
        output_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        output_path = image_path.with_suffix(".json")

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info(f"Saved output to: {output_path}")
    return str(output_path)


def process_image(
    image_path: str,
    engine: str,
    stock: bool = False,
    shop_id: Optional[int] = None,
) -> Any:
    """Extract one image file and return the JSON-ready payload."""
    path = Path(image_path)
    if not path.is_file():
        raise FileNotFoundError(f"Image file not found: {image_path}")

    result = import_image(path.read_bytes(), engine=engine, shop_id=shop_id)
    if stock:
        return {
            "entries": [entry.to_dict() for entry in result.entries],
            "summary": result.summary,
        }
    return [row.to_dict() for row in result.rows]


def emit(data: Any, image_path: str, output_mode: str, output_dir: Optional[str]) -> Optional[str]:
    if output_mode in ("stdout", "both"):
        print(json.dumps(data, indent=2, ensure_ascii=False))

    if output_mode in ("file", "both"):
        return save_json_output(data, image_path, output_dir)
    return None


def process_directory(
    dir_path: str,
    engine: str,
    output_mode: str = "both",
    output_dir: Optional[str] = None,
    stock: bool = False,
    shop_id: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Process every image in a directory.

    A failing image is recorded and processing continues.

    Returns:
        List of results (each with 'file', 'success', 'data' or 'error')
    """
    dir_path = Path(dir_path)
    if not dir_path.is_dir():
        raise NotADirectoryError(f"Not a valid directory: {dir_path}")

    images = sorted(p for p in dir_path.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
    if not images:
        logger.warning(f"No images found in {dir_path}")
        return []

    results = []
    total = len(images)

    for i, image in enumerate(images, 1):
        print(f"Processing [{i}/{total}]: {image.name}...", file=sys.stderr)

        result = {"file": str(image), "success": False}
        try:
            data = process_image(str(image), engine, stock=stock, shop_id=shop_id)
            result["success"] = True
            result["data"] = data
            saved_path = emit(data, str(image), output_mode, output_dir)
            if saved_path:
                result["output_file"] = saved_path
        except (TireIntakeError, OSError) as e:
            result["error"] = str(e)
            logger.error(f"Failed to process {image}: {e}")

        results.append(result)

    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tire-intake",
        description="Extract tire stock rows (brand, size, quantity, price) from price-list photos.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -f photo.jpg                      # Cloud model, stdout and file
  %(prog)s -f photo.jpg --engine local       # Offline Tesseract OCR
  %(prog)s -d ./photos/ -o file              # Whole directory, files only
  %(prog)s -f photo.jpg --stock --shop-id 2  # Stock entries with totals

Environment:
  ANTHROPIC_API_KEY    Anthropic API key (required for --engine cloud)
  TESSERACT_CMD        Path to the tesseract binary (optional)
        """
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument(
        "-f", "--file",
        type=str,
        help="Path to a single image to process"
    )
    input_group.add_argument(
        "-d", "--directory",
        type=str,
        help="Path to a directory of images to process"
    )

    parser.add_argument(
        "-e", "--engine",
        choices=list(config.ENGINES),
        default="cloud",
        help="Extraction engine (default: cloud)"
    )
    parser.add_argument(
        "-o", "--output",
        choices=["stdout", "file", "both"],
        default="both",
        help="Output mode: 'stdout' (print JSON), 'file' (save to .json), or 'both' (default: both)"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        help="Custom output directory for JSON files (default: same as input)"
    )
    parser.add_argument(
        "--stock",
        action="store_true",
        help="Output stock entries (storage size format, totals) instead of raw rows"
    )
    parser.add_argument(
        "--shop-id",
        type=int,
        help="Shop ID attached to stock entries"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging (shows why table lines were skipped)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    problems = config.validate_config(args.engine)
    if problems:
        for problem in problems:
            print(f"Error: {problem}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.file:
            print(f"Processing: {args.file}...", file=sys.stderr)
            data = process_image(args.file, args.engine, stock=args.stock, shop_id=args.shop_id)
            saved_path = emit(data, args.file, args.output, args.output_dir)
            if saved_path:
                print(f"Saved to: {saved_path}", file=sys.stderr)
        else:
            results = process_directory(
                args.directory,
                args.engine,
                args.output,
                args.output_dir,
                stock=args.stock,
                shop_id=args.shop_id,
            )
            success_count = sum(1 for r in results if r["success"])
            print(
                f"\nProcessed {len(results)} images: {success_count} succeeded, "
                f"{len(results) - success_count} failed",
                file=sys.stderr,
            )
    except (TireIntakeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
