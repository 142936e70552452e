#!/usr/bin/env python3
"""
Build the pipe-delimited quiz file from a country-reference JSON document.

Design intent:
- Project source fields as-is; no filtering happens here (the quiz filters on load).
- Preserve the order of the source document.
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
from pathlib import Path
from typing import Optional

from logging_config import configure_logging
from quiz_core import CAPITAL, CODE, DELIMITER, VARIANTS, DataFormatError, Variant

logger = logging.getLogger(__name__)

CODES_KEY = "3166-1"


def read_json(json_path: Path):
    with open(json_path, encoding="utf-8") as f:
        return json.load(f)


def detect_source_variant(source) -> Variant:
    if isinstance(source, list):
        return CAPITAL
    if isinstance(source, dict) and CODES_KEY in source:
        return CODE
    raise DataFormatError("Source JSON is neither a country list nor an ISO 3166-1 document.")


def transform_capitals(source: list[dict]) -> list[dict]:
    rows: list[dict] = []
    for i, country in enumerate(source):
        try:
            capitals = country.get("capital") or []
            rows.append(
                {
                    "cca2": country["cca2"],
                    "cca3": country["cca3"],
                    "ccn3": country["ccn3"],
                    "name_common": country["name"]["common"],
                    "name_official": country["name"]["official"],
                    # several capitals: the first one is asked
                    "capital": capitals[0] if capitals else "",
                }
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise DataFormatError(f"Country #{i} is missing field {e}") from e
    return rows


def transform_codes(source: dict) -> list[dict]:
    rows: list[dict] = []
    for i, country in enumerate(source[CODES_KEY]):
        try:
            rows.append(
                {
                    "alpha_2": country["alpha_2"],
                    "alpha_3": country["alpha_3"],
                    "name": country["name"],
                    "numeric": country["numeric"],
                    "official_name": country.get("official_name", ""),
                }
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise DataFormatError(f"Code #{i} is missing field {e}") from e
    return rows


def write_records(rows: list[dict], csv_path: Path, fieldnames: tuple[str, ...]) -> None:
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, delimiter=DELIMITER, lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)


def generate_content(json_path: Path, csv_path: Path, variant: Optional[Variant] = None) -> int:
    source = read_json(json_path)
    variant = variant or detect_source_variant(source)
    if variant is CODE:
        if not isinstance(source, dict) or CODES_KEY not in source:
            raise DataFormatError(f'Expected an object with a "{CODES_KEY}" array.')
        rows = transform_codes(source)
    else:
        if not isinstance(source, list):
            raise DataFormatError("Expected an array of countries.")
        rows = transform_capitals(source)

    write_records(rows, csv_path, variant.fieldnames)
    logger.info("Wrote %d %s rows to %s", len(rows), variant.name, csv_path)
    return len(rows)


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--json", required=True, type=Path, help="Path to the source countries JSON")
    ap.add_argument("--csv", type=Path, default=None, help="Path to output flat file (default: <json>.csv)")
    ap.add_argument("--variant", choices=sorted(VARIANTS), default=None, help="Force the quiz variant")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    configure_logging(args.verbose)

    if not args.json.exists():
        raise SystemExit(f"JSON not found: {args.json}")

    csv_path = args.csv or args.json.with_suffix(".csv")
    variant = VARIANTS[args.variant] if args.variant else None
    try:
        total = generate_content(args.json, csv_path, variant)
    except (ValueError, OSError) as e:
        raise SystemExit(str(e))

    print(f"Generated {total} records from {args.json} into {csv_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
