"""CLI for grouping a JSON export of keyword records."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from keyword_taxonomy.config import Settings
from keyword_taxonomy.lexicons import LexiconLoadError
from keyword_taxonomy.models import InvalidKeywordRecordError
from keyword_taxonomy.pipeline import KeywordGroupingPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Deduplicate and group keyword research records")
    parser.add_argument(
        "input",
        help="JSON file holding a list of records, or an object with a 'data' list ('-' reads stdin)",
    )
    parser.add_argument(
        "--lexicons",
        dest="lexicon_path",
        help="YAML lexicon file overriding the built-in brand and intent vocabularies",
    )
    parser.add_argument(
        "--summary-only",
        action="store_true",
        help="Print the summary and merge stats without the grouped keywords",
    )
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Drop records without a usable keyword instead of failing",
    )
    parser.add_argument(
        "--assigned-categories",
        action="store_true",
        help="Group by stored keyword_cluster/ai_category values when present",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation (default: 2)")
    return parser


def _read_payloads(source: str) -> list[Any]:
    if source == "-":
        raw = sys.stdin.read()
    else:
        raw = Path(source).read_text(encoding="utf-8")
    data = json.loads(raw)
    if isinstance(data, dict):
        data = data.get("data")
    if not isinstance(data, list):
        raise ValueError("Input must be a JSON list of records or an object with a 'data' list")
    return data


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.lexicon_path:
        settings = replace(settings, lexicon_path=args.lexicon_path)
    if args.skip_invalid:
        settings = replace(settings, invalid_record_policy="skip")
    if args.assigned_categories:
        settings = replace(settings, use_assigned_categories=True)

    if args.lexicon_path and not Path(args.lexicon_path).exists():
        parser.error(f"Lexicon file '{args.lexicon_path}' does not exist")

    try:
        payloads = _read_payloads(args.input)
    except (OSError, ValueError) as exc:
        parser.error(f"Could not read '{args.input}': {exc}")

    try:
        pipeline = KeywordGroupingPipeline(settings)
        result = pipeline.run(payloads)
    except (InvalidKeywordRecordError, LexiconLoadError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    output = result.to_dict(include_groups=not args.summary_only)
    print(json.dumps(output, ensure_ascii=False, indent=args.indent or None))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
