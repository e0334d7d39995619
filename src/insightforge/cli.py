"""CLI for analysing a text file with InsightForge."""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Sequence, TextIO

from insightforge.analysis.scoring import extract_fields, filter_document
from insightforge.config import get_settings
from insightforge.models import StructuredDocument
from insightforge.services.pipeline import AnalysisPipeline, build_pipeline

EXPORT_PREFIX = "insight_forge_analysis_"


def read_input(source: str, stdin: TextIO | None = None) -> str:
    if source == "-":
        return (stdin or sys.stdin).read()
    return Path(source).read_text(encoding="utf-8")


def export_path(target: Path, *, now: float | None = None) -> Path:
    """Resolve the export file, naming it after the current time for directories."""

    if target.is_dir():
        stamp = int((now if now is not None else time.time()) * 1000)
        return target / f"{EXPORT_PREFIX}{stamp}.json"
    return target


def write_export(document: StructuredDocument, target: Path) -> Path:
    path = export_path(target)
    path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Turn unstructured text into structured JSON.")
    parser.add_argument("source", nargs="?", default="-", help="Path to a text file, or '-' for stdin")
    parser.add_argument("--search", type=str, default=None, help="Keep only top-level entries mentioning this term")
    parser.add_argument("--json-out", type=Path, default=None, help="Optional file or directory for the JSON export")
    parser.add_argument("--indent", type=int, default=2, help="Indentation of the printed JSON")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None, *, pipeline: AnalysisPipeline | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        text = read_input(args.source)
    except OSError as exc:
        print(f"Could not read {args.source}: {exc}", file=sys.stderr)
        return 1

    pipeline = pipeline or build_pipeline(get_settings())
    response = pipeline.analyze(text)
    payload = response.to_dict()
    if response.data is not None and args.search:
        filtered = filter_document(response.data.data, args.search)
        payload["data"]["data"] = filtered
        payload["data"]["fields"] = extract_fields(filtered, pipeline.config.field_max_depth)
    print(json.dumps(payload, indent=args.indent, ensure_ascii=False))

    if not response.success:
        print(response.error, file=sys.stderr)
        return 1
    if args.json_out:
        written = write_export(payload["data"]["data"], args.json_out)
        print(f"Wrote {written}", file=sys.stderr)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
