import argparse
import hashlib
import json
import logging
import statistics
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import jsonlines
from tqdm import tqdm

from .paragraph_splitter import ParagraphSplitter
from .validators import ParagraphValidator

logger = logging.getLogger(__name__)

PARAGRAPHS_FILE = "paragraphs.jsonl"
STATS_FILE = "paragraph_stats.json"
CHECKPOINT_FILE = "paragraph_checkpoint.json"


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def read_text(path: Path) -> str:
    try:
        # newline="" keeps "\r\n" and lone "\r" intact
        with path.open("r", encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise ValueError(f"{path} is not valid UTF-8: {e}") from e


def collect_inputs(inputs: Sequence[str], pattern: str) -> List[Path]:
    files: List[Path] = []
    for item in inputs:
        path = Path(item)
        if not path.exists():
            raise FileNotFoundError(f"Input not found: {item}")
        if path.is_dir():
            files.extend(sorted(p for p in path.rglob(pattern) if p.is_file()))
        else:
            files.append(path)
    return files


def split_file(splitter: ParagraphSplitter, path: Path, reverse: bool = False) -> List[Dict]:
    text = read_text(path)
    if reverse:
        records = splitter.split_section_from_back(text)
    else:
        records = splitter.split_section_into_paragraphs(text)
    ParagraphValidator.validate_paragraphs(text, records)
    ParagraphValidator.validate_reconstruction(text, splitter.segments(text))
    for record in records:
        record["source"] = str(path)
    return records


def write_jsonl(path: Path, rows: List[Dict]) -> None:
    with jsonlines.open(path, mode="w") as writer:
        writer.write_all(rows)


def load_records(path: Path) -> List[Dict]:
    with jsonlines.open(path) as reader:
        return list(reader)


def write_json(path: Path, payload: Dict) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def load_checkpoint(path: Path) -> Dict:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load checkpoint {path}: {e}")
        return {}


def build_stats(records: List[Dict], file_count: int) -> Dict:
    lengths = [r["length"] for r in records]
    per_source: Dict[str, int] = {}
    for record in records:
        per_source[record["source"]] = per_source.get(record["source"], 0) + 1

    return {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "files": file_count,
        "total_paragraphs": len(records),
        "min_length": min(lengths) if lengths else 0,
        "max_length": max(lengths) if lengths else 0,
        "avg_length": statistics.mean(lengths) if lengths else 0,
        "per_source": per_source,
    }


def run_pipeline(
    inputs: Sequence[str],
    output_dir: str,
    pattern: str = "*.txt",
    reverse: bool = False,
    dry_run: bool = False,
    validate_only: bool = False,
    verbose: bool = False,
    force: bool = False,
) -> List[Dict]:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(asctime)s - %(levelname)s - %(message)s")

    output_path = Path(output_dir)
    files = collect_inputs(inputs, pattern)
    logger.info(f"Found {len(files)} input files")

    if validate_only:
        logger.info("Running validation-only mode")
        return _validate_outputs(output_path, files)

    output_path.mkdir(parents=True, exist_ok=True)
    checkpoint_path = output_path / CHECKPOINT_FILE
    paragraphs_path = output_path / PARAGRAPHS_FILE
    checkpoint = load_checkpoint(checkpoint_path)
    hashes = {str(path): sha256_file(path) for path in files}

    if (
        not force
        and paragraphs_path.exists()
        and checkpoint.get("hashes") == hashes
        and checkpoint.get("reverse") == reverse
    ):
        logger.info("Outputs are up-to-date; skipping recomputation")
        return load_records(paragraphs_path)

    splitter = ParagraphSplitter()
    records: List[Dict] = []
    for path in tqdm(files, desc="Splitting files", unit="file"):
        file_records = split_file(splitter, path, reverse=reverse)
        logger.debug(f"{path}: {len(file_records)} paragraphs")
        records.extend(file_records)

    ParagraphValidator.log_stats(records)

    if dry_run:
        logger.info("Dry run enabled; outputs will not be written")
        return records

    logger.info("Writing outputs to %s", output_path)
    write_jsonl(paragraphs_path, records)
    write_json(output_path / STATS_FILE, build_stats(records, len(files)))
    write_json(
        checkpoint_path,
        {"hashes": hashes, "reverse": reverse, "status": "complete"},
    )
    logger.info("Paragraph pipeline complete: %s paragraphs", len(records))
    return records


def _validate_outputs(output_path: Path, files: Sequence[Path]) -> List[Dict]:
    paragraphs_path = output_path / PARAGRAPHS_FILE
    if not paragraphs_path.exists():
        raise FileNotFoundError(f"Required output file for validation is missing: {paragraphs_path}")

    records = load_records(paragraphs_path)
    by_source: Dict[str, List[Dict]] = {}
    for record in records:
        by_source.setdefault(record["source"], []).append(record)

    for source, source_records in by_source.items():
        source_path = Path(source)
        if not source_path.exists():
            raise FileNotFoundError(f"Source file for validation is missing: {source}")
        ParagraphValidator.validate_paragraphs(read_text(source_path), source_records)

    # Stored records must be the complete current split of every input
    splitter = ParagraphSplitter()
    for path in files:
        expected = splitter.split_section_into_paragraphs(read_text(path))
        stored = [
            {key: value for key, value in record.items() if key != "source"}
            for record in by_source.get(str(path), [])
        ]
        if expected and not stored:
            raise ValueError(f"No paragraph records stored for {path}")
        if stored != expected:
            raise ValueError(
                f"Stored paragraphs for {path} are out of date: "
                f"{len(stored)} stored, {len(expected)} in source"
            )

    ParagraphValidator.log_stats(records)
    logger.info("Validation-only completed successfully")
    return records


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Split UTF-8 text files into paragraphs")
    parser.add_argument("inputs", nargs="+", help="Text files or directories to split")
    parser.add_argument("--output-dir", default="data/paragraphs", help="Output directory for paragraph records")
    parser.add_argument("--pattern", default="*.txt", help="Glob used to find files inside input directories")
    parser.add_argument("--reverse", action="store_true", help="Collect paragraphs from the end of each file")
    parser.add_argument("--dry-run", action="store_true", help="Run without writing outputs")
    parser.add_argument("--validate-only", action="store_true", help="Validate existing outputs")
    parser.add_argument("--force", action="store_true", help="Force recomputation even if outputs are up-to-date")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    run_pipeline(
        inputs=args.inputs,
        output_dir=args.output_dir,
        pattern=args.pattern,
        reverse=args.reverse,
        dry_run=args.dry_run,
        validate_only=args.validate_only,
        verbose=args.verbose,
        force=args.force,
    )


if __name__ == "__main__":
    main()
