#!/usr/bin/env python3
"""
Lodging Confirmation Parser - Main Runner

Usage:
    python3 run.py <file>            # Parse one confirmation, print JSON
    python3 run.py --score <file>    # Also print a completeness score
    python3 run.py --text            # Parse text read from stdin
    python3 run.py --suite [dir]     # Compare fixtures with expected JSON
"""

import logging
import sys
from pathlib import Path

from lodging.config import CONFIG_FILE, load_config, save_config
from lodging.extract import ExtractionError, extract_text
from lodging.parser import parse_lodging_text
from lodging.scoring import completeness_label, score_record
from lodging.suite import run_suite

SCRIPT_DIR = Path(__file__).parent

VERSION = "1.0.0"

HELP_TEXT = """
Lodging Confirmation Parser

Usage:
    python3 run.py <file>            Parse a confirmation (.txt .html .eml .pdf or image)
    python3 run.py --score <file>    Parse and show how complete the result is
    python3 run.py --text            Parse confirmation text read from stdin
    python3 run.py --suite [dir]     Run the fixture suite (default: config fixtures_dir)
    python3 run.py --init-config     Write config.json with default settings
    python3 run.py --debug ...       Verbose logging
    python3 run.py --help            Show this help
"""


def setup_logging(level_name, debug=False):
    level = logging.DEBUG if debug else getattr(logging, str(level_name).upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def parse_file(path, config, show_score=False):
    """Phase 1: extract text. Phase 2: parse and print."""
    try:
        text = extract_text(path, lang=config["tesseract_lang"])
    except ExtractionError as e:
        print(f"Failed to parse file: {e}", file=sys.stderr)
        return 1

    print_record(parse_lodging_text(text), config, show_score)
    return 0


def print_record(record, config, show_score=False):
    print(record.to_json(indent=config["indent"]))
    if show_score:
        score, missing = score_record(record)
        print(f"\n  Completeness: {score}/100 ({completeness_label(score)})")
        if missing:
            print(f"  Missing:      {', '.join(missing)}")


def run_fixture_suite(directory, config):
    directory = Path(directory)
    if not directory.is_absolute():
        directory = SCRIPT_DIR / directory

    try:
        results = run_suite(directory, lang=config["tesseract_lang"])
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        return 1

    if not results:
        print(f"No lodging fixtures found in {directory}", file=sys.stderr)
        return 1

    failed = 0
    for result in results:
        if result.passed:
            print(f"PASS {result.name}")
            continue
        failed += 1
        print(f"FAIL {result.name}:")
        if result.error:
            print(f"  {result.error}")
        for diff in result.diffs:
            print(f"  {diff}")

    print(f"\n  {len(results) - failed}/{len(results)} fixtures passed")
    return 1 if failed else 0


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)

    if not args or "--help" in args or "-h" in args:
        print(HELP_TEXT)
        return 0

    if "--version" in args:
        print(VERSION)
        return 0

    if "--init-config" in args:
        save_config(load_config())
        print(f"Wrote {CONFIG_FILE}")
        return 0

    config = load_config()
    debug = "--debug" in args or "-d" in args
    setup_logging(config["log_level"], debug=debug)
    args = [a for a in args if a not in ("--debug", "-d")]

    if "--suite" in args:
        rest = [a for a in args if a != "--suite"]
        return run_fixture_suite(rest[0] if rest else config["fixtures_dir"], config)

    if "--text" in args:
        print_record(parse_lodging_text(sys.stdin.read()), config, show_score="--score" in args)
        return 0

    show_score = "--score" in args
    paths = [a for a in args if not a.startswith("-")]
    if not paths:
        print("Usage: python3 run.py <file.pdf|image|txt>", file=sys.stderr)
        return 1

    path = Path(paths[0]).resolve()
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 1

    return parse_file(path, config, show_score=show_score)


if __name__ == "__main__":
    sys.exit(main())
