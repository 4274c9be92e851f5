"""
Fixture suite: parse a directory of saved confirmations and compare the
results with the expected JSON stored next to each document.

Layout:
    tests/fixtures/lodging/
        chic-stay.pdf
        chic-stay.json      # {"hotelName": "...", "checkInDate": "..."}
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .extract import ExtractionError, extract_text, is_supported
from .parser import parse_lodging_text

logger = logging.getLogger(__name__)


@dataclass
class FixtureResult:
    name: str
    diffs: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def passed(self):
        return not self.diffs and self.error is None


def find_fixtures(directory):
    """Pair every supported document in a directory with its expected JSON.

    Returns:
        List of (document_path, expected_json_path or None), sorted by name
    """
    directory = Path(directory)
    pairs = []
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix.lower() == '.json' or not is_supported(path):
            continue
        expected = path.with_suffix('.json')
        pairs.append((path, expected if expected.is_file() else None))
    return pairs


def compare(parsed, expected):
    """Compare the expected keys only; absent and empty are the same.

    Args:
        parsed: JSON form of a ParsedLodging
        expected: Expected JSON dict

    Returns:
        List of human-readable mismatches
    """
    diffs = []
    for key, want in expected.items():
        got = parsed.get(key)
        if _as_text(got) != _as_text(want):
            diffs.append(f'{key}: expected "{want}", got "{got}"')
    return diffs


def _as_text(value):
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def run_fixture(document, expected_path, lang=None):
    name = document.name
    if expected_path is None:
        return FixtureResult(name, error=f"Missing expected JSON for {name}")

    try:
        expected = json.loads(expected_path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        return FixtureResult(name, error=f"Invalid expected JSON {expected_path.name}: {e}")

    try:
        text = extract_text(document, lang=lang)
    except ExtractionError as e:
        return FixtureResult(name, error=str(e))

    parsed = parse_lodging_text(text).to_dict()
    return FixtureResult(name, diffs=compare(parsed, expected))


def run_suite(directory, lang=None):
    """Run every fixture in a directory.

    Raises:
        FileNotFoundError: the directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"No lodging fixtures found at {directory}")

    results = []
    for document, expected_path in find_fixtures(directory):
        result = run_fixture(document, expected_path, lang=lang)
        logger.debug(f"  -> {result.name}: {'PASS' if result.passed else 'FAIL'}")
        results.append(result)
    return results
