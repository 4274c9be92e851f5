"""
Extraction completeness scoring.

Assigns weighted points to the fields a parse managed to find, so callers
can tell a near-complete record from one that only matched noise. The score
says nothing about whether a field is correct.
"""

from typing import List, Tuple

from .models import ParsedLodging

# Points per field found (sums to 100)
SCORE_WEIGHTS = {
    'check_in_date': 20,
    'check_out_date': 20,
    'hotel_name': 15,
    'total_cost': 10,
    'address': 8,
    'guest_name': 7,
    'free_cancel_by': 6,
    'currency': 5,
    'phone': 5,
    'rooms': 4,
}

# Minimum score for each label, highest first
COMPLETENESS_LABELS = [
    (80, 'complete'),
    (40, 'partial'),
    (1, 'sparse'),
]


def score_record(record: ParsedLodging) -> Tuple[int, List[str]]:
    """Score a parsed record.

    Returns:
        Tuple of (score 0-100, names of the weighted fields that are missing)
    """
    score = 0
    missing = []
    for attr, weight in SCORE_WEIGHTS.items():
        if getattr(record, attr) is not None:
            score += weight
        else:
            missing.append(attr)
    return score, missing


def completeness_label(score: int) -> str:
    for threshold, label in COMPLETENESS_LABELS:
        if score >= threshold:
            return label
    return 'empty'
