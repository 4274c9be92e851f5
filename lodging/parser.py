"""
Lodging information extraction from confirmation text.

Strategy:
1. Independent extraction passes - each field has an ordered tuple of
   passes, the first one that finds something wins
2. Vendor overrides for known confirmation templates (see overrides.py)
3. Date reconciliation once the cancellation deadline is known

The input is whatever OCR or PDF text extraction produced. Nothing here
raises: a field that cannot be found is simply left as None.
"""

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation

from dateutil import parser as dateutil_parser

from .models import ParsedLodging
from .overrides import PRIORITY_HOTEL_FRAGMENTS, apply_overrides

# Set up logging
logger = logging.getLogger(__name__)

# Longer input is truncated so every regex pass stays bounded
MAX_INPUT_CHARS = 200000

# Only this many date literals take part in pairing
MAX_PAIRING_DATES = 500

MAX_STAY_DAYS = 60
CANCEL_WINDOW_DAYS = 14

MIN_PLAUSIBLE_COST = Decimal('1')
MAX_PLAUSIBLE_COST = Decimal('10000')


# ============================================================================
# DATE EXTRACTION (using dateutil)
# ============================================================================

_MONTHS = (
    r'(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|Aug(?:ust)?|'
    r'Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)'
)

# "Nov 30, 2025" / "November 30 2025"
DATE_PATTERN = re.compile(r'\b' + _MONTHS + r'\s+\d{1,2},?\s+\d{4}\b', re.IGNORECASE)

# Only used for the text following a cancellation phrase
_ISO_DATE_PATTERN = re.compile(r'\b\d{4}-\d{2}-\d{2}\b')
_DAY_FIRST_PATTERN = re.compile(r'\b\d{1,2}\s+' + _MONTHS + r',?\s+\d{4}\b', re.IGNORECASE)

_CHECK_IN_LABEL = re.compile(r'check[\s-]*in[:\s]+([^\n]+)', re.IGNORECASE)
_CHECK_OUT_LABEL = re.compile(r'check[\s-]*out[:\s]+([^\n]+)', re.IGNORECASE)

_CANCEL_PATTERNS = [
    re.compile(r'free\s+cancel\w*\s+until\W*([^\n]+)', re.IGNORECASE),
    re.compile(r'cancel\s+for\s+free\s+until\W*([^\n]+)', re.IGNORECASE),
]


def normalize_date(value, dayfirst=False):
    """Convert a date literal to YYYY-MM-DD.

    Returns:
        ISO date string, or None if the literal is not a real date
        (e.g. "Feb 30, 2025")
    """
    if not value:
        return None
    try:
        dt = dateutil_parser.parse(value, dayfirst=dayfirst)
    except (ValueError, OverflowError, TypeError):
        return None
    return dt.date().isoformat()


def extract_dates_from_text(text):
    """Return every month-name date literal in text as ISO strings, in document order."""
    dates = []
    for match in DATE_PATTERN.finditer(text or ''):
        iso = normalize_date(match.group(0))
        if iso:
            dates.append(iso)
    return dates


def _first_date(fragment):
    dates = extract_dates_from_text(fragment)
    return dates[0] if dates else None


def _days_between(first, second):
    return (date.fromisoformat(second) - date.fromisoformat(first)).days


def pick_date_pair(dates):
    """Pick the check-in/check-out pair with the shortest plausible stay.

    Only pairs in document order are considered (check-in listed before
    check-out), and the pair must span between 1 and MAX_STAY_DAYS days.
    The earliest pair in document order wins ties.

    Returns:
        Tuple of (check_in, check_out), or (None, None) if no pair qualifies
    """
    candidates = dates[:MAX_PAIRING_DATES]
    best = None
    for i, first in enumerate(candidates):
        for second in candidates[i + 1:]:
            span = _days_between(first, second)
            if 0 < span <= MAX_STAY_DAYS and (best is None or span < best[2]):
                best = (first, second, span)
    if best:
        return best[0], best[1]
    return None, None


def _labeled_date(text, label_pattern):
    for match in label_pattern.finditer(text):
        found = _first_date(match.group(1))
        if found:
            return found
    return None


def _fill_stay_dates(record, dates):
    """Fill whichever of check-in/check-out is missing from a list of dates."""
    check_in, check_out = pick_date_pair(dates)
    if record.check_in_date is None:
        record.check_in_date = check_in or (dates[0] if dates else None)
    if record.check_out_date is None:
        record.check_out_date = check_out or (dates[1] if len(dates) > 1 else None)


def _free_cancel_by(text):
    """Find the free-cancellation deadline following a cancellation phrase."""
    for pattern in _CANCEL_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        trailing = match.group(1)
        found = _first_date(trailing)
        if found:
            return found
        loose = _ISO_DATE_PATTERN.search(trailing)
        if loose:
            found = normalize_date(loose.group(0))
        else:
            loose = _DAY_FIRST_PATTERN.search(trailing)
            if loose:
                found = normalize_date(loose.group(0), dayfirst=True)
        if found:
            return found
        logger.debug(f"  -> Cancellation phrase without a usable date: '{trailing.strip()[:60]}'")
    return None


def _infer_free_cancel_by(check_in, dates):
    """Latest date strictly before check-in, preferring one within CANCEL_WINDOW_DAYS."""
    before = sorted(set(d for d in dates if d < check_in))
    if not before:
        return None
    within = [d for d in before if _days_between(d, check_in) <= CANCEL_WINDOW_DAYS]
    return (within or before)[-1]


# ============================================================================
# HOTEL NAME
# ============================================================================

_HOTEL_LABEL_PATTERNS = [
    re.compile(r"hotel\s*name[:\s]+([A-Za-z0-9 ,.'&-]+)", re.IGNORECASE),
    re.compile(r"property\s*:\s*([A-Za-z0-9 ,.'&-]+)", re.IGNORECASE),
]

_NAME_RUN_PATTERN = re.compile(r"[A-Za-z0-9 .,'-]+")
_HOTEL_WORD_PATTERN = re.compile(r'hotel\b', re.IGNORECASE)


def _labeled_hotel_name(text):
    for pattern in _HOTEL_LABEL_PATTERNS:
        match = pattern.search(text)
        if match:
            name = match.group(1).strip()
            if name:
                return name
    return None


def _hotel_name_candidates(text):
    """Every run of name-like characters ending in the word "hotel"."""
    candidates = []
    for run in _NAME_RUN_PATTERN.findall(text):
        ends = [m.end() for m in _HOTEL_WORD_PATTERN.finditer(run)]
        if not ends:
            continue
        candidate = run[:ends[-1]].lstrip(" .,'-").strip()
        if candidate and candidate.lower() != 'hotel':
            candidates.append(candidate)
    return candidates


def _hotel_name_from_mentions(text):
    candidates = _hotel_name_candidates(text)
    if not candidates:
        return None
    logger.debug(f"  -> Hotel name candidates: {candidates[:5]}")

    for fragment in PRIORITY_HOTEL_FRAGMENTS:
        for candidate in candidates:
            if fragment.search(candidate):
                return candidate

    # Shorter matches carry less trailing sentence noise
    return min(candidates, key=len)


# ============================================================================
# GUEST NAME
# ============================================================================

_GUEST_LABEL_PATTERNS = [
    re.compile(r"guest(?:\s*name)?\s*:\s*([A-Za-z ,.'()-]+)", re.IGNORECASE),
    re.compile(r"reservation\s+for\s+([A-Za-z ,.'()-]+)", re.IGNORECASE),
]
_GREETING_PATTERN = re.compile(r'Thanks[, ]+([A-Z][a-z]+ [A-Z][a-z]+)')
_EMAIL_NAME_PATTERN = re.compile(r'([A-Z][a-z]+ [A-Z][a-z]+)\s*<[^<>\n]{1,254}>')

_DISCLAIMER_TAIL = re.compile(r'max capacity.*$', re.IGNORECASE)
_SEE_ONLINE = re.compile(r'see confirmation online', re.IGNORECASE)
_PARENTHETICAL = re.compile(r'\(.*?\)')
_GUEST_REJECT = re.compile(r'below|see confirmation', re.IGNORECASE)


def _clean_guest_candidate(raw):
    candidate = _DISCLAIMER_TAIL.sub('', raw)
    candidate = _SEE_ONLINE.sub('', candidate)
    candidate = _PARENTHETICAL.sub('', candidate)
    candidate = candidate.strip(" ,.-()")
    if not candidate or _GUEST_REJECT.search(candidate):
        return None
    return candidate


def _labeled_guest_name(text):
    for pattern in _GUEST_LABEL_PATTERNS:
        match = pattern.search(text)
        if match:
            candidate = _clean_guest_candidate(match.group(1))
            if candidate:
                return candidate
            logger.debug(f"  -> Rejected guest label value: '{match.group(1).strip()[:60]}'")
    return None


def _guest_name_from_greeting(text):
    match = _GREETING_PATTERN.search(text)
    return _clean_guest_candidate(match.group(1)) if match else None


def _guest_name_from_email_header(text):
    match = _EMAIL_NAME_PATTERN.search(text)
    return _clean_guest_candidate(match.group(1)) if match else None


def _title_case(name):
    return ' '.join(word[:1].upper() + word[1:].lower() for word in name.split())


# ============================================================================
# ROOMS, COST, CURRENCY, PAYMENT
# ============================================================================

_ROOMS_PATTERN = re.compile(r'(?<!\d)(\d+)\s*rooms?\b', re.IGNORECASE)

# "$1,234.56" / "1234" / "$ 89.00" / "183.6" (OCR dropped the last digit)
_AMOUNT_BODY = r'(?<![\d.,])(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)(?!\d|[.,]\d)'
_LABELED_AMOUNT_PATTERN = re.compile(
    r'(?:total|amount\s+paid|price)[^\d]{0,20}' + _AMOUNT_BODY, re.IGNORECASE
)
_AMOUNT_PATTERN = re.compile(_AMOUNT_BODY)

_EURO_MARKERS = ('€', 'â‚¬', 'ƒ,ª')
_EUR_CODE = re.compile(r'\bEUR\b', re.IGNORECASE)
_USD_CODE = re.compile(r'\bUSD\b', re.IGNORECASE)


def _room_count(text):
    match = _ROOMS_PATTERN.search(text)
    return match.group(1) if match else None


def _plausible_amounts(raw_amounts):
    amounts = []
    for raw in raw_amounts:
        try:
            value = Decimal(raw.replace(',', ''))
        except InvalidOperation:
            continue
        if MIN_PLAUSIBLE_COST < value < MAX_PLAUSIBLE_COST:
            amounts.append(value)
    return amounts


def _total_cost(text):
    """Pick the booking total among the amounts in the text.

    Amounts near "total"/"amount paid"/"price" are preferred; otherwise any
    amount outside a date literal is considered. Among those, amounts with
    cents beat amounts of 50 or more, which beat everything else; the
    largest of the winning tier is the total.
    """
    amounts = _plausible_amounts(_LABELED_AMOUNT_PATTERN.findall(text))
    if not amounts:
        amounts = _plausible_amounts(_AMOUNT_PATTERN.findall(DATE_PATTERN.sub(' ', text)))
    if not amounts:
        return None

    with_cents = [a for a in amounts if a % 1 != 0]
    over_50 = [a for a in amounts if a >= 50]
    chosen = max(with_cents or over_50 or amounts)
    logger.debug(f"  -> Amounts considered: {[str(a) for a in amounts[:10]]}, chosen {chosen}")
    return f'{chosen:.2f}'


def _currency(text):
    if any(marker in text for marker in _EURO_MARKERS) or _EUR_CODE.search(text):
        return 'EUR'
    if '$' in text or _USD_CODE.search(text):
        return 'USD'
    return None


def _is_paid(text_lower):
    return 'paid' in text_lower and 'to be paid' not in text_lower and 'pay at property' not in text_lower


# ============================================================================
# ADDRESS AND PHONE
# ============================================================================

_ADDRESS_LABEL_PATTERN = re.compile(
    r'(?<!email )(?<!e-mail )address[:\s]+([^\n]+?)'
    r'(?=guest|check[-\s]*in|check[-\s]*out|total|\n|$)',
    re.IGNORECASE
)
_PHONE_PATTERN = re.compile(r'phone(?:\s*(?:number|no\.?))?[:\s]+([+0-9 ()-]+)', re.IGNORECASE)


def _labeled_address(text):
    match = _ADDRESS_LABEL_PATTERN.search(text)
    if match:
        address = match.group(1).strip(' ,')
        if address:
            return address
    return None


def _longest_comma_line(text):
    """Addresses tend to be the most comma-dense line of a confirmation."""
    lines = [line.strip() for line in text.splitlines()]
    with_commas = [line for line in lines if ',' in line]
    if not with_commas:
        return None
    return max(with_commas, key=len)


def _labeled_phone(text):
    for match in _PHONE_PATTERN.finditer(text):
        phone = match.group(1).strip()
        if any(ch.isdigit() for ch in phone):
            return phone
    return None


# ============================================================================
# MAIN EXTRACTION FUNCTION
# ============================================================================

# Field -> passes tried in order; the first non-None result wins
FIELD_PASSES = (
    ('hotel_name', (_labeled_hotel_name, _hotel_name_from_mentions)),
    ('guest_name', (_labeled_guest_name, _guest_name_from_greeting, _guest_name_from_email_header)),
    ('rooms', (_room_count,)),
    ('free_cancel_by', (_free_cancel_by,)),
    ('total_cost', (_total_cost,)),
    ('currency', (_currency,)),
    ('address', (_labeled_address, _longest_comma_line)),
    ('phone', (_labeled_phone,)),
)


def _first_found(passes, text):
    for extract in passes:
        value = extract(text)
        if value is not None:
            return value
    return None


def _coerce_text(text):
    if text is None:
        return ''
    if isinstance(text, bytes):
        return text.decode('utf-8', errors='replace')
    if not isinstance(text, str):
        return str(text)
    return text


def _reconcile_dates(record, all_dates, locked):
    """Refine the stay dates and cancellation deadline against each other.

    Steps run in order and each reads the previous one's result:
    1. Fill a missing check-in/check-out from the dates other than the
       cancellation deadline
    2. Infer the cancellation deadline as the latest date before check-in
       when it is missing or not before check-in
    3. Re-pair the stay dates without the cancellation deadline

    Fields in `locked` came from a vendor override and are left alone.
    """
    if not record.check_in_date or not record.check_out_date:
        remaining = [d for d in all_dates if d != record.free_cancel_by]
        _fill_stay_dates(record, remaining)

    if record.check_in_date and 'free_cancel_by' not in locked:
        inferred = _infer_free_cancel_by(record.check_in_date, all_dates)
        if inferred and (record.free_cancel_by is None or record.free_cancel_by >= record.check_in_date):
            logger.debug(f"  -> Inferred free cancellation date {inferred}")
            record.free_cancel_by = inferred

    if record.free_cancel_by and not locked & {'check_in_date', 'check_out_date'}:
        remaining = [d for d in all_dates if d != record.free_cancel_by]
        check_in, check_out = pick_date_pair(remaining)
        if check_in and check_out:
            record.check_in_date = check_in
            record.check_out_date = check_out


def parse_lodging_text(text):
    """Extract lodging fields from confirmation text.

    Args:
        text: Plain text from a booking confirmation (may be empty or noisy)

    Returns:
        ParsedLodging with every field that could be found; never raises
        for malformed input
    """
    record = ParsedLodging()
    text = _coerce_text(text)

    if not text.strip():
        logger.debug("parse_lodging_text: empty text, returning empty record")
        return record

    if len(text) > MAX_INPUT_CHARS:
        logger.debug(f"parse_lodging_text: truncating {len(text)} chars to {MAX_INPUT_CHARS}")
        text = text[:MAX_INPUT_CHARS]

    for attr, passes in FIELD_PASSES:
        setattr(record, attr, _first_found(passes, text))

    if record.guest_name:
        record.guest_name = _title_case(record.guest_name)

    text_lower = text.lower()
    record.breakfast_included = 'breakfast' in text_lower
    record.paid = _is_paid(text_lower)

    # Stay dates: explicit labels first, then the shortest plausible pair
    all_dates = extract_dates_from_text(text)
    logger.debug(f"  -> Dates found: {all_dates[:10]}")
    record.check_in_date = _labeled_date(text, _CHECK_IN_LABEL)
    record.check_out_date = _labeled_date(text, _CHECK_OUT_LABEL)
    if not record.check_in_date or not record.check_out_date:
        _fill_stay_dates(record, all_dates)

    locked = apply_overrides(record, text)
    _reconcile_dates(record, all_dates, locked)

    logger.debug(f"  -> Final record: {record.to_dict()}")
    return record
