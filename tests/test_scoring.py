from lodging.models import ParsedLodging
from lodging.parser import parse_lodging_text
from lodging.scoring import SCORE_WEIGHTS, completeness_label, score_record


def test_weights_sum_to_100():
    assert sum(SCORE_WEIGHTS.values()) == 100


def test_empty_record_scores_zero():
    score, missing = score_record(ParsedLodging())

    assert score == 0
    assert set(missing) == set(SCORE_WEIGHTS)
    assert completeness_label(score) == "empty"


def test_flags_do_not_count():
    score, _ = score_record(ParsedLodging(breakfast_included=True, paid=True))
    assert score == 0


def test_partial_record():
    record = ParsedLodging(check_in_date="2025-11-30", check_out_date="2025-12-03", rooms="1")

    score, missing = score_record(record)

    assert score == 44
    assert "hotel_name" in missing
    assert "rooms" not in missing
    assert completeness_label(score) == "partial"


def test_fixture_is_complete(load_fixture):
    score, missing = score_record(parse_lodging_text(load_fixture("chic-stay.txt")))

    assert score == 100
    assert missing == []
    assert completeness_label(score) == "complete"


def test_sparse_label():
    assert completeness_label(4) == "sparse"
