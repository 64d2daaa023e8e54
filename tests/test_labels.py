import pytest

from venue_layout.labels import (
    alpha_to_number,
    number_to_alpha,
    number_to_roman,
    resolve_row_config,
    roman_to_number,
    row_label,
    seat_label,
)
from venue_layout.model import RowNumberingConfig


def _row(total, type, start=1, **kwargs):
    return [seat_label(i, total, type, start, **kwargs) for i in range(total)]


def test_alpha_row_labels():
    assert row_label(0, "alpha", "A") == "A"
    assert row_label(25, "alpha", "A") == "Z"
    assert row_label(26, "alpha", "A") == "AA"
    assert row_label(701, "alpha", "A") == "ZZ"
    assert row_label(1, "alpha", "C") == "D"


def test_numeric_and_roman_row_labels():
    assert row_label(2, "numeric", "5") == "7"
    assert row_label(0, "numeric", "x") == "1"
    assert row_label(3, "roman", "I") == "IV"
    assert row_label(0, "roman", "3") == "III"


def test_unknown_row_label_type_counts_from_one():
    assert row_label(4, "hebrew", "A") == "5"


def test_alpha_and_roman_round_trip_helpers():
    assert number_to_alpha(702) == "AAA"
    assert alpha_to_number("AA") == 26
    assert alpha_to_number("A1") is None
    assert number_to_roman(1994) == "MCMXCIV"
    assert roman_to_number("MCMXCIV") == 1994
    assert number_to_roman(0) == "0"


def test_numeric_and_reverse_seat_labels():
    assert _row(4, "numeric") == ["1", "2", "3", "4"]
    assert _row(3, "numeric", start=10) == ["10", "11", "12"]
    assert _row(4, "reverse") == ["4", "3", "2", "1"]


def test_direction_maps_physical_to_logical_index():
    assert _row(4, "numeric", direction="rtl") == ["4", "3", "2", "1"]
    assert _row(5, "numeric", direction="center-out") == ["4", "2", "1", "3", "5"]


def test_odd_even_sided_numbering():
    assert _row(6, "odd-left") == ["1", "3", "5", "2", "4", "6"]
    assert _row(6, "even-left") == ["2", "4", "6", "1", "3", "5"]
    assert _row(4, "odd-left") == ["1", "3", "2", "4"]
    assert _row(5, "odd-left") == ["1", "3", "5", "2", "4"]


def test_parity_only_numbering():
    assert _row(3, "odd-only") == ["1", "3", "5"]
    assert _row(2, "odd-only", start=2) == ["3", "5"]
    assert _row(2, "even-only") == ["2", "4"]


def test_custom_numbers_cycle():
    assert _row(4, "custom", custom_numbers=[10, 20]) == ["10", "20", "10", "20"]
    # no custom list falls back to numeric
    assert _row(2, "custom") == ["1", "2"]


def test_custom_per_row_uses_row_override():
    config = RowNumberingConfig("A", type="reverse", start_number=10)
    assert _row(3, "custom-per-row", row_config=config) == ["12", "11", "10"]
    assert _row(3, "custom-per-row") == ["1", "2", "3"]


def test_custom_per_row_override_with_direction():
    config = RowNumberingConfig("A", type="numeric", start_number=101, direction="rtl")
    assert _row(3, "custom-per-row", row_config=config) == ["103", "102", "101"]


@pytest.mark.parametrize("type", ["numeric", "reverse", "odd-left", "even-left", "odd-only", "even-only"])
def test_seat_labels_are_deterministic(type):
    assert _row(7, type) == _row(7, type)


def test_resolve_row_config_strips_prefix():
    config = RowNumberingConfig("A")
    assert resolve_row_config({"A": config}, "P-A", "P-") is config
    assert resolve_row_config({"A": config}, "A") is config
    assert resolve_row_config({}, "A") is None
    assert resolve_row_config(None, "A") is None
