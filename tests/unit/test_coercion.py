from __future__ import annotations

from EXOCAL.client.common.utils.types import (
    coerce_bool,
    coerce_bounded_int,
    coerce_float,
    coerce_int,
    coerce_int_or_none,
    coerce_str,
)


# -------------------------------------------------------------------------
def test_coerce_int_clamps_to_bounds():
    assert coerce_int("15", 1, minimum=1, maximum=10) == 10
    assert coerce_int(-3, 1, minimum=1) == 1
    assert coerce_int("x", 4) == 4
    assert coerce_int(True, 4) == 4


# -------------------------------------------------------------------------
def test_coerce_bounded_int_falls_back_instead_of_clamping():
    assert coerce_bounded_int("25", 50, 1, 1000) == 25
    assert coerce_bounded_int("1001", 50, 1, 1000) == 50
    assert coerce_bounded_int(0, 7, 1, 100) == 7
    assert coerce_bounded_int("", 7, 1, 100) == 7
    assert coerce_bounded_int("3.5", 7, 1, 100) == 7
    assert coerce_bounded_int(None, 7, 1, 100) == 7


# -------------------------------------------------------------------------
def test_coerce_float_and_bool():
    assert coerce_float("0.25", 1.0) == 0.25
    assert coerce_float("nan", 1.0) == 1.0
    assert coerce_float(None, 2.0) == 2.0
    assert coerce_bool("yes", False) is True
    assert coerce_bool("off", True) is False
    assert coerce_bool("maybe", True) is True


# -------------------------------------------------------------------------
def test_coerce_optional_values():
    assert coerce_int_or_none(None) is None
    assert coerce_int_or_none("12") == 12
    assert coerce_int_or_none("0", minimum=1) is None
    assert coerce_str("  ", "fallback") == "fallback"
    assert coerce_str(" value ", "fallback") == "value"
