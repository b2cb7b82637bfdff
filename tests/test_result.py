"""Tests for papernet.core.result — Ok/Err values and map."""

from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from papernet.core.result import Err, Ok, unwrap

# ---------------------------------------------------------------------------
# Ok and Err hold values, are frozen, support pattern matching
# ---------------------------------------------------------------------------


class TestOkBasics:
    def test_ok_holds_value(self) -> None:
        assert Ok(42).value == 42

    def test_ok_is_frozen(self) -> None:
        ok = Ok(42)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ok.value = 99  # type: ignore[misc]

    def test_pattern_match_ok(self) -> None:
        match Ok(b"payload"):
            case Ok(v):
                assert v == b"payload"
            case _:
                pytest.fail("Should match Ok")


class TestErrBasics:
    def test_err_holds_error(self) -> None:
        assert Err("fail").error == "fail"

    def test_err_is_frozen(self) -> None:
        err = Err("fail")
        with pytest.raises(dataclasses.FrozenInstanceError):
            err.error = "other"  # type: ignore[misc]

    def test_pattern_match_err(self) -> None:
        match Err("fail"):
            case Err(e):
                assert e == "fail"
            case _:
                pytest.fail("Should match Err")


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


class TestCombinators:
    def test_ok_map(self) -> None:
        assert Ok(5).map(lambda x: x * 2) == Ok(10)

    def test_err_map_passthrough(self) -> None:
        assert Err("fail").map(lambda x: x * 2) == Err("fail")

    def test_err_map_does_not_call(self) -> None:
        called: list[int] = []

        def step(x: int) -> int:
            called.append(x)
            return x

        Err("initial").map(step)
        assert called == []


class TestUnwrap:
    def test_method_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_method_unwrap_on_err_raises(self) -> None:
        with pytest.raises(RuntimeError, match="Called unwrap on Err"):
            Err("fail").unwrap()

    def test_free_unwrap(self) -> None:
        assert unwrap(Ok("x")) == "x"

    def test_free_unwrap_on_err_raises(self) -> None:
        with pytest.raises(RuntimeError, match="unwrap on Err"):
            unwrap(Err("fail"))

    def test_free_unwrap_rejects_non_result(self) -> None:
        with pytest.raises(TypeError):
            unwrap(42)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Laws
# ---------------------------------------------------------------------------


@given(st.integers())
def test_map_identity(x: int) -> None:
    assert Ok(x).map(lambda v: v) == Ok(x)

