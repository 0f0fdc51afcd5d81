import dataclasses
import pytest

from hostcall.hostcall_callable import CallableFunction, CallingConvention, describe_args
from hostcall.hostcall_context import NativeCallContext
from hostcall.hostcall_datatypes import Dynamic
from hostcall.hostcall_errors import (
    Position, EvalAltResult, ErrorMismatchDataType, ErrorNonPureMethodCallOnConstant,
)


def _const_record():
    def func(ctx, args):
        return Dynamic(len(args))
    return CallableFunction(
        func=func,
        convention=CallingConvention.PURE,
        param_types=(int, str),
        return_type=int,
        name="count",
    )


def test_record_is_callable_and_exposes_metadata():
    rec = _const_record()
    assert rec(NativeCallContext("count"), [Dynamic(1), Dynamic("a")]).value == 2
    assert rec.arity == 2
    assert rec.is_pure
    assert rec.param_names is None
    assert rec.gen_signature() == "count(int, str) -> int"
    assert "count(int, str) -> int" in repr(rec)

def test_record_is_immutable():
    rec = _const_record()
    with pytest.raises(dataclasses.FrozenInstanceError):
        rec.name = "other"

def test_describe_args():
    assert describe_args([Dynamic(1), Dynamic("x"), 2.5]) == "(int, str, float)"
    assert describe_args([]) == "()"

# --- Errors and positions ---

def test_position_rendering():
    assert Position.NONE.is_none()
    assert str(Position(3, 4)) == "line 3, col 4"
    assert str(Position(3)) == "line 3"
    assert repr(Position.NONE) == "Position<none>"

def test_fill_position_only_once():
    err = ErrorNonPureMethodCallOnConstant("set$x")
    assert "set$x" in str(err)
    err.fill_position(Position(1, 2))
    err.fill_position(Position(9, 9))
    assert err.position == Position(1, 2)
    assert str(err).endswith("(line 1, col 2)")

def test_error_taxonomy():
    err = ErrorMismatchDataType("int", "str")
    assert isinstance(err, EvalAltResult)
    assert err.message == "Data type incorrect: str (expecting int)"
