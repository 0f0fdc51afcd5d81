import pytest

from hostcall.hostcall_guard import check_constant
from hostcall.hostcall_callable import CallingConvention
from hostcall.hostcall_context import NativeCallContext, FN_IDX_SET, FN_SET, FN_GET
from hostcall.hostcall_datatypes import Dynamic
from hostcall.hostcall_errors import ErrorNonPureMethodCallOnConstant, Position

METHOD = CallingConvention.METHOD
PURE = CallingConvention.PURE


def _args(n, read_only=True):
    args = [Dynamic(i) for i in range(n)]
    args[0].set_read_only(read_only)
    return args


def test_index_setter_on_constant_is_denied():
    with pytest.raises(ErrorNonPureMethodCallOnConstant) as ei:
        check_constant(METHOD, NativeCallContext(FN_IDX_SET), _args(3))
    assert ei.value.fn_name == FN_IDX_SET
    assert ei.value.position == Position.NONE

def test_property_setter_on_constant_is_denied():
    with pytest.raises(ErrorNonPureMethodCallOnConstant) as ei:
        check_constant(METHOD, NativeCallContext(FN_SET + "x"), _args(2))
    assert ei.value.fn_name == "set$x"

def test_mutable_receiver_passes():
    check_constant(METHOD, NativeCallContext(FN_IDX_SET), _args(3, read_only=False))
    check_constant(METHOD, NativeCallContext(FN_SET + "x"), _args(2, read_only=False))

def test_pure_convention_is_never_checked():
    check_constant(PURE, NativeCallContext(FN_IDX_SET), _args(3))
    check_constant(PURE, NativeCallContext(FN_SET + "x"), _args(2))

def test_wrong_argument_counts_pass():
    check_constant(METHOD, NativeCallContext(FN_IDX_SET), _args(2))
    check_constant(METHOD, NativeCallContext(FN_SET + "x"), _args(3))

def test_other_names_pass():
    check_constant(METHOD, NativeCallContext(FN_GET + "x"), _args(1))
    check_constant(METHOD, NativeCallContext("push"), _args(2))
    check_constant(METHOD, NativeCallContext("index$get$"), _args(2))

def test_empty_argument_list_passes():
    check_constant(METHOD, NativeCallContext(FN_IDX_SET), [])

def test_guard_does_not_mutate_arguments():
    args = _args(3)
    with pytest.raises(ErrorNonPureMethodCallOnConstant):
        check_constant(METHOD, NativeCallContext(FN_IDX_SET), args)
    assert [a.value for a in args] == [0, 1, 2]
    assert args[0].is_read_only()

def test_denial_is_traced_when_debug_enabled(capsys, monkeypatch):
    from hostcall.hostcall_config import DEBUG_ENV_VAR
    monkeypatch.delenv(DEBUG_ENV_VAR, raising=False)
    with pytest.raises(ErrorNonPureMethodCallOnConstant):
        check_constant(METHOD, NativeCallContext(FN_IDX_SET), _args(3), debug=True)
    assert "[DBG] GUARD deny index$set$ argc 3" in capsys.readouterr().err
    with pytest.raises(ErrorNonPureMethodCallOnConstant):
        check_constant(METHOD, NativeCallContext(FN_IDX_SET), _args(3))
    assert capsys.readouterr().err == ""
