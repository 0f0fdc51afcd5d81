from hostcall.hostcall_errors import (
    Position, EvalAltResult, ErrorNonPureMethodCallOnConstant, ErrorMismatchDataType,
    ErrorDataRace, ErrorFunctionNotFound, ErrorInNativeFunction, ErrorRuntime,
)
from hostcall.hostcall_datatypes import (
    UNIT, Dynamic, DynamicWriteLock, WriteLock, ImmutableString, SharedCell, Fallible,
    type_id, type_name,
)
from hostcall.hostcall_config import HostcallConfig
from hostcall.hostcall_context import NativeCallContext, FN_GET, FN_SET, FN_IDX_GET, FN_IDX_SET
from hostcall.hostcall_callable import CallableFunction, CallingConvention
from hostcall.hostcall_extract import by_value, by_ref
from hostcall.hostcall_guard import check_constant
from hostcall.hostcall_adapter import register_native_function, ParamKind, ResultKind
from hostcall.hostcall_table import FunctionTable, native_fn

__all__ = [
    "Position", "EvalAltResult", "ErrorNonPureMethodCallOnConstant", "ErrorMismatchDataType",
    "ErrorDataRace", "ErrorFunctionNotFound", "ErrorInNativeFunction", "ErrorRuntime",
    "UNIT", "Dynamic", "DynamicWriteLock", "WriteLock", "ImmutableString", "SharedCell", "Fallible",
    "type_id", "type_name",
    "HostcallConfig",
    "NativeCallContext", "FN_GET", "FN_SET", "FN_IDX_GET", "FN_IDX_SET",
    "CallableFunction", "CallingConvention",
    "by_value", "by_ref", "check_constant",
    "register_native_function", "ParamKind", "ResultKind",
    "FunctionTable", "native_fn",
]
