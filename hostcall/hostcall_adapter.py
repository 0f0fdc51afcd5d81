"""
Turns an ordinary Python function into a CallableFunction.

A host function may take any number of parameters, may want the call-context
injected in front of them, may mutate its first argument in place, and may
raise script errors on purpose. The adapter reads that shape once, at
registration, and builds one dispatcher from two small strategies:

  - an extraction strategy per parameter position (ParamKind), and
  - a result strategy (ResultKind).

Only position 0 ever differs between conventions: it is moved out under
PURE and locked in place under METHOD. Every other position is moved out.
"""

import inspect
import typing
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from hostcall.hostcall_callable import CallableFunction, CallingConvention
from hostcall.hostcall_config import HostcallConfig
from hostcall.hostcall_context import NativeCallContext
from hostcall.hostcall_datatypes import (
    Dynamic, DynamicWriteLock, Fallible, ImmutableString, type_id, type_name
)
from hostcall.hostcall_errors import EvalAltResult, ErrorInNativeFunction
from hostcall.hostcall_extract import by_ref, by_value
from hostcall.hostcall_guard import check_constant


class ParamKind(Enum):
    BY_VALUE = "by_value"
    # The receiver itself, with its slot locked for the duration of the call.
    BY_REF = "by_ref"
    # The write-lock handle, for receivers annotated WriteLock[T].
    BY_HANDLE = "by_handle"


class ResultKind(Enum):
    PLAIN = "plain"
    FALLIBLE = "fallible"


def _hints_source(func):
    """The object whose annotations describe how `func` is called."""
    if inspect.isclass(func):
        return func.__init__
    if inspect.isroutine(func):
        return func
    # Callable instances are described by their __call__ method.
    return getattr(func, "__call__", func)


def _resolve_hints(func, fn_name: str) -> dict:
    source = _hints_source(func)
    try:
        return typing.get_type_hints(source)
    except NameError as e:
        # A half-resolved signature would silently change the types and result strategy.
        raise TypeError(f"Cannot resolve the annotations of host function {fn_name!r}: {e}") from e
    except (TypeError, AttributeError):
        # Builtins, partials and other callables that carry no annotations.
        return dict(getattr(source, "__annotations__", {}) or {})


def _script_params(func) -> List[inspect.Parameter]:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise TypeError(f"Cannot read the signature of {func!r}: {e}") from e
    params = []
    for p in sig.parameters.values():
        match p.kind:
            case inspect.Parameter.POSITIONAL_ONLY | inspect.Parameter.POSITIONAL_OR_KEYWORD:
                params.append(p)
            case inspect.Parameter.KEYWORD_ONLY if p.default is not inspect.Parameter.empty:
                # Never supplied by scripts; the default applies.
                continue
            case _:
                raise TypeError(
                    f"Host function {getattr(func, '__name__', func)!r} has unsupported parameter "
                    f"{p.name!r} ({p.kind.description}); only fixed positional parameters can be registered"
                )
    return params


def _is_context_annotation(annotation: Any) -> bool:
    return annotation is NativeCallContext or annotation == "NativeCallContext"


def _is_write_lock_annotation(annotation: Any) -> bool:
    return annotation is DynamicWriteLock or typing.get_origin(annotation) is DynamicWriteLock


def _extraction_target(annotation: Any) -> type:
    """The class by_value/by_ref check against. Keeps the text distinction
    that type_id folds away."""
    if annotation is ImmutableString:
        return ImmutableString
    if annotation is str:
        return str
    return type_id(annotation)


def _param_label(param: inspect.Parameter, annotation: Any) -> str:
    if annotation is inspect.Parameter.empty:
        return param.name
    return f"{param.name}: {type_name(annotation)}"


def _reports_as_native_error(exc: Exception, result_kind: ResultKind, config: HostcallConfig) -> bool:
    """Script errors from fallible functions pass through untouched; anything
    else escaping a host function is reported as ErrorInNativeFunction."""
    if not config.wrap_native_errors:
        return False
    if isinstance(exc, EvalAltResult) and result_kind is ResultKind.FALLIBLE:
        return False
    return True


def _make_dispatcher(
    func: Callable,
    fn_name: str,
    convention: CallingConvention,
    kinds: Tuple[ParamKind, ...],
    targets: Tuple[type, ...],
    has_context: bool,
    result_kind: ResultKind,
    config: HostcallConfig,
) -> Callable[[NativeCallContext, List[Dynamic]], Dynamic]:
    arity = len(kinds)
    plan = tuple(zip(kinds, targets))

    def dispatch(ctx: NativeCallContext, args: List[Dynamic]) -> Dynamic:
        # Arity and types were validated when the function was looked up.
        assert len(args) == arity, f"{fn_name} expects {arity} arguments, got {len(args)}"

        check_constant(convention, ctx, args, debug=config.debug)

        lock: Optional[DynamicWriteLock] = None
        values: List[Any] = [ctx] if has_context else []
        try:
            for slot, (kind, target) in zip(args, plan):
                match kind:
                    case ParamKind.BY_VALUE:
                        values.append(by_value(slot, target))
                    case ParamKind.BY_REF:
                        lock = by_ref(slot, target)
                        values.append(lock.value)
                    case ParamKind.BY_HANDLE:
                        lock = by_ref(slot, target)
                        values.append(lock)

            try:
                result = func(*values)
            except Exception as e:
                if not _reports_as_native_error(e, result_kind, config):
                    raise
                config.dbg("NATIVE error", fn_name, type(e).__name__)
                raise ErrorInNativeFunction(fn_name, e) from e
        finally:
            if lock is not None:
                lock.release()

        return Dynamic.from_value(result)

    dispatch.__name__ = f"dispatch_{fn_name}"
    dispatch.__qualname__ = dispatch.__name__
    return dispatch


def register_native_function(
    func: Callable,
    *,
    name: Optional[str] = None,
    convention: CallingConvention = CallingConvention.PURE,
    context: Optional[bool] = None,
    fallible: Optional[bool] = None,
    config: Optional[HostcallConfig] = None,
) -> CallableFunction:
    """Adapts `func` to the uniform `(context, args) -> Dynamic` shape.

    `context` and `fallible` default to what the annotations say: a leading
    parameter annotated NativeCallContext asks for the context, a return
    annotation Fallible[T] selects the fallible result strategy.
    """
    if not callable(func):
        raise TypeError(f"Cannot register a non-callable: {func!r}")
    if not isinstance(convention, CallingConvention):
        raise TypeError(f"convention must be a CallingConvention, not {convention!r}")
    config = config or HostcallConfig()
    fn_name = name or getattr(func, "__name__", None) or type(func).__name__

    params = _script_params(func)
    hints = _resolve_hints(func, fn_name)
    annotations = [hints.get(p.name, p.annotation) for p in params]

    if context is None:
        context = bool(params) and _is_context_annotation(annotations[0])
    if context:
        if not params:
            raise TypeError(f"Host function {fn_name!r} takes no parameter to receive the call context")
        params, annotations = params[1:], annotations[1:]

    if len(params) > config.max_arity:
        raise ValueError(
            f"Host function {fn_name!r} takes {len(params)} parameters; at most {config.max_arity} are supported"
        )
    if convention is CallingConvention.METHOD and not params:
        raise TypeError(f"Method {fn_name!r} needs a receiver parameter")

    kinds = [ParamKind.BY_VALUE] * len(params)
    targets = [_extraction_target(a) for a in annotations]
    if convention is CallingConvention.METHOD:
        kinds[0] = ParamKind.BY_HANDLE if _is_write_lock_annotation(annotations[0]) else ParamKind.BY_REF
        # Locks check the type identity; the text distinction only matters when moving out.
        targets[0] = type_id(annotations[0])

    ret_annotation = hints.get("return", inspect.Signature.empty)
    if inspect.isclass(func):
        # A registered class is its constructor; __init__ returns None.
        ret_annotation = func
    if fallible is None:
        fallible = ret_annotation is Fallible or typing.get_origin(ret_annotation) is Fallible
    result_kind = ResultKind.FALLIBLE if fallible else ResultKind.PLAIN

    dispatch = _make_dispatcher(
        func, fn_name, convention, tuple(kinds), tuple(targets), bool(context), result_kind, config
    )
    record = CallableFunction(
        func=dispatch,
        convention=convention,
        # Method receivers report the same identity as their pure counterparts.
        param_types=tuple(type_id(a) for a in annotations),
        return_type=type_id(ret_annotation),
        name=fn_name,
        param_names=tuple(_param_label(p, a) for p, a in zip(params, annotations)),
        return_type_name=type_name(ret_annotation),
        has_context=bool(context),
        is_fallible=bool(fallible),
    )
    config.dbg("REGISTER", record.gen_signature(), convention.value, result_kind.value)
    return record
