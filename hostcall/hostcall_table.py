"""
A minimal function table: registers host functions and dispatches calls to them.

Lookup is by name and runtime argument types. It is enough to drive
CallableFunction records end to end and to expose a host object's API; it
does not attempt the engine's full overload resolution.
"""

import inspect
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from hostcall.hostcall_adapter import register_native_function
from hostcall.hostcall_callable import CallableFunction, CallingConvention, describe_args
from hostcall.hostcall_config import HostcallConfig
from hostcall.hostcall_context import FN_GET, FN_IDX_GET, FN_IDX_SET, FN_SET, NativeCallContext
from hostcall.hostcall_datatypes import Dynamic
from hostcall.hostcall_errors import EvalAltResult, ErrorFunctionNotFound, Position

FnKey = Tuple[str, Tuple[type, ...]]


def native_fn(func=None, *, name: Optional[str] = None,
              convention: CallingConvention = CallingConvention.PURE):
    """A decorator to explicitly mark host methods as callable from scripts.

    Usable bare (`@native_fn`) or with options (`@native_fn(name="hp")`).
    """
    def mark(f):
        f._hostcall_native = {"name": name, "convention": convention}
        return f
    if func is not None:
        return mark(func)
    return mark


def _param_accepts(param_type: type, arg_type: type) -> bool:
    return param_type is object or arg_type is param_type or issubclass(arg_type, param_type)


class FunctionTable:
    """Holds CallableFunction records keyed by name and parameter types."""

    def __init__(self, config: Optional[HostcallConfig] = None):
        self.config = config or HostcallConfig()
        self._functions: Dict[FnKey, CallableFunction] = {}

    # --- registration ---

    def set_fn(self, name: str, record: CallableFunction) -> CallableFunction:
        """Stores an adapted record, replacing one with the same signature."""
        key = (name, record.param_types)
        if key in self._functions:
            self.config.dbg("TABLE replace", name, record.param_types)
        self._functions[key] = record
        return record

    def set_native_fn(self, name: str, func: Callable, *,
                      convention: CallingConvention = CallingConvention.PURE,
                      context: Optional[bool] = None,
                      fallible: Optional[bool] = None) -> CallableFunction:
        record = register_native_function(
            func, name=name, convention=convention, context=context,
            fallible=fallible, config=self.config,
        )
        return self.set_fn(name, record)

    def register_fn(self, name: str, func: Callable, **options) -> CallableFunction:
        return self.set_native_fn(name, func, **options)

    def register_get(self, prop: str, func: Callable) -> CallableFunction:
        """Registers a property getter `func(obj) -> value`."""
        return self.set_native_fn(FN_GET + prop, func, convention=CallingConvention.METHOD)

    def register_set(self, prop: str, func: Callable) -> CallableFunction:
        """Registers a property setter `func(obj, value)`."""
        return self.set_native_fn(FN_SET + prop, func, convention=CallingConvention.METHOD)

    def register_indexer_get(self, func: Callable) -> CallableFunction:
        """Registers an indexer `func(obj, index) -> value`."""
        return self.set_native_fn(FN_IDX_GET, func, convention=CallingConvention.METHOD)

    def register_indexer_set(self, func: Callable) -> CallableFunction:
        """Registers an index setter `func(obj, index, value)`."""
        return self.set_native_fn(FN_IDX_SET, func, convention=CallingConvention.METHOD)

    def bind_host(self, host: Any) -> List[str]:
        """Registers the @native_fn methods of `host` and returns their script names."""
        bound = []
        for attr, member in inspect.getmembers(host):
            if not callable(member):
                continue
            # Decorator may mark the bound method or the underlying function
            marks = getattr(member, "_hostcall_native", None)
            if marks is None:
                func = getattr(member, "__func__", None)
                if func is not None:
                    marks = getattr(func, "_hostcall_native", None)
            if marks is None:
                continue
            script_name = marks["name"] or self._script_name(attr)
            self.set_native_fn(script_name, member, convention=marks["convention"])
            bound.append(script_name)
        self.config.dbg("BIND host", type(host).__name__, bound)
        return bound

    def _script_name(self, attr: str) -> str:
        if self.config.name_style == "kebab":
            return attr.replace("_", "-")
        return attr

    # --- lookup ---

    def __len__(self) -> int:
        return len(self._functions)

    def __contains__(self, name: str) -> bool:
        return self.contains_fn(name)

    def contains_fn(self, name: str) -> bool:
        return any(key[0] == name for key in self._functions)

    def iter_fn(self) -> Iterator[Tuple[str, CallableFunction]]:
        for (name, _), record in self._functions.items():
            yield name, record

    def get_fn(self, name: str, arg_types: Sequence[type]) -> Optional[CallableFunction]:
        """Finds the record for `name` accepting arguments of `arg_types`.

        An exact signature wins; otherwise the first registered record whose
        parameters accept the arguments (object, or a base class).
        """
        arg_types = tuple(arg_types)
        exact = self._functions.get((name, arg_types))
        if exact is not None:
            return exact
        for (fn_name, param_types), record in self._functions.items():
            if fn_name != name or len(param_types) != len(arg_types):
                continue
            if all(_param_accepts(p, a) for p, a in zip(param_types, arg_types)):
                return record
        return None

    # --- dispatch ---

    def call_fn(self, name: str, args: Sequence[Any], *,
                position: Position = Position.NONE,
                source: Optional[str] = None,
                tag: Any = None) -> Dynamic:
        """Calls `name` with `args` and returns the result as a Dynamic.

        Every argument is copied into a fresh slot except the receiver of a
        method call: when the caller passes a Dynamic there, that very slot
        is mutated in place.
        """
        dyn_args = [Dynamic.from_value(a) for a in args]
        record = self.get_fn(name, [a.type_id() for a in dyn_args])
        if record is None:
            raise ErrorFunctionNotFound(f"{name} {describe_args(dyn_args)}", position)

        call_args = []
        for i, (orig, dyn) in enumerate(zip(args, dyn_args)):
            if isinstance(orig, Dynamic) and not (i == 0 and record.is_method):
                dyn = dyn.clone()
            call_args.append(dyn)

        self.config.dbg("CALL", name, "argc", len(call_args), record.convention.value)
        ctx = NativeCallContext(name, source=source, position=position, table=self, tag=tag)
        try:
            return record(ctx, call_args)
        except EvalAltResult as err:
            err.fill_position(position)
            raise

    def __repr__(self) -> str:
        return f"<FunctionTable functions={len(self._functions)}>"
