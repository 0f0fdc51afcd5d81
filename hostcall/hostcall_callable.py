"""
The record a function table stores for every registered host function.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

from hostcall.hostcall_context import NativeCallContext
from hostcall.hostcall_datatypes import Dynamic, type_name


class CallingConvention(Enum):
    """How the first argument of a call is handed to the host function."""
    # Every argument is moved out of its slot; nothing is mutated.
    PURE = "pure"
    # The receiver (slot 0) is locked and mutated in place.
    METHOD = "method"


@dataclass(frozen=True)
class CallableFunction:
    """A host function behind the uniform `(context, args) -> Dynamic` shape.

    Built once at registration and read-only afterwards, so it can be shared
    by any number of concurrent calls.
    """
    func: Callable[[NativeCallContext, List[Dynamic]], Dynamic]
    convention: CallingConvention
    param_types: Tuple[type, ...]
    return_type: type = object
    name: Optional[str] = None
    param_names: Optional[Tuple[str, ...]] = None
    return_type_name: Optional[str] = None
    has_context: bool = False
    is_fallible: bool = False

    def __call__(self, ctx: NativeCallContext, args: List[Dynamic]) -> Dynamic:
        return self.func(ctx, args)

    @property
    def arity(self) -> int:
        return len(self.param_types)

    @property
    def is_pure(self) -> bool:
        return self.convention is CallingConvention.PURE

    @property
    def is_method(self) -> bool:
        return self.convention is CallingConvention.METHOD

    def gen_signature(self, name: Optional[str] = None) -> str:
        """Renders `name(a: int, b: int) -> int` for error messages and listings."""
        fn_name = name or self.name or "<anonymous>"
        if self.param_names is not None:
            params = ", ".join(self.param_names)
        else:
            params = ", ".join(type_name(t) for t in self.param_types)
        ret = self.return_type_name or type_name(self.return_type)
        if ret == "()":
            return f"{fn_name}({params})"
        return f"{fn_name}({params}) -> {ret}"

    def __repr__(self) -> str:
        return f"<CallableFunction {self.gen_signature()} {self.convention.value}>"


def describe_args(args: List[Any]) -> str:
    """Renders the runtime types of an argument list, e.g. `(int, str)`."""
    names = []
    for a in args:
        names.append(a.type_name() if isinstance(a, Dynamic) else type_name(type(a)))
    return f"({', '.join(names)})"
