"""
Defines the value types that cross the boundary between scripts and host code.

A Dynamic is the type-erased slot a script passes around; every argument of
a host function call arrives as one. This module also provides the type
identity helpers used to build and check registered signatures.
"""

import copy
import inspect
import threading
import types
import typing
from typing import Any, Generic, Optional, TypeVar, Union

from hostcall.hostcall_errors import ErrorDataRace, ErrorMismatchDataType

T = TypeVar("T")

NoneType = type(None)

# The canonical empty value left behind by consuming extraction.
UNIT = None


class ImmutableString(str):
    """The runtime's text representation.

    Scripts only ever hold text as ImmutableString, so host functions asking
    for a borrowed view can be handed the stored object without copying it.
    """
    def __repr__(self) -> str:
        return f"ImmutableString({str.__repr__(self)})"


class Fallible(Generic[T]):
    """Return annotation marking a host function that may raise script errors.

    `def checked_div(a: int, b: int) -> Fallible[int]` reports `int` as its
    return type; script errors it raises are propagated untouched.
    """


class SharedCell:
    """A value shared between several Dynamic holders (e.g. captured variables)."""
    __slots__ = ("value", "_lock")

    def __init__(self, value: Any):
        self.value = value
        self._lock = threading.Lock()

    def is_locked(self) -> bool:
        return self._lock.locked()

    def __repr__(self) -> str:
        return f"<SharedCell {self.value!r}>"


def _normalize(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, ImmutableString):
        return ImmutableString(value)
    return value


def _runtime_type(value: Any) -> type:
    if isinstance(value, ImmutableString):
        return str
    return type(value)


class Dynamic:
    """Holds exactly one value plus a read-only flag."""
    __slots__ = ("_value", "_read_only", "_locked")

    def __init__(self, value: Any = UNIT, read_only: bool = False):
        self._value = _normalize(value)
        self._read_only = read_only
        # True while a DynamicWriteLock handle is alive.
        self._locked = False

    @classmethod
    def from_value(cls, value: Any) -> 'Dynamic':
        """Wraps a value; an existing Dynamic is returned as is."""
        if isinstance(value, Dynamic):
            return value
        return cls(value)

    # --- access checks ---

    def _check_access(self):
        if self._locked:
            raise ErrorDataRace(f"a locked {type_name(self._content_type())} value")
        if isinstance(self._value, SharedCell) and self._value.is_locked():
            raise ErrorDataRace(f"a locked shared {type_name(_runtime_type(self._value.value))} value")

    def _content_type(self) -> type:
        if isinstance(self._value, SharedCell):
            return _runtime_type(self._value.value)
        return _runtime_type(self._value)

    # --- flags and introspection ---

    def is_read_only(self) -> bool:
        return self._read_only

    def set_read_only(self, flag: bool = True) -> 'Dynamic':
        self._read_only = flag
        return self

    def is_unit(self) -> bool:
        return self._value is UNIT

    def is_shared(self) -> bool:
        return isinstance(self._value, SharedCell)

    def is_locked(self) -> bool:
        return self._locked

    def type_id(self) -> type:
        self._check_access()
        return self._content_type()

    def type_name(self) -> str:
        return type_name(self.type_id())

    @property
    def value(self) -> Any:
        """The held value (the content of the cell for shared values)."""
        self._check_access()
        if isinstance(self._value, SharedCell):
            return self._value.value
        return self._value

    # --- copying and moving ---

    def clone(self) -> 'Dynamic':
        """Deep-copies the value. Shared values keep pointing at the same cell."""
        self._check_access()
        if isinstance(self._value, SharedCell):
            return Dynamic(self._value, self._read_only)
        return Dynamic(copy.deepcopy(self._value), self._read_only)

    def take(self) -> 'Dynamic':
        """Moves the value out, leaving this slot as a mutable UNIT."""
        self._check_access()
        taken = Dynamic(self._value, self._read_only)
        self._value = UNIT
        self._read_only = False
        return taken

    def into_shared(self) -> 'Dynamic':
        self._check_access()
        if not isinstance(self._value, SharedCell):
            self._value = SharedCell(self._value)
        return self

    def flatten_in_place(self) -> 'Dynamic':
        """Replaces a shared cell with a deep copy of its content."""
        self._check_access()
        if isinstance(self._value, SharedCell):
            self._value = copy.deepcopy(self._value.value)
        return self

    # --- conversions ---

    def cast(self, target: type) -> Any:
        """Consumes the value as `target`, leaving UNIT behind."""
        self.flatten_in_place()
        value = self._value
        if target is not object and not isinstance(value, target):
            raise ErrorMismatchDataType(type_name(target), type_name(_runtime_type(value)))
        self._value = UNIT
        self._read_only = False
        return value

    def as_str_ref(self) -> ImmutableString:
        """Borrowed view of the stored text. Call flatten_in_place first."""
        self._check_access()
        if not isinstance(self._value, ImmutableString):
            raise ErrorMismatchDataType("str", type_name(self._content_type()))
        return self._value

    def into_string(self) -> ImmutableString:
        """Takes the backing text out of the slot without copying it."""
        self.flatten_in_place()
        if not isinstance(self._value, ImmutableString):
            raise ErrorMismatchDataType("str", type_name(self._content_type()))
        text = self._value
        self._value = UNIT
        self._read_only = False
        return text

    def write_lock(self, target: type = object) -> 'DynamicWriteLock':
        self._check_access()
        content_type = self._content_type()
        if target is not object and not issubclass(content_type, target):
            raise ErrorMismatchDataType(type_name(target), type_name(content_type))
        return DynamicWriteLock(self)

    def __repr__(self) -> str:
        flag = " read-only" if self._read_only else ""
        if self._locked:
            return f"<Dynamic locked{flag}>"
        return f"<Dynamic {self._value!r}{flag}>"


class DynamicWriteLock(Generic[T]):
    """Exclusive mutable access to the value held by one Dynamic.

    Also usable as a parameter annotation (`WriteLock[int]`) for a method
    receiver that needs to rebind the value rather than mutate it.
    """

    def __init__(self, owner: Dynamic):
        self._owner = owner
        self._cell: Optional[SharedCell] = owner._value if isinstance(owner._value, SharedCell) else None
        if self._cell is not None and not self._cell._lock.acquire(blocking=False):
            raise ErrorDataRace("a shared value that is already locked")
        owner._locked = True
        self._held = True

    @property
    def value(self) -> Any:
        self._ensure_held()
        if self._cell is not None:
            return self._cell.value
        return self._owner._value

    @value.setter
    def value(self, new_value: Any):
        self._ensure_held()
        new_value = _normalize(new_value)
        if self._cell is not None:
            self._cell.value = new_value
        else:
            self._owner._value = new_value

    def _ensure_held(self):
        if not self._held:
            raise RuntimeError("write lock used after release")

    def release(self):
        if not self._held:
            return
        self._held = False
        self._owner._locked = False
        if self._cell is not None:
            self._cell._lock.release()

    def __enter__(self) -> 'DynamicWriteLock':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self) -> str:
        state = "held" if self._held else "released"
        return f"<DynamicWriteLock {state}>"


WriteLock = DynamicWriteLock


# =================================================================
# Type identities
# =================================================================

def _is_union(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    return origin is Union or origin is getattr(types, "UnionType", None)


def type_id(annotation: Any) -> type:
    """Maps a parameter or return annotation to the runtime class identifying it."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return object
    if annotation is None or annotation is NoneType:
        return NoneType
    if annotation is ImmutableString:
        return str
    origin = typing.get_origin(annotation)
    if origin in (DynamicWriteLock, Fallible):
        args = typing.get_args(annotation)
        return type_id(args[0]) if args else object
    if annotation in (DynamicWriteLock, Fallible):
        return object
    if _is_union(annotation):
        return object
    if origin is not None and isinstance(origin, type):
        return origin
    if isinstance(annotation, type):
        return annotation
    return object


def type_name(annotation: Any) -> str:
    """A readable name for a type identity or annotation."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return "?"
    if annotation is None or annotation is NoneType:
        return "()"
    if typing.get_origin(annotation) is not None or _is_union(annotation):
        return str(annotation).replace("typing.", "").replace("hostcall.hostcall_datatypes.", "")
    return getattr(annotation, "__name__", repr(annotation))
