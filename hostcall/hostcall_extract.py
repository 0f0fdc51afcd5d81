"""
Pulls concrete values out of argument slots.

by_value moves a value out and leaves UNIT behind; by_ref locks the slot and
hands back a handle through which the value can be changed in place.
"""

from typing import Any

from hostcall.hostcall_datatypes import Dynamic, DynamicWriteLock, ImmutableString


def by_ref(data: Dynamic, target: type = object) -> DynamicWriteLock:
    """Exclusive access to the slot's value until the handle is released."""
    return data.write_lock(target)


def by_value(data: Dynamic, target: type = object) -> Any:
    """Moves the slot's value out as `target`."""
    if target is ImmutableString:
        # Borrowed text: hand out the stored object, the slot keeps it.
        data.flatten_in_place()
        return data.as_str_ref()
    if target is str:
        # Owned text: take the backing string directly instead of a generic cast.
        return data.into_string()
    # The argument is already a copy made for this call, so move it out
    # rather than copying it again.
    return data.take().cast(target)
