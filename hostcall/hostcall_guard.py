"""
Refuses calls that would mutate a value the caller marked read-only.
"""

from typing import List

from hostcall.hostcall_callable import CallingConvention
from hostcall.hostcall_config import _dbg
from hostcall.hostcall_context import FN_IDX_SET, FN_SET, NativeCallContext
from hostcall.hostcall_datatypes import Dynamic
from hostcall.hostcall_errors import ErrorNonPureMethodCallOnConstant, Position


def check_constant(convention: CallingConvention, ctx: NativeCallContext, args: List[Dynamic],
                   *, debug: bool = False):
    """Raises when an index or property setter targets a read-only receiver.

    Pure calls never mutate their arguments and always pass.
    """
    if convention is not CallingConvention.METHOD or not args:
        return
    if not args[0].is_read_only():
        return

    fn_name = ctx.fn_name
    match len(args):
        case 3 if fn_name == FN_IDX_SET:
            deny = True
        case 2 if fn_name.startswith(FN_SET):
            deny = True
        case _:
            deny = False

    if deny:
        _dbg("GUARD deny", fn_name, "argc", len(args), enabled=debug)
        # The caller fills in the position.
        raise ErrorNonPureMethodCallOnConstant(fn_name, Position.NONE)
