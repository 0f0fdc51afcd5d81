"""
The call-context handed to host functions, and the engine's reserved names.
"""

from typing import Any, Optional, TYPE_CHECKING

from hostcall.hostcall_errors import Position

if TYPE_CHECKING:
    from hostcall.hostcall_table import FunctionTable

# Reserved call names used by the engine for property and index access.
FN_GET = "get$"
FN_SET = "set$"
FN_IDX_GET = "index$get$"
FN_IDX_SET = "index$set$"


class NativeCallContext:
    """Information about the call in progress.

    A host function receives one as its leading argument when that parameter
    is annotated `NativeCallContext`.
    """
    __slots__ = ("fn_name", "source", "position", "table", "tag")

    def __init__(
        self,
        fn_name: str,
        *,
        source: Optional[str] = None,
        position: Position = Position.NONE,
        table: Optional['FunctionTable'] = None,
        tag: Any = None,
    ):
        self.fn_name = fn_name
        self.source = source
        self.position = position
        self.table = table
        self.tag = tag

    def call_fn(self, name: str, *args: Any) -> Any:
        """Calls another registered function from inside a host function."""
        if self.table is None:
            raise RuntimeError(f"no function table available to call '{name}'")
        result = self.table.call_fn(
            name, list(args), position=self.position, source=self.source, tag=self.tag
        )
        return result.value

    def __repr__(self) -> str:
        return f"<NativeCallContext fn={self.fn_name!r} source={self.source!r} pos={self.position!r}>"
