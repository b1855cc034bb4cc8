# launchpal/mcp/errors.py

from mcp.shared.exceptions import McpError
from mcp.types import (
    ErrorData,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
)

__all__ = ["ToolError", "INTERNAL_ERROR", "INVALID_PARAMS", "INVALID_REQUEST", "METHOD_NOT_FOUND"]


class ToolError(McpError):
    """A tool could not finish: bad arguments or a failed REST call.

    Raised from a tool handler it reaches the client as an ``isError``
    result; from a prompt handler it becomes a JSON-RPC error.
    """

    def __init__(self, message: str, code: int = INTERNAL_ERROR):
        super().__init__(ErrorData(code=code, message=message))

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message
