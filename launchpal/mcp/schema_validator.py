from jsonschema import Draft202012Validator, ValidationError
from typing import Any, Tuple
from .errors import ToolError, INVALID_PARAMS, METHOD_NOT_FOUND
from .registry import get_tool, ToolMeta

def validate_payload(schema: dict | None, payload: Any) -> Tuple[bool, str | None]:
    if not schema:
        return True, None
    try:
        Draft202012Validator(schema).validate(payload)
        return True, None
    except ValidationError as e:
        path = ".".join(str(p) for p in e.path)
        msg = f"{path or 'arguments'}: {e.message}"
        return False, msg

def require_valid(tool_name: str, payload: dict) -> ToolMeta:
    meta = get_tool(tool_name)
    if not meta:
        raise ToolError(f"Unknown tool: {tool_name}", METHOD_NOT_FOUND)
    ok, err = validate_payload(meta.get("input_schema"), payload)
    if not ok:
        raise ToolError(f"Invalid arguments for {tool_name}: {err}", INVALID_PARAMS)
    return meta
