"""
Turning pydantic / FastAPI validation errors into the {error, details} envelope
"""
from typing import Any, Dict, List, Sequence


def _location(loc: Sequence[Any]) -> str:
    # ("body", "rating") -> "rating"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "form")]
    return ".".join(parts)


def error_details(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    return [{"field": _location(e.get("loc", ())), "message": e.get("msg", "")} for e in errors]


def first_error_message(errors: Sequence[Dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = _location(first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    # "Value error, Instructions must be ..." -> "Instructions must be ..."
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{field}: {message}" if field else message
