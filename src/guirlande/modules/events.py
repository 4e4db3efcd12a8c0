"""Real-time event names and error codes shared with devices."""

from enum import Enum

CONNECT = "module.connect"
ERROR = "module.error"


class ErrorCode(str, Enum):
    """Codes carried by `module.error` events"""

    MODULE_ERROR = "MODULE_ERROR"
    MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
    MODULE_NOT_VALIDATED = "MODULE_NOT_VALIDATED"


def error_payload(code: ErrorCode) -> dict:
    return {"error": code.value}


def module_event(module_type: int, name: str) -> str:
    """Namespaced event name, e.g. `module.0.color`"""
    return f"module.{int(module_type)}.{name}"
