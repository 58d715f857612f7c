"""HTTP services for Tidy Calendar."""

from .server import app, get_assistant, invoke_api_function, list_api_functions, run_local_server, set_assistant

__all__ = [
    "app",
    "get_assistant",
    "invoke_api_function",
    "list_api_functions",
    "run_local_server",
    "set_assistant",
]
