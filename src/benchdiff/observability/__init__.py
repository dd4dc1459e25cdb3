from .context import clear_context, get_run_id, new_run_id, run_id
from .events import log_event, rotate_log_if_needed

__all__ = [
    "clear_context",
    "get_run_id",
    "log_event",
    "new_run_id",
    "rotate_log_if_needed",
    "run_id",
]
