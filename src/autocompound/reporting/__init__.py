"""Export of compound history and simulation results."""

from .export import account_summary, export_csv, export_history_csv, export_json, history_frame

__all__ = [
    "account_summary",
    "export_csv",
    "export_history_csv",
    "export_json",
    "history_frame",
]
