"""Export of simulation runs and audit logs."""

from .export import export_audit_log, export_csv, export_json, states_to_frame

__all__ = ["export_audit_log", "export_csv", "export_json", "states_to_frame"]
