"""Saved projects: store, transfer format and the editing session."""
from .store import ProjectStore
from .transfer import ExportedFile, decode_project, export_project
from .session import AdvisorSession, create_advisor_session

__all__ = [
    "ProjectStore",
    "ExportedFile",
    "decode_project",
    "export_project",
    "AdvisorSession",
    "create_advisor_session",
]
