"""Core package for the kitchen tracker.

This module exposes the domain models and the state container so that
consumers of the package can simply import them from ``kitchen_tracker``.
"""

from .core.models import Incident, IncidentCause, Kitchen, ObservationEntry, TaskStatus
from .data.store import DashboardStore

__all__ = [
    "DashboardStore",
    "Incident",
    "IncidentCause",
    "Kitchen",
    "ObservationEntry",
    "TaskStatus",
]
