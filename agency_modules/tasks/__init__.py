"""
Tasks Module.

Handles:
    - Task status updates from the employee panel
    - Completion side effects (progress, received amount, payment alerts)

``TaskService`` lives in ``agency_modules.tasks.service``.
"""

from agency_modules.tasks.models import Task

__all__ = ["Task"]
