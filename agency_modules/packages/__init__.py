"""
Service Packages Module.

Handles:
    - Package creation and editing with staged payment milestones
    - Threshold-triggered milestone status transitions
    - Payment receipt recording and reversal
    - Derived progress and balance figures

The service lives in ``agency_modules.packages.service``; it is not
re-exported here because ``agency_services`` imports these models.
"""

from agency_modules.packages.models import (
    AlertStatus,
    AlertType,
    LineItem,
    MilestoneSpec,
    Package,
    PackageStatus,
    PaymentAlertEvent,
    PaymentMilestone,
)

__all__ = [
    "AlertStatus",
    "AlertType",
    "LineItem",
    "MilestoneSpec",
    "Package",
    "PackageStatus",
    "PaymentAlertEvent",
    "PaymentMilestone",
]
