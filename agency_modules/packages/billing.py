"""
Package billing rules (``agency_modules.packages.billing``).

Pure functions behind ``PackageBillingService``: milestone amounts, initial
statuses, status preservation across edits, the received-amount policy and
threshold triggering.  ZERO I/O; every timestamp is passed in.

Status lifecycle::

    upcoming --(completed units >= trigger)--> due --(payment)--> received
    advance milestones start in received; trigger 0 starts in due.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from agency_kernel.domain.values import MilestoneStatus
from agency_kernel.exceptions import PackageValidationError
from agency_modules.packages.models import LineItem, MilestoneSpec, PaymentMilestone

HUNDRED = Decimal("100")


def milestone_amount(percentage: Decimal | int, total_amount: int) -> int:
    """``round(percentage / 100 * total)``, halves rounded up."""
    raw = Decimal(percentage) / HUNDRED * Decimal(total_amount)
    return int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def initial_status(spec: MilestoneSpec) -> MilestoneStatus:
    if spec.is_advance:
        return MilestoneStatus.RECEIVED
    if spec.trigger_at_quantity == 0:
        return MilestoneStatus.DUE
    return MilestoneStatus.UPCOMING


def new_milestone(spec: MilestoneSpec, total_amount: int, now: datetime) -> PaymentMilestone:
    status = initial_status(spec)
    return PaymentMilestone(
        label=spec.label,
        percentage=Decimal(spec.percentage),
        amount_due=milestone_amount(spec.percentage, total_amount),
        trigger_at_quantity=spec.trigger_at_quantity,
        status=status,
        paid_date=now if status is MilestoneStatus.RECEIVED else None,
    )


def build_milestones(
    specs: Sequence[MilestoneSpec],
    total_amount: int,
    now: datetime,
) -> tuple[PaymentMilestone, ...]:
    """Milestones for a new package."""
    return tuple(new_milestone(spec, total_amount, now) for spec in specs)


def rebuild_milestones(
    specs: Sequence[MilestoneSpec],
    total_amount: int,
    existing: Sequence[PaymentMilestone],
    now: datetime,
) -> tuple[PaymentMilestone, ...]:
    """Milestones after an edit.

    Amounts come from the new total and percentages.  Status and paid date
    are carried over by position; positions beyond the old list are treated
    as new milestones.
    """
    rebuilt: list[PaymentMilestone] = []
    for index, spec in enumerate(specs):
        if index >= len(existing):
            rebuilt.append(new_milestone(spec, total_amount, now))
            continue
        previous = existing[index]
        rebuilt.append(
            PaymentMilestone(
                label=spec.label,
                percentage=Decimal(spec.percentage),
                amount_due=milestone_amount(spec.percentage, total_amount),
                trigger_at_quantity=spec.trigger_at_quantity,
                status=previous.status,
                paid_date=previous.paid_date,
            )
        )
    return tuple(rebuilt)


def received_total(milestones: Iterable[PaymentMilestone]) -> int:
    return sum(m.amount_due for m in milestones if m.status is MilestoneStatus.RECEIVED)


def recalculate_received_amount(
    milestones: Sequence[PaymentMilestone],
    previous: Sequence[PaymentMilestone] = (),
    freeze_received: bool = False,
) -> tuple[tuple[PaymentMilestone, ...], int]:
    """Received-amount policy applied after an edit.

    Default: the received amount is the sum of the *new* amounts of received
    milestones, so editing a paid milestone's percentage changes what was
    recorded as received.  With ``freeze_received`` a milestone that was
    already received keeps the amount it was paid at.
    """
    if freeze_received:
        frozen: list[PaymentMilestone] = []
        for index, milestone in enumerate(milestones):
            old = previous[index] if index < len(previous) else None
            if (
                old is not None
                and old.status is MilestoneStatus.RECEIVED
                and milestone.status is MilestoneStatus.RECEIVED
            ):
                milestone = replace(milestone, amount_due=old.amount_due)
            frozen.append(milestone)
        milestones = frozen
    milestones = tuple(milestones)
    return milestones, received_total(milestones)


def triggered_indexes(
    milestones: Sequence[PaymentMilestone],
    completed_units: int,
) -> list[int]:
    """Upcoming milestones whose threshold has been reached."""
    return [
        index
        for index, m in enumerate(milestones)
        if m.status is MilestoneStatus.UPCOMING
        and completed_units >= m.trigger_at_quantity
    ]


def newly_announced(
    milestones: Sequence[PaymentMilestone],
    existing_count: int = 0,
) -> list[int]:
    """Indexes at or beyond ``existing_count`` that start received or due."""
    return [
        index
        for index, m in enumerate(milestones)
        if index >= existing_count
        and m.status in (MilestoneStatus.RECEIVED, MilestoneStatus.DUE)
    ]


# =============================================================================
# Input validation
# =============================================================================


def clean_line_items(line_items: Iterable[LineItem]) -> tuple[LineItem, ...]:
    """Drop blank line items; reject non-positive quantities."""
    cleaned: list[LineItem] = []
    for item in line_items:
        if not item.service_name.strip():
            continue
        if item.quantity <= 0:
            raise PackageValidationError(
                "line_items",
                f"'{item.service_name}' must have a positive quantity",
            )
        cleaned.append(item)
    return tuple(cleaned)


def validate_milestone_specs(specs: Iterable[MilestoneSpec]) -> None:
    for index, spec in enumerate(specs):
        pct = Decimal(spec.percentage)
        if pct < 0 or pct > HUNDRED:
            raise PackageValidationError(
                f"milestones[{index}].percentage",
                f"must be between 0 and 100, got {pct}",
            )
        if spec.trigger_at_quantity < 0:
            raise PackageValidationError(
                f"milestones[{index}].trigger_at_quantity",
                f"must not be negative, got {spec.trigger_at_quantity}",
            )


def validate_package_fields(client_id: str, name: str, total_amount: int) -> None:
    if not (client_id or "").strip():
        raise PackageValidationError("client_id", "please select a client")
    if not (name or "").strip():
        raise PackageValidationError("name", "please enter a package name")
    if total_amount < 0:
        raise PackageValidationError("total_amount", "must not be negative")
