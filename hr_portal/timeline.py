"""Rules for a timeline of effective-dated settings.

Everything here is pure: functions receive the current records and the
calendar date to treat as "today" and return decisions, never touching the
database. Records are any objects with ``id``, ``description``,
``valid_from`` and ``valid_until`` attributes. Periods are closed on both
ends and ``valid_until=None`` stands for an open end.

Functions:
- validate_period(): check client supplied bounds
- find_overlapping(): records intersecting a proposed period
- plan_create(): decide whether an insert is legal and which predecessor shrinks
- plan_delete(): decide whether a delete is legal and how the predecessor is bridged
- plan_recalculation(): derive every end date from chronological order
- select_active(): the record in effect on a given day
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from .core.exceptions import ConflictError, IllegalStateError, ValidationError


ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class Adjustment:
    """A planned change of one record's ``valid_until``."""

    setting_id: int
    description: str
    valid_from: date
    old_valid_until: Optional[date]
    new_valid_until: Optional[date]

    @property
    def changed(self) -> bool:
        return self.old_valid_until != self.new_valid_until


def day_before(day: date) -> date:
    return day - ONE_DAY


def describe(record) -> Dict[str, Any]:
    return {
        "id": record.id,
        "valid_from": record.valid_from,
        "valid_until": record.valid_until,
        "description": record.description,
    }


def periods_overlap(
    a_from: date,
    a_until: Optional[date],
    b_from: date,
    b_until: Optional[date],
) -> bool:
    a_starts_in_time = b_until is None or a_from <= b_until
    b_starts_in_time = a_until is None or b_from <= a_until
    return a_starts_in_time and b_starts_in_time


def chronological(records: Sequence) -> List:
    return sorted(records, key=lambda r: (r.valid_from, r.id))


def validate_period(valid_from: date, valid_until: Optional[date]) -> None:
    if valid_until is not None and valid_until <= valid_from:
        raise ValidationError("valid_until must be after valid_from", fields=["valid_until"])


def find_overlapping(
    records: Sequence,
    valid_from: date,
    valid_until: Optional[date],
) -> List:
    return [
        r
        for r in chronological(records)
        if periods_overlap(r.valid_from, r.valid_until, valid_from, valid_until)
    ]


def plan_create(
    records: Sequence,
    valid_from: date,
    valid_until: Optional[date],
    today: date,
) -> List[Adjustment]:
    """
    Validate a new period against the timeline.

    The only overlap resolved automatically is a single open-ended record
    that started before the new one: it is closed the day before
    ``valid_from``. Any other overlap raises ConflictError listing every
    intersecting record.

    Returns:
        Adjustments to apply together with the insert (empty or one item).

    Raises:
        ValidationError: start in the past or bounds out of order
        ConflictError: overlap that needs manual resolution
    """
    if valid_from < today:
        raise ValidationError("valid_from must not be in the past", fields=["valid_from"])
    validate_period(valid_from, valid_until)

    overlapping = find_overlapping(records, valid_from, valid_until)
    if not overlapping:
        return []

    if len(overlapping) == 1:
        previous = overlapping[0]
        if previous.valid_until is None and previous.valid_from < valid_from:
            return [
                Adjustment(
                    setting_id=previous.id,
                    description=previous.description,
                    valid_from=previous.valid_from,
                    old_valid_until=None,
                    new_valid_until=day_before(valid_from),
                )
            ]

    raise ConflictError(
        f"Period overlaps {len(overlapping)} existing setting(s); adjust them manually first",
        conflicts=[describe(r) for r in overlapping],
    )


def plan_delete(records: Sequence, target, today: date) -> List[Adjustment]:
    """
    Validate deleting ``target`` and bridge the gap it leaves.

    The closest earlier record is extended up to the day before the closest
    later record, or made open-ended when there is none. The adjustment is
    reported even when the end date does not actually move.

    Raises:
        IllegalStateError: target already started (valid_from <= today)
    """
    if target.valid_from <= today:
        raise IllegalStateError("Active or historical settings cannot be deleted")

    others = [r for r in records if r.id != target.id]
    earlier = [r for r in others if r.valid_from < target.valid_from]
    later = [r for r in others if r.valid_from > target.valid_from]
    if not earlier:
        return []

    previous = max(earlier, key=lambda r: (r.valid_from, r.id))
    following = min(later, key=lambda r: (r.valid_from, r.id)) if later else None
    new_until = day_before(following.valid_from) if following is not None else None

    return [
        Adjustment(
            setting_id=previous.id,
            description=previous.description,
            valid_from=previous.valid_from,
            old_valid_until=previous.valid_until,
            new_valid_until=new_until,
        )
    ]


def plan_recalculation(records: Sequence) -> List[Adjustment]:
    """Changes needed so each record ends the day before its successor starts.

    The last record becomes open-ended. Only records whose end date actually
    differs are returned, so planning a repaired timeline yields nothing.
    """
    ordered = chronological(records)
    changes = []
    for index, record in enumerate(ordered):
        if index + 1 < len(ordered):
            expected = day_before(ordered[index + 1].valid_from)
        else:
            expected = None
        adjustment = Adjustment(
            setting_id=record.id,
            description=record.description,
            valid_from=record.valid_from,
            old_valid_until=record.valid_until,
            new_valid_until=expected,
        )
        if adjustment.changed:
            changes.append(adjustment)
    return changes


def covers(record, day: date) -> bool:
    return record.valid_from <= day and (record.valid_until is None or record.valid_until >= day)


def select_active(records: Sequence, today: date):
    """The record in effect on ``today``: latest start among those covering it."""
    candidates = [r for r in records if covers(r, today)]
    if not candidates:
        return None
    return max(candidates, key=lambda r: (r.valid_from, r.id))
