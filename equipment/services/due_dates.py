"""
Due-date classification and cycle arithmetic for recurring maintenance.

Every check that raises maintenance alerts goes through this module, so
the urgency thresholds live in exactly one place.  ``classify`` is pure;
``advance`` is the only function here that writes to the database.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from django.utils import timezone

logger = logging.getLogger(__name__)

UNIT_MINUTES = 'minutes'
UNIT_DAYS = 'days'

_UNIT_LENGTH = {
    UNIT_MINUTES: timedelta(minutes=1),
    UNIT_DAYS: timedelta(days=1),
}
_UNIT_LABEL = {
    UNIT_MINUTES: 'minute(s)',
    UNIT_DAYS: 'jour(s)',
}

# (upper bound in whole units, priority), checked in order once the
# obligation is not yet due.  Beyond the last bound no alert is raised.
_THRESHOLDS = {
    UNIT_MINUTES: ((1, 'high'), (3, 'medium')),
    UNIT_DAYS: ((7, 'high'), (30, 'medium'), (60, 'low')),
}


@dataclass(frozen=True)
class Urgency:
    priority: str
    phrase: str
    units: int

    @property
    def overdue(self) -> bool:
        return self.priority == 'critical'


def units_until(now: datetime, due_at: datetime, unit: str) -> int:
    """Whole units from ``now`` to ``due_at``, rounded up.

    A due time one microsecond away counts as one unit; the result is
    zero or negative only once the obligation is due.
    """
    micro = timedelta(microseconds=1)
    delta = (due_at - now) // micro
    step = _UNIT_LENGTH[unit] // micro
    return -(-delta // step)


def classify(now: datetime, due_at: datetime, unit: str = UNIT_DAYS) -> Optional[Urgency]:
    """Return the urgency tier for an obligation, or ``None`` for no alert."""
    if unit not in _UNIT_LENGTH:
        raise ValueError(f"unknown unit: {unit}")
    units = units_until(now, due_at, unit)
    label = _UNIT_LABEL[unit]
    if units <= 0:
        return Urgency('critical', f"EN RETARD de {abs(units)} {label}", units)
    for bound, priority in _THRESHOLDS[unit]:
        if units <= bound:
            return Urgency(priority, f"dans {units} {label}", units)
    return None


@dataclass(frozen=True)
class Cycle:
    """One recurring maintenance interval under its three spellings."""
    control_type: str
    schedule_type: str
    notification: str
    label: str
    unit: str
    minutes: int = 0
    months: int = 0

    def step(self):
        if self.minutes:
            return timedelta(minutes=self.minutes)
        return relativedelta(months=self.months)


CYCLES = (
    Cycle('3_minutes', '3-minute', '3min', '3 minutes', UNIT_MINUTES, minutes=3),
    Cycle('3_months', '3-month', '3months', '3 mois', UNIT_DAYS, months=3),
    Cycle('6_months', '6-month', '6months', '6 mois', UNIT_DAYS, months=6),
    Cycle('1_year', '1-year', '1year', '1 an', UNIT_DAYS, months=12),
)

_BY_CONTROL = {c.control_type: c for c in CYCLES}
_BY_SCHEDULE = {c.schedule_type: c for c in CYCLES}
_BY_NOTIFICATION = {c.notification: c for c in CYCLES}


def cycle_for_control(control_type: str) -> Optional[Cycle]:
    return _BY_CONTROL.get(control_type)


def cycle_for_schedule(schedule_type: str) -> Optional[Cycle]:
    return _BY_SCHEDULE.get((schedule_type or '').strip())


def cycle_for_notification(notification: Optional[str]) -> Optional[Cycle]:
    return _BY_NOTIFICATION.get(notification or '')


def next_due(cycle: Cycle, start: datetime) -> datetime:
    """Add one cycle to ``start``.

    Month and year steps are calendar arithmetic done on local wall-clock
    time, clamped to the end of shorter months (Jan 31 + 1 month is the
    last day of February).
    """
    if cycle.minutes:
        return start + cycle.step()
    if timezone.is_aware(start):
        return timezone.localtime(start) + cycle.step()
    return start + cycle.step()


def advance(obj, fired_at: datetime) -> datetime:
    """Roll a control or schedule forward after its due alert fired.

    Returns the new due instant, which is always strictly after
    ``fired_at``.
    """
    from ..models import MaintenanceControl, MaintenanceSchedule

    if isinstance(obj, MaintenanceControl):
        cycle = cycle_for_control(obj.control_type)
        if cycle is None:
            raise ValueError(f"unknown control type: {obj.control_type}")
        new_due = next_due(cycle, fired_at)
        stamp = timezone.localtime(fired_at).strftime('%d/%m/%Y %H:%M:%S')
        obj.next_control_date = new_due
        obj.notes = f"{obj.notes or ''}\nAlerte créée le {stamp}"
        obj.save(update_fields=['next_control_date', 'notes', 'updated_at'])
    elif isinstance(obj, MaintenanceSchedule):
        cycle = cycle_for_schedule(obj.type)
        if cycle is None:
            raise ValueError(f"unknown schedule type: {obj.type}")
        new_due = next_due(cycle, fired_at)
        obj.due_date = new_due
        obj.save(update_fields=['due_date'])
    else:
        raise TypeError(f"cannot advance {type(obj).__name__}")
    logger.info("advanced %s #%s to %s", type(obj).__name__, obj.pk, new_due.isoformat())
    return new_due
