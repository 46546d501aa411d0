from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from equipment.models import MaintenanceControl, MaintenanceSchedule
from equipment.services.due_dates import (
    UNIT_DAYS,
    UNIT_MINUTES,
    Cycle,
    advance,
    classify,
    cycle_for_control,
    cycle_for_notification,
    cycle_for_schedule,
    next_due,
)

NOW = timezone.make_aware(datetime(2025, 3, 1, 12, 0))
TICK = timedelta(microseconds=1)


@pytest.mark.parametrize('delta,priority,phrase', [
    (timedelta(days=-2), 'critical', 'EN RETARD de 2 jour(s)'),
    (timedelta(days=-1, hours=-12), 'critical', 'EN RETARD de 1 jour(s)'),
    (timedelta(0), 'critical', 'EN RETARD de 0 jour(s)'),
    (TICK, 'high', 'dans 1 jour(s)'),
    (timedelta(days=5), 'high', 'dans 5 jour(s)'),
    (timedelta(days=7), 'high', 'dans 7 jour(s)'),
    (timedelta(days=7) + TICK, 'medium', 'dans 8 jour(s)'),
    (timedelta(days=30), 'medium', 'dans 30 jour(s)'),
    (timedelta(days=31), 'low', 'dans 31 jour(s)'),
    (timedelta(days=60), 'low', 'dans 60 jour(s)'),
])
def test_classify_days(delta, priority, phrase):
    urgency = classify(NOW, NOW + delta, UNIT_DAYS)
    assert urgency.priority == priority
    assert urgency.phrase == phrase


@pytest.mark.parametrize('delta', [timedelta(days=60) + TICK, timedelta(days=365)])
def test_classify_days_beyond_window_is_silent(delta):
    assert classify(NOW, NOW + delta, UNIT_DAYS) is None


@pytest.mark.parametrize('delta,priority,phrase', [
    (timedelta(seconds=-1), 'critical', 'EN RETARD de 0 minute(s)'),
    (timedelta(minutes=-5), 'critical', 'EN RETARD de 5 minute(s)'),
    (TICK, 'high', 'dans 1 minute(s)'),
    (timedelta(minutes=1), 'high', 'dans 1 minute(s)'),
    (timedelta(minutes=2), 'medium', 'dans 2 minute(s)'),
    (timedelta(minutes=3), 'medium', 'dans 3 minute(s)'),
])
def test_classify_minutes(delta, priority, phrase):
    urgency = classify(NOW, NOW + delta, UNIT_MINUTES)
    assert (urgency.priority, urgency.phrase) == (priority, phrase)


def test_classify_minutes_beyond_window_is_silent():
    assert classify(NOW, NOW + timedelta(minutes=3) + TICK, UNIT_MINUTES) is None


def test_overdue_is_always_critical():
    for minutes in (0, 1, 59, 60 * 24 * 400):
        due = NOW - timedelta(minutes=minutes)
        assert classify(NOW, due, UNIT_DAYS).overdue
        assert 'RETARD' in classify(NOW, due, UNIT_MINUTES).phrase


def test_classify_rejects_unknown_unit():
    with pytest.raises(ValueError):
        classify(NOW, NOW, 'weeks')


def test_cycle_spellings_agree():
    for control, schedule, notification in (('3_minutes', '3-minute', '3min'),
                                            ('3_months', '3-month', '3months'),
                                            ('6_months', '6-month', '6months'),
                                            ('1_year', '1-year', '1year')):
        cycle = cycle_for_control(control)
        assert cycle is cycle_for_schedule(schedule) is cycle_for_notification(notification)
    assert cycle_for_schedule(' 3-month ') is cycle_for_control('3_months')
    assert cycle_for_notification(None) is None
    assert cycle_for_schedule('weekly') is None


def _local(y, m, d, hour=10):
    return timezone.make_aware(datetime(y, m, d, hour, 0))


def test_next_due_clamps_to_month_end():
    one_month = Cycle('1_month', '1-month', '1month', '1 mois', UNIT_DAYS, months=1)
    due = next_due(one_month, _local(2025, 1, 31))
    assert timezone.localtime(due).date() == datetime(2025, 2, 28).date()
    assert timezone.localtime(due).hour == 10


def test_next_due_handles_leap_years():
    three_months = cycle_for_control('3_months')
    due = next_due(three_months, _local(2023, 11, 30))
    assert timezone.localtime(due).date() == datetime(2024, 2, 29).date()
    year = cycle_for_control('1_year')
    assert timezone.localtime(next_due(year, _local(2024, 2, 29))).date() == datetime(2025, 2, 28).date()


def test_next_due_three_minutes_is_exact():
    assert next_due(cycle_for_control('3_minutes'), NOW) == NOW + timedelta(minutes=3)


@pytest.mark.django_db
def test_advance_control_is_monotonic_and_notes_the_alert(machine):
    control = MaintenanceControl.objects.create(
        machine=machine, control_type='3_minutes', control_date=NOW - timedelta(minutes=4),
        next_control_date=NOW - timedelta(minutes=1), notes='initial',
    )
    new_due = advance(control, NOW)
    assert new_due == NOW + timedelta(minutes=3)
    assert new_due > NOW
    control.refresh_from_db()
    assert control.next_control_date == new_due
    assert control.notes.startswith('initial\nAlerte créée le ')


@pytest.mark.django_db
def test_advance_schedule_uses_calendar_months(machine):
    fired = _local(2025, 1, 31)
    schedule = MaintenanceSchedule.objects.create(machine=machine, type='6-month', due_date=fired)
    new_due = advance(schedule, fired)
    schedule.refresh_from_db()
    assert schedule.due_date == new_due
    assert timezone.localtime(new_due).date() == datetime(2025, 7, 31).date()


@pytest.mark.django_db
def test_advance_rejects_unknown_schedule_type(machine):
    schedule = MaintenanceSchedule.objects.create(machine=machine, type='weekly', due_date=NOW)
    with pytest.raises(ValueError):
        advance(schedule, NOW)
