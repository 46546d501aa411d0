"""
Check passes that turn due obligations into alerts.

Each pass loads its candidates, classifies them against ``now``, skips
those already covered by an active alert, emits the rest and, once an
obligation has actually come due, rolls its due date forward.  A failure
on one row is logged and reported; it never aborts the pass.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from django.contrib.auth import get_user_model
from django.utils import timezone

from equipment.models import Alert, Intervention, Machine, MaintenanceControl, MaintenanceSchedule
from equipment.services import notifications
from equipment.services.alerts import AlertDraft, dedup_key, emit_alert, emit_unless_duplicate
from equipment.services.due_dates import (
    UNIT_DAYS,
    advance,
    classify,
    cycle_for_control,
    cycle_for_notification,
    cycle_for_schedule,
    next_due,
)

logger = logging.getLogger(__name__)

User = get_user_model()

UPCOMING_WINDOW = timedelta(days=7)


@dataclass
class CheckReport:
    name: str
    checked: int = 0
    alerts_created: int = 0
    duplicates: int = 0
    created: list = field(default_factory=list)
    advanced: list = field(default_factory=list)
    emails: list = field(default_factory=list)
    failures: list = field(default_factory=list)

    def add_alert(self, alert: Alert, **extra) -> None:
        self.alerts_created += 1
        self.created.append({
            'id': alert.id,
            'message': alert.message,
            'type': alert.type,
            'priority': alert.priority,
            'machine': alert.machine.name,
            **extra,
        })

    def fail(self, kind: str, pk, exc: Exception) -> None:
        self.failures.append({'kind': kind, 'id': pk, 'error': str(exc)})

    @property
    def message(self) -> str:
        return f"Vérification terminée. {self.alerts_created} nouvelles alertes créées."

    def to_dict(self) -> dict:
        return {
            'success': not self.failures,
            'message': self.message,
            'check': self.name,
            'checked': self.checked,
            'alertsCreated': self.alerts_created,
            'duplicatesSkipped': self.duplicates,
            'createdAlerts': self.created,
            'advanced': self.advanced,
            'emails': self.emails,
            'failures': self.failures,
        }


def _emit_and_advance(report: CheckReport, obj, draft: AlertDraft, fragment: str, urgency, now: datetime, advance_when_due: bool) -> None:
    outcome = emit_unless_duplicate(draft, fragment)
    if not outcome.created:
        report.duplicates += 1
        return
    report.add_alert(outcome.alert, urgencyMessage=urgency.phrase, emailSent=outcome.delivery.success)
    if urgency.overdue and advance_when_due:
        new_due = advance(obj, now)
        report.advanced.append({'kind': type(obj).__name__, 'id': obj.pk, 'nextDue': new_due.isoformat()})


def _check_control(report: CheckReport, control: MaintenanceControl, now: datetime) -> None:
    cycle = cycle_for_control(control.control_type)
    if cycle is None:
        logger.warning("control #%s has unknown type %r", control.pk, control.control_type)
        return
    urgency = classify(now, control.next_control_date, cycle.unit)
    if urgency is None:
        return
    machine = control.machine
    if cycle.minutes:
        fragment = f"Contrôle 3 minutes - {machine.name}"
        alert_type = '3-Minute Control'
        action = f"Effectuer le contrôle technique de 3 minutes sur {machine.name}"
    else:
        fragment = f"Contrôle {cycle.label} - {machine.name}"
        alert_type = 'Maintenance Control'
        action = f"Effectuer le contrôle {cycle.label} sur {machine.name}"
    draft = AlertDraft(
        machine=machine,
        message=f"{fragment} {urgency.phrase}",
        type=alert_type,
        required_action=action,
        priority=urgency.priority,
        dedup_key=dedup_key('control', control.pk, control.next_control_date),
    )
    _emit_and_advance(report, control, draft, fragment, urgency, now, advance_when_due=True)


def check_controls(now: Optional[datetime] = None, control_types: Optional[Iterable[str]] = None) -> CheckReport:
    """Raise alerts for maintenance controls close to or past their next date."""
    now = now or timezone.now()
    report = CheckReport('controls')
    qs = MaintenanceControl.objects.select_related('machine').order_by('next_control_date')
    if control_types:
        qs = qs.filter(control_type__in=list(control_types))
    for control in qs:
        report.checked += 1
        try:
            _check_control(report, control, now)
        except Exception as e:
            logger.exception("control #%s check failed", control.pk)
            report.fail('control', control.pk, e)
    logger.info("controls check: %s checked, %s alerts", report.checked, report.alerts_created)
    return report


def _schedule_tasks(schedule: MaintenanceSchedule) -> list:
    tasks = schedule.tasks
    if isinstance(tasks, (list, tuple)):
        return [str(t) for t in tasks]
    return [str(tasks)] if tasks else []


def _check_schedule(report: CheckReport, schedule: MaintenanceSchedule, now: datetime) -> None:
    cycle = cycle_for_schedule(schedule.type)
    urgency = classify(now, schedule.due_date, cycle.unit if cycle else UNIT_DAYS)
    if urgency is None:
        return
    machine = schedule.machine
    fragment = f"Maintenance {schedule.type} - {machine.name}"
    tasks = ', '.join(_schedule_tasks(schedule))
    if cycle is not None and cycle.minutes:
        # 3-minute schedules only alert once overdue.
        if not urgency.overdue:
            return
        message = f"{fragment} EN RETARD"
        alert_type = '3-Minute Maintenance'
        action = f"Effectuer la maintenance {schedule.type}: {tasks}"
    else:
        message = f"{fragment} {urgency.phrase}"
        alert_type = f"Maintenance {schedule.type}"
        action = f"Effectuer la maintenance {schedule.type} : {tasks}"
    draft = AlertDraft(
        machine=machine,
        message=message,
        type=alert_type,
        required_action=action,
        priority=urgency.priority,
        dedup_key=dedup_key('schedule', schedule.pk, schedule.due_date),
    )
    _emit_and_advance(report, schedule, draft, fragment, urgency, now, advance_when_due=cycle is not None)


def check_schedules(now: Optional[datetime] = None, schedule_types: Optional[Iterable[str]] = None) -> CheckReport:
    """Raise alerts for pending maintenance schedules within the alert window."""
    now = now or timezone.now()
    report = CheckReport('schedules')
    qs = (MaintenanceSchedule.objects.select_related('machine')
          .filter(status=MaintenanceSchedule.STATUS_PENDING)
          .order_by('due_date'))
    if schedule_types:
        qs = qs.filter(type__in=list(schedule_types))
    for schedule in qs:
        report.checked += 1
        try:
            _check_schedule(report, schedule, now)
        except Exception as e:
            logger.exception("schedule #%s check failed", schedule.pk)
            report.fail('schedule', schedule.pk, e)
    logger.info("schedules check: %s checked, %s alerts", report.checked, report.alerts_created)
    return report


def check_intervention_reminders(now: Optional[datetime] = None) -> CheckReport:
    """One reminder per completed intervention once its follow-up control is due.

    A reminder is raised at most once per intervention cycle, even after
    it has been resolved.
    """
    now = now or timezone.now()
    report = CheckReport('intervention_reminders')
    qs = (Intervention.objects
          .filter(notifications__isnull=False, date_performed__isnull=False, status='Completed')
          .order_by('id'))
    for intervention in qs:
        report.checked += 1
        cycle = cycle_for_notification(intervention.notifications)
        if cycle is None:
            continue
        due_at = next_due(cycle, intervention.date_performed)
        if now < due_at:
            continue
        try:
            key = dedup_key('intervention', intervention.pk, due_at)
            if Alert.objects.filter(dedup_key=key).exists():
                report.duplicates += 1
                continue
            machine = Machine.objects.filter(inventory_number=intervention.inventory_number).first()
            if machine is None:
                logger.warning("intervention #%s: no machine with inventory number %r",
                               intervention.pk, intervention.inventory_number)
                continue
            outcome = emit_alert(AlertDraft(
                machine=machine,
                message=(f"Rappel: Intervention #{intervention.pk} ({intervention.requested_intervention}) "
                         f"nécessite un contrôle selon le cycle {intervention.notifications}"),
                type='intervention_reminder',
                required_action='Effectuer le contrôle de maintenance',
                priority='critical' if cycle.minutes else 'high',
                dedup_key=key,
            ))
            if outcome.created:
                report.add_alert(outcome.alert, interventionId=intervention.pk)
            else:
                report.duplicates += 1
        except Exception as e:
            logger.exception("intervention #%s reminder failed", intervention.pk)
            report.fail('intervention', intervention.pk, e)
    logger.info("intervention reminders: %s checked, %s alerts", report.checked, report.alerts_created)
    return report


def due_controls(now: Optional[datetime] = None):
    """Completed controls that are overdue or due within the upcoming window."""
    now = now or timezone.now()
    qs = (MaintenanceControl.objects.select_related('machine', 'technician')
          .filter(status='completed', next_control_date__lte=now + UPCOMING_WINDOW)
          .order_by('next_control_date'))
    return {
        'overdue': [c for c in qs if c.next_control_date < now],
        'upcoming': [c for c in qs if c.next_control_date >= now],
    }


def _overdue_draft(control: MaintenanceControl) -> AlertDraft:
    message = f"Maintenance control overdue for machine {control.machine.name}"
    return AlertDraft(
        machine=control.machine,
        message=message,
        type='maintenance_control',
        required_action=f"Perform {control.control_type.replace('_', ' ')} maintenance control",
        priority='high',
        dedup_key=dedup_key('control-overdue', control.pk, control.next_control_date),
    )


def notify_control_overdue(control: MaintenanceControl):
    """Raise the deduplicated overdue alert for one control."""
    draft = _overdue_draft(control)
    return emit_unless_duplicate(draft, draft.message, notify=False)


def send_maintenance_notifications(now: Optional[datetime] = None) -> CheckReport:
    """Email each technician a digest of their overdue and upcoming controls."""
    now = now or timezone.now()
    report = CheckReport('maintenance_notifications')
    technicians = User.objects.filter(role=User.ROLE_TECHNICIAN, is_active=True).order_by('id')
    for technician in technicians:
        controls = list(
            technician.maintenance_controls.select_related('machine')
            .filter(status='completed', next_control_date__lte=now + UPCOMING_WINDOW)
            .order_by('next_control_date')
        )
        if not controls:
            continue
        report.checked += len(controls)
        rows = []
        for control in controls:
            overdue = control.next_control_date < now
            rows.append({
                'id': control.pk,
                'machine': control.machine,
                'control_type': control.control_type,
                'next_control_date': control.next_control_date,
                'is_overdue': overdue,
            })
            if not overdue:
                continue
            try:
                outcome = notify_control_overdue(control)
            except Exception as e:
                logger.exception("overdue alert for control #%s failed", control.pk)
                report.fail('control', control.pk, e)
                continue
            if outcome.created:
                report.add_alert(outcome.alert, controlId=control.pk)
            else:
                report.duplicates += 1
        delivery = notifications.send_maintenance_email(technician, rows)
        report.emails.append({
            'technician': technician.display_name,
            'email': technician.email,
            'controlsCount': len(rows),
            **delivery.as_dict(),
        })
    sent = sum(1 for e in report.emails if e['success'])
    logger.info("maintenance notifications: %s/%s emails sent", sent, len(report.emails))
    return report
