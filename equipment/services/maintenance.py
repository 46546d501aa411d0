"""
Maintenance lifecycle: controls recorded by technicians and the
control/schedule pair seeded from a completed intervention.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from django.db import transaction
from django.utils import timezone

from equipment.models import Intervention, Machine, MaintenanceControl, MaintenanceSchedule
from equipment.services import notifications
from equipment.services.alerts import AlertDraft, emit_alert
from equipment.services.checks import notify_control_overdue
from equipment.services.due_dates import cycle_for_control, cycle_for_notification, next_due

logger = logging.getLogger(__name__)

DEFAULT_TASKS = [
    "Vérification après intervention",
    "Contrôle de fonctionnement",
    "Maintenance préventive",
]


def create_maintenance_control(*, machine: Machine, technician, control_type: str, control_date: datetime,
                               notes: str = '', now: Optional[datetime] = None):
    """Record a completed control and schedule the next one.

    Returns ``(control, delivery)`` where ``delivery`` is the outcome of
    the confirmation email sent to the technician.
    """
    cycle = cycle_for_control(control_type)
    if cycle is None:
        raise ValueError(f"Type de contrôle invalide: {control_type}")
    now = now or timezone.now()
    control = MaintenanceControl.objects.create(
        machine=machine,
        technician=technician,
        control_type=control_type,
        control_date=control_date,
        next_control_date=next_due(cycle, control_date),
        status='completed',
        notes=notes or '',
    )
    overdue = control.next_control_date < now
    if overdue:
        notify_control_overdue(control)
    delivery = notifications.send_maintenance_email(technician, [{
        'id': control.pk,
        'machine': machine,
        'control_type': control_type,
        'next_control_date': control.next_control_date,
        'is_overdue': overdue,
    }])
    if not delivery.success:
        logger.warning("control #%s email to technician failed: %s", control.pk, delivery.error)
    return control, delivery


def sync_from_intervention(intervention: Intervention) -> Optional[dict]:
    """Seed or update the machine's control and schedule for the intervention's cycle.

    Exactly one control (by control type) and one schedule (by schedule
    type) exist per machine and cycle afterwards, both due one cycle
    after ``date_performed``.  Returns ``None`` when nothing applies.
    """
    cycle = cycle_for_notification(intervention.notifications)
    if cycle is None or intervention.date_performed is None or not intervention.inventory_number:
        return None
    machine = Machine.objects.filter(inventory_number=intervention.inventory_number).first()
    if machine is None:
        logger.warning("intervention #%s: no machine with inventory number %r",
                       intervention.pk, intervention.inventory_number)
        return None

    performed = intervention.date_performed
    due_at = next_due(cycle, performed)
    with transaction.atomic():
        schedule = (MaintenanceSchedule.objects.select_for_update()
                    .filter(machine=machine, type=cycle.schedule_type).order_by('id').first())
        if schedule:
            schedule.due_date = due_at
            schedule.status = MaintenanceSchedule.STATUS_PENDING
            schedule.save(update_fields=['due_date', 'status'])
        else:
            schedule = MaintenanceSchedule.objects.create(
                machine=machine, type=cycle.schedule_type, tasks=list(DEFAULT_TASKS),
                due_date=due_at, status=MaintenanceSchedule.STATUS_PENDING,
            )

        control = (MaintenanceControl.objects.select_for_update()
                   .filter(machine=machine, control_type=cycle.control_type).order_by('id').first())
        if control:
            control.control_date = performed
            control.next_control_date = due_at
            control.status = 'completed'
            control.notes = f"Mise à jour automatique après intervention #{intervention.pk} ({intervention.notifications})"
            control.save()
        else:
            control = MaintenanceControl.objects.create(
                machine=machine,
                technician=intervention.technician_user,
                control_type=cycle.control_type,
                control_date=performed,
                next_control_date=due_at,
                status='completed',
                notes=f"Créé automatiquement après intervention #{intervention.pk} ({intervention.notifications})",
            )

        machine.last_maintenance = performed
        machine.next_maintenance = due_at
        machine.save(update_fields=['last_maintenance', 'next_maintenance', 'updated_at'])

    logger.info("intervention #%s synced %s cycle on %s, next due %s",
                intervention.pk, cycle.notification, machine.pk, due_at.isoformat())
    return {'machine': machine, 'control': control, 'schedule': schedule}


def announce_intervention(intervention: Intervention):
    """Raise the alert telling technicians a cycle-bearing intervention was logged."""
    if not intervention.notifications:
        return None
    machine = Machine.objects.filter(inventory_number=intervention.inventory_number).first()
    if machine is None:
        return None
    return emit_alert(AlertDraft(
        machine=machine,
        message=(f"Nouvelle intervention #{intervention.pk}: {intervention.requested_intervention}. "
                 f"Notifications: {intervention.notifications}"),
        type='intervention_created',
        required_action='Vérifier et planifier le contrôle',
        priority='critical' if intervention.notifications == Intervention.NOTIFY_3MIN else 'medium',
    ))


def after_intervention_saved(intervention: Intervention, *, created: bool, resync: bool = True) -> None:
    """Side effects of saving an intervention.

    They run after the intervention row is committed; a failure here is
    logged and leaves the intervention in place.  Pass ``resync=False``
    when the edit left the date performed and the cycle untouched, so
    due dates already advanced by the checks stay where they are.
    """
    if created:
        try:
            announce_intervention(intervention)
        except Exception:
            logger.exception("intervention #%s creation alert failed", intervention.pk)
    if not resync:
        return
    try:
        sync_from_intervention(intervention)
    except Exception:
        logger.exception("intervention #%s maintenance sync failed", intervention.pk)
