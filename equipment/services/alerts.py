"""
Alert persistence: de-duplication, emission and resolution.

Automatic alerts carry a structured ``dedup_key`` naming the obligation
cycle they were raised for.  The key is unique among active alerts at
the storage layer, so two checks racing on the same cycle cannot both
insert; the loser observes ``created=False``.  Email delivery and the
websocket broadcast happen after the row exists and never fail the emit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from equipment.models import Alert, Machine
from equipment.services import notifications
from equipment.services.notifications import DeliveryResult

logger = logging.getLogger(__name__)

ALERTS_GROUP = 'alerts'


@dataclass
class AlertDraft:
    machine: Machine
    message: str
    type: str
    required_action: str
    priority: str
    message_role: str = 'technician'
    dedup_key: Optional[str] = None
    timestamp: Optional[datetime] = None


@dataclass
class EmitOutcome:
    alert: Optional[Alert]
    created: bool
    delivery: DeliveryResult = field(default_factory=lambda: notifications.SKIPPED)


def dedup_key(kind: str, object_id, due_at: datetime) -> str:
    """Structured identity of one obligation cycle.

    ``kind`` names the source entity (e.g. 'control', 'schedule',
    'intervention'), ``due_at`` is the due instant the cycle is about.
    """
    return f"{kind}:{object_id}:{due_at.astimezone(dt_timezone.utc):%Y%m%dT%H%M%S}"


def has_active_duplicate(fragment: Optional[str], machine_id: str, dedup_key: Optional[str] = None) -> bool:
    """True if an active alert on the machine already covers this candidate.

    The structured key is authoritative; ``fragment`` also matches alerts
    created by hand (which carry no key) whose message contains it.
    """
    match = Q()
    if dedup_key:
        match |= Q(dedup_key=dedup_key)
    if fragment:
        match |= Q(message__contains=fragment)
    if not match:
        return False
    return Alert.objects.filter(match, status=Alert.STATUS_ACTIVE, machine_id=machine_id).exists()


def serialize_alert(alert: Alert) -> dict:
    machine = alert.machine
    return {
        'id': alert.id,
        'message': alert.message,
        'messageRole': alert.message_role,
        'type': alert.type,
        'requiredAction': alert.required_action,
        'priority': alert.priority,
        'timestamp': alert.timestamp.isoformat(),
        'status': alert.status,
        'machineId': alert.machine_id,
        'machine': {
            'name': machine.name,
            'inventoryNumber': machine.inventory_number,
            'department': machine.department,
        },
    }


def _broadcast(event_type: str, alert: Alert) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(ALERTS_GROUP, {
            'type': event_type,
            'alert': serialize_alert(alert),
        })
    except Exception:
        logger.warning("broadcast %s for alert #%s failed", event_type, alert.id, exc_info=True)


def emit_alert(draft: AlertDraft, *, notify: bool = True) -> EmitOutcome:
    """Persist an alert, then notify technicians on a best-effort basis."""
    try:
        with transaction.atomic():
            alert = Alert.objects.create(
                machine=draft.machine,
                message=draft.message,
                message_role=draft.message_role,
                type=draft.type,
                required_action=draft.required_action,
                priority=draft.priority,
                timestamp=draft.timestamp or timezone.now(),
                status=Alert.STATUS_ACTIVE,
                dedup_key=draft.dedup_key,
            )
    except IntegrityError:
        if not draft.dedup_key:
            raise
        logger.info("alert for %s already active; skipped", draft.dedup_key)
        existing = Alert.objects.filter(dedup_key=draft.dedup_key, status=Alert.STATUS_ACTIVE).first()
        return EmitOutcome(alert=existing, created=False)

    logger.info("alert #%s [%s] %s", alert.id, alert.priority, alert.message)
    delivery = notifications.SKIPPED
    if notify:
        delivery = notifications.send_alert_email(alert)
        if not delivery.success:
            logger.warning("alert #%s email not delivered: %s", alert.id, delivery.error)
    _broadcast('alert.created', alert)
    return EmitOutcome(alert=alert, created=True, delivery=delivery)


def emit_unless_duplicate(draft: AlertDraft, fragment: Optional[str] = None, *, notify: bool = True) -> EmitOutcome:
    if has_active_duplicate(fragment, draft.machine.pk, draft.dedup_key):
        logger.debug("duplicate suppressed for machine %s (%s)", draft.machine.pk, draft.dedup_key or fragment)
        return EmitOutcome(alert=None, created=False)
    return emit_alert(draft, notify=notify)


def resolve_alert(alert: Alert) -> Alert:
    if alert.status != Alert.STATUS_RESOLVED:
        alert.status = Alert.STATUS_RESOLVED
        alert.save(update_fields=['status'])
        _broadcast('alert.resolved', alert)
    return alert
