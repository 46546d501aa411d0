"""
Outbound email through the Resend HTTP API.

Delivery is best effort: every function here returns a
:class:`DeliveryResult` and never raises for provider or network
failures, so a lost email can never block the write that triggered it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import requests
from django.conf import settings
from django.contrib.auth import get_user_model
from django.template.loader import render_to_string
from django.utils import timezone

logger = logging.getLogger(__name__)

User = get_user_model()

PRIORITY_BADGE = {
    'low': '#28a745',
    'medium': '#ffc107',
    'high': '#fd7e14',
    'critical': '#dc3545',
}


@dataclass
class DeliveryResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    recipients: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            'success': self.success,
            'messageId': self.message_id,
            'error': self.error,
            'recipients': self.recipients,
        }


SKIPPED = DeliveryResult(success=False, error='notification skipped')


def send_email(to: Iterable[str] | str, subject: str, html: str) -> DeliveryResult:
    recipients = [to] if isinstance(to, str) else [r for r in to if r]
    if not recipients:
        return DeliveryResult(success=False, error='no recipients')
    if not settings.RESEND_API_KEY:
        logger.warning("email provider not configured; dropped %r to %s", subject, recipients)
        return DeliveryResult(success=False, error='email provider not configured', recipients=recipients)
    try:
        r = requests.post(
            settings.RESEND_API_URL,
            json={'from': settings.EMAIL_FROM, 'to': recipients, 'subject': subject, 'html': html},
            headers={'Authorization': f'Bearer {settings.RESEND_API_KEY}'},
            timeout=settings.EMAIL_TIMEOUT,
        )
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("email %r to %s failed: %s", subject, recipients, e)
        return DeliveryResult(success=False, error=str(e), recipients=recipients)
    return DeliveryResult(success=True, message_id=data.get('id'), recipients=recipients)


def technician_emails() -> list[str]:
    return list(
        User.objects.filter(role=User.ROLE_TECHNICIAN, is_active=True)
        .exclude(email='')
        .values_list('email', flat=True)
    )


def send_alert_email(alert) -> DeliveryResult:
    """Notify every technician of a newly raised alert."""
    recipients = technician_emails()
    if not recipients:
        logger.warning("no technician emails found for alert #%s", alert.pk)
        return DeliveryResult(success=False, error='No technician emails found')
    html = render_to_string('equipment/email/alert.html', {
        'alert': alert,
        'machine': alert.machine,
        'badge': PRIORITY_BADGE.get(alert.priority, '#6c757d'),
        'sent_at': timezone.localtime(),
    })
    subject = f"DiaCare Alert: {alert.priority.upper()} - {alert.type}"
    return send_email(recipients, subject, html)


def send_maintenance_email(technician, controls: list[dict]) -> DeliveryResult:
    """Send one technician the digest of their overdue and upcoming controls.

    ``controls`` items carry ``machine``, ``control_type``,
    ``next_control_date`` and ``is_overdue``.
    """
    if not getattr(technician, 'email', ''):
        return DeliveryResult(success=False, error='technician has no email')
    html = render_to_string('equipment/email/maintenance.html', {
        'technician': technician,
        'overdue': [c for c in controls if c['is_overdue']],
        'upcoming': [c for c in controls if not c['is_overdue']],
    })
    return send_email(technician.email, 'DiaCare Maintenance Control Notification', html)


def send_test_email(to: str) -> DeliveryResult:
    html = render_to_string('equipment/email/test.html', {'sent_at': timezone.localtime()})
    return send_email(to, 'DiaCare Email Test', html)
