"""
Database models for the DiaCare backend.

These models capture the dialysis unit's equipment records: machines,
the faults reported against them, technician interventions, the two
recurring-maintenance representations (controls and schedules) and the
alerts raised when an obligation comes due.  Field names mirror the
JSON payloads of the front-end so serialisation stays a flat mapping.
"""
from __future__ import annotations

import secrets
import time

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q


class User(AbstractUser):
    """Custom user model carrying the application role.

    Roles mirror the front-end dashboards: 'admin', 'technician' and
    'patient'.  The display name is stored in ``first_name``.  Each role
    may carry a short business code (e.g. 'T001') used by other records
    to reference the user.
    """
    ROLE_ADMIN = 'admin'
    ROLE_TECHNICIAN = 'technician'
    ROLE_PATIENT = 'patient'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_TECHNICIAN, 'Technician'),
        (ROLE_PATIENT, 'Patient'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    patient_id = models.CharField(max_length=32, unique=True, null=True, blank=True)
    technician_id = models.CharField(max_length=32, unique=True, null=True, blank=True)
    admin_id = models.CharField(max_length=32, unique=True, null=True, blank=True)

    @property
    def display_name(self) -> str:
        return self.first_name or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


def _machine_id() -> str:
    return f"MACH-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


class Machine(models.Model):
    """A dialysis generator tracked by inventory number."""
    id = models.CharField(max_length=64, primary_key=True, default=_machine_id)
    name = models.CharField(max_length=255)
    inventory_number = models.CharField(max_length=64, unique=True)
    department = models.CharField(max_length=255)
    status = models.CharField(max_length=32, default='Active')
    last_maintenance = models.DateTimeField(null=True, blank=True)
    next_maintenance = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.inventory_number})"


class Fault(models.Model):
    """A malfunction reported during a dialysis session."""
    date = models.DateField()
    fault_type = models.CharField(max_length=128)
    description = models.TextField()
    downtime = models.CharField(max_length=64, blank=True)
    root_cause = models.TextField(blank=True)
    corrective_action = models.TextField(blank=True)
    status = models.CharField(max_length=32, default='Pending', db_index=True)
    patient = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='faults')
    machine = models.ForeignKey(Machine, on_delete=models.CASCADE, related_name='faults')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.fault_type} on {self.machine_id}"


class Intervention(models.Model):
    """A technician work order on a piece of equipment.

    When ``notifications`` names a recurring cycle and ``date_performed``
    is set, saving the intervention seeds the machine's maintenance
    control and schedule for that cycle (see
    :func:`equipment.services.maintenance.sync_from_intervention`).
    """
    NOTIFY_3MIN = '3min'
    NOTIFY_3MONTHS = '3months'
    NOTIFY_6MONTHS = '6months'
    NOTIFY_1YEAR = '1year'
    NOTIFICATION_CHOICES = [
        (NOTIFY_3MIN, '3 minutes'),
        (NOTIFY_3MONTHS, '3 months'),
        (NOTIFY_6MONTHS, '6 months'),
        (NOTIFY_1YEAR, '1 year'),
    ]
    STATUS_CHOICES = [
        ('Pending', 'Pending'),
        ('In Progress', 'In Progress'),
        ('Completed', 'Completed'),
    ]

    request_date = models.DateField()
    requested_intervention = models.CharField(max_length=255)
    arrival_at_workshop = models.DateField(null=True, blank=True)
    department = models.CharField(max_length=255)
    requested_by = models.CharField(max_length=255)
    return_to_service = models.DateField(null=True, blank=True)
    equipment_description = models.CharField(max_length=255)
    inventory_number = models.CharField(max_length=64, blank=True, db_index=True)
    problem_description = models.TextField(blank=True)
    intervention_type = models.CharField(max_length=64, default='Curative')
    date_performed = models.DateTimeField(null=True, blank=True)
    tasks_completed = models.TextField(blank=True)
    parts_replaced = models.CharField(max_length=255, blank=True)
    part_description = models.TextField(blank=True)
    price = models.CharField(max_length=64, blank=True)
    technician = models.CharField(max_length=255, blank=True)
    time_spent = models.CharField(max_length=64, blank=True)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default='Pending', db_index=True)
    technician_user = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='interventions'
    )
    notifications = models.CharField(max_length=16, choices=NOTIFICATION_CHOICES, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Intervention #{self.pk} ({self.requested_intervention})"


class MaintenanceControl(models.Model):
    """A recurring technical control with an enum cycle.

    ``next_control_date`` is ``control_date`` advanced by the cycle; the
    alert checks roll it forward each time a due control fires.
    """
    TYPE_3_MINUTES = '3_minutes'
    TYPE_3_MONTHS = '3_months'
    TYPE_6_MONTHS = '6_months'
    TYPE_1_YEAR = '1_year'
    TYPE_CHOICES = [
        (TYPE_3_MINUTES, '3 minutes'),
        (TYPE_3_MONTHS, '3 months'),
        (TYPE_6_MONTHS, '6 months'),
        (TYPE_1_YEAR, '1 year'),
    ]
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
    ]

    machine = models.ForeignKey(Machine, on_delete=models.CASCADE, related_name='maintenance_controls')
    technician = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='maintenance_controls'
    )
    control_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    control_date = models.DateTimeField()
    next_control_date = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='completed')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.control_type} control on {self.machine_id}"


class MaintenanceSchedule(models.Model):
    """Planned maintenance keyed by a free-text type label (e.g. '3-month')."""
    STATUS_PENDING = 'Pending'
    STATUS_COMPLETED = 'Completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    machine = models.ForeignKey(Machine, on_delete=models.CASCADE, related_name='maintenance_schedules')
    type = models.CharField(max_length=64)
    tasks = models.JSONField(default=list, blank=True)
    due_date = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.type} maintenance on {self.machine_id}"


class Alert(models.Model):
    """A notification shown to technicians until resolved.

    ``dedup_key`` identifies the obligation cycle an automatic alert was
    raised for.  Among active alerts it is unique, so a cycle can hold at
    most one active alert no matter how many checks race on it.  Alerts
    created by hand carry no key.
    """
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('critical', 'Critical'),
    ]
    STATUS_ACTIVE = 'active'
    STATUS_RESOLVED = 'resolved'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_RESOLVED, 'Resolved'),
    ]

    message = models.TextField()
    message_role = models.CharField(max_length=32, blank=True, default='')
    type = models.CharField(max_length=128)
    required_action = models.TextField()
    priority = models.CharField(max_length=16, choices=PRIORITY_CHOICES, db_index=True)
    timestamp = models.DateTimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    machine = models.ForeignKey(Machine, on_delete=models.CASCADE, related_name='alerts')
    dedup_key = models.CharField(max_length=191, null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['machine', 'status'], name='alert_machine_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['dedup_key'],
                condition=Q(status='active'),
                name='unique_active_alert_per_cycle',
            ),
        ]

    def __str__(self) -> str:
        return f"[{self.priority}] {self.message}"


class Invoice(models.Model):
    """Bill for a single dialysis session."""
    patient_name = models.CharField(max_length=255)
    medical_record_number = models.CharField(max_length=64)
    session_date = models.DateField()
    session_time_from = models.CharField(max_length=16, null=True, blank=True)
    session_time_to = models.CharField(max_length=16, null=True, blank=True)
    responsible_doctor = models.CharField(max_length=255)
    dialysis_fee = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    generator_dialyzer = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    med_consumables = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    nursing_care = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    admin_fees = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    payment_method = models.CharField(max_length=255, blank=True)
    payment_reference = models.CharField(max_length=255, blank=True)
    observations = models.TextField(blank=True)
    sub_total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_to_pay = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Invoice {self.pk} for {self.patient_name}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
