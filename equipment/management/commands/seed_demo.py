"""
Management command to populate the database with demo data.
"""
from datetime import date, timedelta

from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from equipment.models import Alert, Fault, Machine, MaintenanceSchedule, User

MACHINES = [
    ("M001", "Fresenius 4008S", "INV-001", "Dialysis Unit A"),
    ("M002", "Fresenius 6008", "INV-002", "Dialysis Unit B"),
]

FAULTS = [
    ("M001", "Hydraulic Alarm", "Internal leakage detected", "2 hours", "Worn-out seal", "Hydraulic seal replaced"),
    ("M002", "Pressure Alarm", "High transmembrane pressure detected", "1.5 hours", "Blocked dialyzer", "Dialyzer replaced"),
]

ALERTS = [
    ("M001", "Improve conductivity", "Warning", "Adjust to 138–145 mmol/l before starting", "medium"),
    ("M002", "Air leakage", "Blood Circuit Alarm", "Check bubble trap, detectors, and closure", "high"),
]


class Command(BaseCommand):
    help = 'Populate the database with demo users, machines, faults, alerts and schedules'

    @transaction.atomic
    def handle(self, *args, **options):
        call_command('ensure_test_users', stdout=self.stdout)
        patient = User.objects.get(patient_id='P001')
        now = timezone.now()

        for pk, name, inventory, department in MACHINES:
            Machine.objects.update_or_create(pk=pk, defaults={
                'name': name,
                'inventory_number': inventory,
                'department': department,
                'status': 'Active',
                'last_maintenance': now - timedelta(days=60),
                'next_maintenance': now + timedelta(days=30),
            })
        self.stdout.write(f"machines: {len(MACHINES)}")

        for i, (machine_id, fault_type, description, downtime, cause, action) in enumerate(FAULTS):
            Fault.objects.get_or_create(
                machine_id=machine_id, fault_type=fault_type,
                defaults={
                    'date': date.today() - timedelta(days=10 + i),
                    'description': description,
                    'downtime': downtime,
                    'root_cause': cause,
                    'corrective_action': action,
                    'status': 'Resolved',
                    'patient': patient,
                },
            )

        for machine_id, message, kind, action, priority in ALERTS:
            Alert.objects.get_or_create(
                machine_id=machine_id, message=message,
                defaults={'type': kind, 'required_action': action, 'priority': priority,
                          'timestamp': now, 'message_role': 'technician'},
            )

        for machine_id, kind, days in (("M001", "3-month", 5), ("M002", "6-month", 45)):
            MaintenanceSchedule.objects.get_or_create(
                machine_id=machine_id, type=kind,
                defaults={
                    'tasks': ["Contrôle de fonctionnement", "Maintenance préventive"],
                    'due_date': now + timedelta(days=days),
                },
            )
        self.stdout.write(self.style.SUCCESS('Demo data ready.'))
