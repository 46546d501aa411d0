from datetime import datetime, timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from equipment.models import Alert, Intervention, Machine, MaintenanceControl, MaintenanceSchedule
from equipment.services import checks
from equipment.services.maintenance import create_maintenance_control, sync_from_intervention

pytestmark = pytest.mark.django_db


@pytest.fixture
def client(technician):
    c = APIClient()
    c.force_authenticate(user=technician)
    return c


def _payload(**extra):
    data = {
        'requestDate': '2025-01-14',
        'requestedIntervention': 'Routine maintenance check',
        'department': 'Dialysis Unit A',
        'requestedBy': 'Dr. Wilson',
        'equipmentDescription': 'Fresenius 4008S',
        'inventoryNumber': 'INV-001',
        'status': 'Completed',
        'technicianId': 'T001',
    }
    data.update(extra)
    return data


def test_intervention_with_cycle_seeds_one_control_and_one_schedule(client, machine):
    performed = timezone.make_aware(datetime(2025, 1, 15, 9, 30))
    r = client.post('/api/interventions', _payload(notifications='3months', datePerformed=performed.isoformat()),
                    format='json')
    assert r.status_code == 201
    assert r.data['technicianUser']['technicianId'] == 'T001'

    control = MaintenanceControl.objects.get(machine=machine)
    schedule = MaintenanceSchedule.objects.get(machine=machine)
    assert control.control_type == '3_months'
    assert schedule.type == '3-month'
    assert schedule.status == 'Pending'
    assert control.control_date == performed
    assert control.next_control_date == schedule.due_date
    due = timezone.localtime(control.next_control_date)
    assert (due.date(), due.hour, due.minute) == (datetime(2025, 4, 15).date(), 9, 30)
    assert control.technician.technician_id == 'T001'

    machine.refresh_from_db()
    assert machine.last_maintenance == performed
    assert machine.next_maintenance == control.next_control_date

    created = Alert.objects.get(type='intervention_created')
    assert created.priority == 'medium'
    assert created.message == f"Nouvelle intervention #{r.data['id']}: Routine maintenance check. Notifications: 3months"


def test_second_intervention_updates_instead_of_duplicating(client, machine):
    first = timezone.make_aware(datetime(2025, 1, 15, 9, 0))
    second = first + timedelta(days=20)
    client.post('/api/interventions', _payload(notifications='3months', datePerformed=first.isoformat()),
                format='json')
    r = client.post('/api/interventions', _payload(notifications='3months', datePerformed=second.isoformat()),
                    format='json')
    assert r.status_code == 201

    control = MaintenanceControl.objects.get(machine=machine, control_type='3_months')
    assert MaintenanceSchedule.objects.filter(machine=machine, type='3-month').count() == 1
    assert control.control_date == second
    assert control.notes.startswith('Mise à jour automatique après intervention')


def test_three_minute_intervention_alert_is_critical(client, machine):
    r = client.post('/api/interventions',
                    _payload(notifications='3min', datePerformed=timezone.now().isoformat()), format='json')
    assert r.status_code == 201
    assert Alert.objects.get(type='intervention_created').priority == 'critical'
    control = MaintenanceControl.objects.get(machine=machine)
    assert control.control_type == '3_minutes'


def test_intervention_without_cycle_has_no_side_effects(client, machine):
    r = client.post('/api/interventions', _payload(datePerformed=timezone.now().isoformat()), format='json')
    assert r.status_code == 201
    assert not MaintenanceControl.objects.exists()
    assert not Alert.objects.exists()


def test_intervention_for_unknown_machine_still_saves(client, machine):
    r = client.post('/api/interventions',
                    _payload(inventoryNumber='INV-404', notifications='6months',
                             datePerformed=timezone.now().isoformat()), format='json')
    assert r.status_code == 201
    assert Intervention.objects.filter(pk=r.data['id']).exists()
    assert not MaintenanceSchedule.objects.exists()


def test_sync_failure_does_not_undo_the_intervention(client, machine, monkeypatch):
    def broken(intervention):
        raise RuntimeError('schedule table locked')

    monkeypatch.setattr('equipment.services.maintenance.sync_from_intervention', broken)
    r = client.post('/api/interventions',
                    _payload(notifications='1year', datePerformed=timezone.now().isoformat()), format='json')
    assert r.status_code == 201
    assert Intervention.objects.count() == 1


def test_patching_date_performed_resyncs(client, machine):
    r = client.post('/api/interventions', _payload(status='In Progress', notifications='6months'), format='json')
    assert not MaintenanceControl.objects.exists()
    performed = timezone.make_aware(datetime(2025, 2, 1, 8, 0))
    r = client.patch(f"/api/interventions/{r.data['id']}", {'datePerformed': performed.isoformat()},
                     format='json')
    assert r.status_code == 200
    control = MaintenanceControl.objects.get(machine=machine)
    assert timezone.localtime(control.next_control_date).date() == datetime(2025, 8, 1).date()


def test_unrelated_patch_keeps_advanced_due_dates(client, machine):
    performed = timezone.now() - timedelta(days=100)
    r = client.post('/api/interventions', _payload(notifications='3months', datePerformed=performed.isoformat()),
                    format='json')
    checks.check_controls()
    checks.check_schedules()
    control = MaintenanceControl.objects.get(machine=machine)
    schedule = MaintenanceSchedule.objects.get(machine=machine)
    assert control.next_control_date > timezone.now()
    assert schedule.due_date > timezone.now()

    r = client.patch(f"/api/interventions/{r.data['id']}", {'price': '100'}, format='json')
    assert r.status_code == 200
    assert r.data['price'] == '100'
    assert MaintenanceControl.objects.get(pk=control.pk).next_control_date == control.next_control_date
    assert MaintenanceSchedule.objects.get(pk=schedule.pk).due_date == schedule.due_date


def test_sync_returns_none_without_cycle(machine):
    intervention = Intervention.objects.create(
        request_date=timezone.localdate(), requested_intervention='x', department='A', requested_by='B',
        equipment_description='C', inventory_number='INV-001', date_performed=timezone.now(),
    )
    assert sync_from_intervention(intervention) is None


def test_create_control_emails_technician_and_flags_overdue(machine, technician, sent_emails):
    control_date = timezone.now() - timedelta(days=200)
    control, delivery = create_maintenance_control(machine=machine, technician=technician,
                                                   control_type='3_months', control_date=control_date)
    assert delivery.success
    assert sent_emails[0]['json']['to'] == ['tech@diacare.com']
    assert control.next_control_date < timezone.now()
    alert = Alert.objects.get()
    assert alert.type == 'maintenance_control'
    assert alert.priority == 'high'


def test_control_endpoint_validates_type_and_technician(client, machine):
    now = timezone.now().isoformat()
    r = client.post('/api/maintenance-controls', {'machineId': 'M001', 'technicianId': 'T001',
                                                  'controlType': 'weekly', 'controlDate': now}, format='json')
    assert r.status_code == 400
    r = client.post('/api/maintenance-controls', {'machineId': 'M001', 'technicianId': 'T999',
                                                  'controlType': '6_months', 'controlDate': now}, format='json')
    assert r.status_code == 404
    assert r.data == {'error': 'Technician not found'}
    r = client.post('/api/maintenance-controls', {'machineId': 'M001', 'technicianId': 'T001',
                                                  'controlType': '6_months', 'controlDate': now}, format='json')
    assert r.status_code == 201
    assert r.data['isOverdue'] is False
    assert r.data['email']['success'] is False


def test_schedule_crud(client, machine):
    due = (timezone.now() + timedelta(days=10)).isoformat()
    r = client.post('/api/maintenance', {'machineId': 'M001', 'type': '3-month', 'dueDate': due,
                                         'tasks': ['Filtre', '<i></i>']}, format='json')
    assert r.status_code == 201
    assert r.data['tasks'] == ['Filtre']
    r = client.patch('/api/maintenance', {'id': r.data['id'], 'status': 'Completed'}, format='json')
    assert r.data['status'] == 'Completed'
    assert r.data['completedAt'] is not None
    assert Machine.objects.count() == 1
