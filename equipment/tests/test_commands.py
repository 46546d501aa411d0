from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from equipment.models import Alert, Machine, MaintenanceControl, MaintenanceSchedule, User

pytestmark = pytest.mark.django_db


def test_check_controls_three_minutes_only(machine):
    MaintenanceControl.objects.create(machine=machine, control_type='3_minutes', control_date=timezone.now(),
                                      next_control_date=timezone.now() - timedelta(seconds=5))
    MaintenanceControl.objects.create(machine=machine, control_type='3_months', control_date=timezone.now(),
                                      next_control_date=timezone.now() + timedelta(days=2))
    out = StringIO()
    call_command('check_controls', '--three-minutes', stdout=out)
    assert Alert.objects.count() == 1
    assert 'controls: 1 checked, 1 alerts created' in out.getvalue()


def test_check_schedules_command(machine):
    MaintenanceSchedule.objects.create(machine=machine, type='1-year', due_date=timezone.now() + timedelta(days=45))
    out = StringIO()
    call_command('check_schedules', stdout=out)
    assert Alert.objects.get().priority == 'low'
    assert '[low] Maintenance 1-year - Fresenius 4008S dans 45 jour(s)' in out.getvalue()


def test_seed_demo_is_idempotent():
    call_command('seed_demo', stdout=StringIO())
    call_command('seed_demo', stdout=StringIO())
    assert User.objects.filter(role='technician', technician_id='T001').count() == 1
    assert Machine.objects.count() == 2
    assert Alert.objects.count() == 2
    assert User.objects.get(technician_id='T001').check_password('password123')
