"""
Integration tests for the DiaCare API.

These tests exercise authentication, role based access, machine
deletion, alert resolution, invoices and the check endpoints through
Django REST framework's test client.
"""
from datetime import timedelta

from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import Alert, AuditEvent, Fault, Machine, MaintenanceControl, MaintenanceSchedule, User


class DiaCareAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username='admin@diacare.com', email='admin@diacare.com',
                                              password='password123', role='admin', first_name='lamya',
                                              admin_id='A001')
        self.tech = User.objects.create_user(username='tech@diacare.com', email='tech@diacare.com',
                                             password='password123', role='technician', first_name='mehdi',
                                             technician_id='T001')
        self.patient = User.objects.create_user(username='patient@diacare.com', email='patient@diacare.com',
                                                password='password123', role='patient', first_name='douha',
                                                patient_id='P001')
        self.machine = Machine.objects.create(id='M001', name='Fresenius 4008S', inventory_number='INV-001',
                                              department='Dialysis Unit A')

    # -- auth --------------------------------------------------------------

    def test_login_by_email_returns_tokens(self):
        r = self.client.post('/api/auth/login', {'email': 'tech@diacare.com', 'password': 'password123'},
                             format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['role'], 'technician')
        self.assertIn('jwt_access', r.data)
        self.assertTrue(AuditEvent.objects.filter(action='login', user=self.tech).exists())

        self.client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
        me = self.client.get('/api/auth/me')
        self.assertEqual(me.data['technicianId'], 'T001')

    def test_login_with_wrong_password_is_rejected(self):
        r = self.client.post('/api/auth/login', {'username': 'tech@diacare.com', 'password': 'nope'},
                             format='json')
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(r.data, {'error': 'Invalid credentials'})

    def test_anonymous_requests_are_refused(self):
        r = self.client.get('/api/machines')
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', r.data)

    # -- machines ----------------------------------------------------------

    def test_create_machine_generates_id_and_rejects_duplicate_inventory(self):
        self.client.force_authenticate(user=self.tech)
        r = self.client.post('/api/machines', {'name': 'Fresenius 6008', 'inventoryNumber': 'INV-002',
                                               'department': 'Dialysis Unit B'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertTrue(r.data['id'].startswith('MACH-'))

        dup = self.client.post('/api/machines', {'name': 'Other', 'inventoryNumber': 'INV-002',
                                                 'department': 'X'}, format='json')
        self.assertEqual(dup.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(dup.data['error'], 'A machine with this inventory number already exists')

    def test_validation_errors_are_flat(self):
        self.client.force_authenticate(user=self.tech)
        r = self.client.post('/api/machines', {'name': 'No inventory'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIsInstance(r.data['error'], str)

    def test_delete_machine_with_related_data_requires_force(self):
        Fault.objects.create(date=timezone.localdate(), fault_type='Pressure Alarm', description='TMP',
                             machine=self.machine, patient=self.patient)
        MaintenanceSchedule.objects.create(machine=self.machine, type='3-month', due_date=timezone.now())
        self.client.force_authenticate(user=self.admin)

        r = self.client.delete('/api/machines/M001')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(r.data['error'].startswith('Cannot delete machine "Fresenius 4008S"'))
        self.assertIn('1 fault(s)', r.data['error'])
        self.assertTrue(r.data['canForceDelete'])
        self.assertTrue(Machine.objects.filter(pk='M001').exists())

        r = self.client.delete('/api/machines/M001?force=true')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertTrue(r.data['forceDeleted'])
        self.assertEqual(r.data['deletedData']['faults'], 1)
        self.assertFalse(Machine.objects.filter(pk='M001').exists())
        self.assertFalse(Fault.objects.exists())
        self.assertTrue(AuditEvent.objects.filter(action='machine_delete', object_id='M001').exists())

    def test_delete_unused_machine_without_force(self):
        self.client.force_authenticate(user=self.admin)
        r = self.client.delete('/api/machines/M001')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['message'], 'Machine deleted successfully')

    def test_technician_cannot_delete_machine(self):
        self.client.force_authenticate(user=self.tech)
        r = self.client.delete('/api/machines/M001')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_machine_is_404(self):
        self.client.force_authenticate(user=self.tech)
        r = self.client.get('/api/machines/NOPE')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    # -- faults ------------------------------------------------------------

    def test_patient_reports_and_sees_only_own_faults(self):
        other = User.objects.create_user(username='p2', password='password123', role='patient', patient_id='P002')
        Fault.objects.create(date=timezone.localdate(), fault_type='Other', description='x',
                             machine=self.machine, patient=other)
        self.client.force_authenticate(user=self.patient)
        r = self.client.post('/api/faults', {'date': '2025-06-12', 'faultType': 'Hydraulic Alarm',
                                             'description': '<b>Internal</b> leakage', 'machineId': 'M001'},
                             format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['description'], 'Internal leakage')
        self.assertEqual(r.data['patientId'], 'P001')

        listed = self.client.get('/api/faults')
        self.assertEqual(len(listed.data), 1)

    # -- alerts ------------------------------------------------------------

    def test_alerts_filter_and_resolve(self):
        a1 = Alert.objects.create(machine=self.machine, message='Air leakage', message_role='technician',
                                  type='Blood Circuit Alarm', required_action='Check', priority='high',
                                  timestamp=timezone.now())
        Alert.objects.create(machine=self.machine, message='Old', type='Warning', required_action='-',
                             priority='low', timestamp=timezone.now(), status='resolved')
        self.client.force_authenticate(user=self.tech)

        r = self.client.get('/api/alerts?status=active&role=technician')
        self.assertEqual([a['id'] for a in r.data], [a1.id])
        self.assertEqual(r.data[0]['machine']['inventoryNumber'], 'INV-001')

        r = self.client.patch('/api/alerts', {'id': a1.id, 'status': 'resolved'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        a1.refresh_from_db()
        self.assertEqual(a1.status, 'resolved')
        self.assertTrue(AuditEvent.objects.filter(action='alert_resolve', object_id=str(a1.id)).exists())

        r = self.client.patch('/api/alerts', {'id': a1.id, 'status': 'active'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_manual_alert_creation(self):
        self.client.force_authenticate(user=self.tech)
        r = self.client.post('/api/alerts', {'message': 'Improve conductivity', 'type': 'Warning',
                                             'requiredAction': 'Adjust to 138-145 mmol/l', 'priority': 'medium',
                                             'machineId': 'M001'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['status'], 'active')
        self.assertFalse(r.data['email']['success'])

    def test_patient_cannot_read_alerts(self):
        self.client.force_authenticate(user=self.patient)
        self.assertEqual(self.client.get('/api/alerts').status_code, status.HTTP_403_FORBIDDEN)

    # -- checks ------------------------------------------------------------

    def test_three_minute_check_endpoint(self):
        MaintenanceControl.objects.create(machine=self.machine, control_type='3_minutes',
                                          control_date=timezone.now() - timedelta(minutes=4),
                                          next_control_date=timezone.now() - timedelta(seconds=1))
        self.client.force_authenticate(user=self.tech)
        r = self.client.post('/api/check-3min-controls')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data['alertsCreated'], 1)
        self.assertEqual(r.data['createdAlerts'][0]['priority'], 'critical')

        again = self.client.post('/api/check-3min-controls')
        self.assertEqual(again.data['alertsCreated'], 0)

    def test_schedule_check_endpoint(self):
        MaintenanceSchedule.objects.create(machine=self.machine, type='3-month',
                                           due_date=timezone.now() + timedelta(days=5))
        self.client.force_authenticate(user=self.tech)
        r = self.client.post('/api/maintenance-schedule/check-alerts')
        self.assertEqual(r.data['alertsCreated'], 1)
        self.assertIn('dans 5 jour(s)', r.data['createdAlerts'][0]['message'])

    @override_settings(CRON_SECRET_KEY='s3cret')
    def test_cron_endpoint_requires_key(self):
        self.assertEqual(self.client.get('/api/cron/check-reminders').status_code, 401)
        self.assertEqual(self.client.get('/api/cron/check-reminders?key=wrong').status_code, 401)
        r = self.client.get('/api/cron/check-reminders?key=s3cret')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertIn('notifications', r.data)

    def test_notifications_preview(self):
        MaintenanceControl.objects.create(machine=self.machine, technician=self.tech, control_type='3_months',
                                          control_date=timezone.now() - timedelta(days=92),
                                          next_control_date=timezone.now() - timedelta(days=1))
        self.client.force_authenticate(user=self.tech)
        r = self.client.get('/api/maintenance-notifications')
        self.assertEqual(r.data['overdueCount'], 1)
        self.assertTrue(r.data['overdue'][0]['isOverdue'])

    # -- invoices & dashboards --------------------------------------------

    def test_invoice_totals_are_computed(self):
        self.client.force_authenticate(user=self.admin)
        r = self.client.post('/api/taxe', {
            'patientName': 'douha', 'medicalRecordNumber': 'MR-1', 'sessionDate': '2025-06-20',
            'responsibleDoctor': 'Dr. Wilson', 'dialysisFee': '100.00', 'nursingCare': '50.00',
            'taxPercentage': '10',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['subTotal'], '150.00')
        self.assertEqual(r.data['taxAmount'], '15.00')
        self.assertEqual(r.data['totalToPay'], '165.00')

    def test_invoices_are_admin_only(self):
        self.client.force_authenticate(user=self.tech)
        self.assertEqual(self.client.get('/api/taxe').status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboards_by_role(self):
        self.client.force_authenticate(user=self.admin)
        r = self.client.get('/api/dashboard/admin')
        self.assertEqual(r.data['machines']['total'], 1)

        self.client.force_authenticate(user=self.patient)
        self.assertEqual(self.client.get('/api/dashboard/patient').status_code, 200)
        self.assertEqual(self.client.get('/api/dashboard/admin').status_code, 403)

        self.client.force_authenticate(user=self.tech)
        r = self.client.get('/api/dashboard/technician')
        self.assertEqual(r.data['activeAlerts'], 0)

    def test_admin_manages_users(self):
        self.client.force_authenticate(user=self.admin)
        r = self.client.post('/api/users', {'name': 'sara', 'email': 'Sara@DiaCare.com', 'password': 'secret123',
                                            'role': 'technician', 'technicianId': 'T002'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['email'], 'sara@diacare.com')
        dup = self.client.post('/api/users', {'name': 'x', 'email': 'sara@diacare.com', 'password': 'secret123',
                                              'role': 'patient'}, format='json')
        self.assertEqual(dup.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.force_authenticate(user=self.tech)
        self.assertEqual(self.client.get('/api/users').status_code, status.HTTP_403_FORBIDDEN)
