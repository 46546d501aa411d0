import pytest
from django.core.cache import cache
from django.utils import timezone

from equipment.models import Machine, User


@pytest.fixture(autouse=True)
def _clear_throttles():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def now():
    return timezone.now()


@pytest.fixture
def machine(db):
    return Machine.objects.create(id='M001', name='Fresenius 4008S', inventory_number='INV-001',
                                  department='Dialysis Unit A')


@pytest.fixture
def technician(db):
    return User.objects.create_user(username='tech@diacare.com', email='tech@diacare.com', password='password123',
                                    first_name='mehdi', role='technician', technician_id='T001')


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            import requests
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


@pytest.fixture
def sent_emails(settings, monkeypatch):
    """Configure the provider and capture every outgoing request."""
    settings.RESEND_API_KEY = 're_test'
    sent = []

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        return FakeResponse({'id': f'msg_{len(sent)}'})

    monkeypatch.setattr('equipment.services.notifications.requests.post', fake_post)
    return sent
