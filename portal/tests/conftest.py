import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from portal.authentication import issue_token
from portal.models import DoctorReceptionAgent, DoctorRequest, RelationshipStatus, User

PASSWORD = 'Str0ng-Passw0rd!'


@pytest.fixture(autouse=True)
def _isolate(settings):
    # Throttle counters live in the cache.
    cache.clear()
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.RESEND_API_KEY = ''
    settings.ENV = 'dev'
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def _make(role=User.ROLE_PATIENT, verified=True, **kwargs):
        counter['n'] += 1
        n = counter['n']
        defaults = {
            'email': f'{role.lower().replace(" ", "-")}{n}@medflow.test',
            'first_name': f'{role.split()[0]}{n}',
            'last_name': 'Tester',
            'role': role,
            'is_verified': verified,
        }
        defaults.update(kwargs)
        password = defaults.pop('password', PASSWORD)
        return User.objects.create_user(password=password, **defaults)

    return _make


@pytest.fixture
def patient(make_user):
    return make_user(User.ROLE_PATIENT)


@pytest.fixture
def doctor(make_user):
    return make_user(User.ROLE_DOCTOR, speciality='Cardiology')


@pytest.fixture
def agent(make_user):
    return make_user(User.ROLE_RECEPTION_AGENT)


@pytest.fixture
def admin_user(make_user):
    return make_user(User.ROLE_ADMIN)


@pytest.fixture
def client_for():
    """Return an APIClient carrying a bearer token for ``user``."""
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')
        return client

    return _client


@pytest.fixture
def connect():
    """Store an accepted relationship directly, bypassing the request flow."""
    def _connect(doctor, patient=None, agent=None):
        if patient is not None:
            DoctorRequest.objects.create(doctor=doctor, patient=patient, status=RelationshipStatus.ACCEPTED)
        if agent is not None:
            DoctorReceptionAgent.objects.create(doctor=doctor, reception_agent=agent,
                                                status=RelationshipStatus.ACCEPTED)

    return _connect
