import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from registry.tests.factories import admin_payload, make_department, make_hospital, patient_payload, register


@pytest.fixture(autouse=True)
def fast_hasher(settings):
    # Salted like the default hasher, without the work factor
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def hospital(db):
    return make_hospital()


@pytest.fixture
def other_hospital(db):
    return make_hospital('Lakeside Clinic')


@pytest.fixture
def department(hospital):
    return make_department(hospital)


def _bearer_client(payload):
    client = APIClient()
    r = register(client, **payload)
    assert r.status_code == 201, r.data
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
    client.user_id = r.data['user']['id']
    return client


@pytest.fixture
def admin_client(hospital):
    return _bearer_client(admin_payload(hospital))


@pytest.fixture
def other_admin_client(other_hospital):
    return _bearer_client(admin_payload(other_hospital, email='admin@lakeside.org'))


@pytest.fixture
def patient_client(db):
    return _bearer_client(patient_payload())
