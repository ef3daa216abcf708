import pytest
from django.contrib.auth.hashers import check_password

from registry.models import AuditEvent, Hospital
from registry.tests.factories import SECRETS, make_department

pytestmark = pytest.mark.django_db

NEW_HOSPITAL = {
    'name': 'Northgate',
    'adminPassword': 'n-admin',
    'doctorPassword': 'n-doctor',
    'receptionistPassword': 'n-reception',
    'coordinates': [51.5, -0.12],
    'services': ['Maternity'],
}


def test_list_is_public_and_hides_secrets(api_client, hospital):
    r = api_client.get('/api/hospitals')
    assert r.status_code == 200
    assert r.data['count'] == 1
    item = r.data['data'][0]
    assert set(item) == {'id', 'name', 'coordinates', 'services', 'createdAt'}
    assert item['coordinates'] == [12.97, 77.59]


def test_secrets_stored_hashed(hospital):
    stored = Hospital.objects.get(pk=hospital.pk)
    assert stored.admin_password != SECRETS['adminPassword']
    assert check_password(SECRETS['adminPassword'], stored.admin_password)
    assert check_password(SECRETS['doctorPassword'], stored.doctor_password)
    assert check_password(SECRETS['receptionistPassword'], stored.receptionist_password)


def test_detail(api_client, hospital):
    r = api_client.get(f'/api/hospitals/{hospital.pk}')
    assert r.status_code == 200
    assert r.data['data']['name'] == 'City General'


@pytest.mark.parametrize('pk', ['999', 'abc'])
def test_detail_not_found(api_client, hospital, pk):
    r = api_client.get(f'/api/hospitals/{pk}')
    assert r.status_code == 404
    assert r.data['error']['code'] == 'hospital_not_found'


def test_admin_creates_hospital(admin_client):
    r = admin_client.post('/api/hospitals', NEW_HOSPITAL, format='json')
    assert r.status_code == 201
    assert r.data['data'] == {
        'id': r.data['data']['id'],
        'name': 'Northgate',
        'coordinates': [51.5, -0.12],
        'services': ['Maternity'],
    }
    created = Hospital.objects.get(name='Northgate')
    assert check_password('n-doctor', created.doctor_password)
    assert AuditEvent.objects.filter(action='hospital.create', object_id=created.pk).exists()


def test_create_requires_token(api_client):
    r = api_client.post('/api/hospitals', NEW_HOSPITAL, format='json')
    assert r.status_code == 401


def test_create_duplicate_name(admin_client, hospital):
    body = dict(NEW_HOSPITAL, name=hospital.name)
    r = admin_client.post('/api/hospitals', body, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'conflict'
    assert r.data['error']['message'] == 'Hospital with this name already exists'


@pytest.mark.parametrize('field, value', [
    ('coordinates', [1.0]),
    ('services', []),
    ('name', ''),
    ('adminPassword', ''),
])
def test_create_validation(admin_client, field, value):
    r = admin_client.post('/api/hospitals', dict(NEW_HOSPITAL, **{field: value}), format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'
    assert field in r.data['error']['fields']


def test_admin_updates_own_hospital(admin_client, hospital):
    r = admin_client.put(f'/api/hospitals/{hospital.pk}', {'services': ['Emergency', 'ICU']}, format='json')
    assert r.status_code == 200
    assert r.data['data']['services'] == ['Emergency', 'ICU']
    assert r.data['data']['name'] == 'City General'


def test_update_rehashes_secret(admin_client, hospital):
    r = admin_client.put(f'/api/hospitals/{hospital.pk}', {'doctorPassword': 'rotated'}, format='json')
    assert r.status_code == 200
    stored = Hospital.objects.get(pk=hospital.pk)
    assert check_password('rotated', stored.doctor_password)
    assert check_password(SECRETS['adminPassword'], stored.admin_password)


def test_update_other_hospital_forbidden(admin_client, other_hospital):
    r = admin_client.put(f'/api/hospitals/{other_hospital.pk}', {'services': ['X']}, format='json')
    assert r.status_code == 403
    assert r.data['error']['message'] == 'Not authorized to update this hospital'


def test_update_missing_hospital(admin_client):
    r = admin_client.put('/api/hospitals/999', {'services': ['X']}, format='json')
    assert r.status_code == 404


def test_rename_to_taken_name(admin_client, hospital, other_hospital):
    r = admin_client.put(f'/api/hospitals/{hospital.pk}', {'name': other_hospital.name}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'conflict'


def test_hospital_departments(api_client, hospital, other_hospital):
    make_department(hospital, 'Cardiology')
    make_department(hospital, 'Neurology')
    make_department(other_hospital, 'Oncology')
    r = api_client.get(f'/api/hospitals/{hospital.pk}/departments')
    assert r.status_code == 200
    assert [d['name'] for d in r.data['data']] == ['Cardiology', 'Neurology']


def test_non_object_body_rejected(admin_client):
    r = admin_client.post('/api/hospitals', [1, 2], format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'validation_error'
