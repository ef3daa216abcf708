import re
import time

import pytest
from django.contrib.auth.hashers import check_password

from registry.exceptions import DuplicateEmail, InternalError
from registry.models import EMAIL_PATTERN, Hospital, Role, User
from registry.services.registration import (
    DoctorRegistration,
    IdentityRegistrar,
    InventorymanRegistration,
    PatientRegistration,
)
from registry.tests.factories import (
    SECRETS,
    admin_payload,
    doctor_payload,
    make_department,
    make_hospital,
    patient_payload,
    register,
)

pytestmark = pytest.mark.django_db


def error_code(resp):
    return resp.data['error']['code']


def test_patient_registration_returns_token_and_identity(api_client):
    r = register(api_client, **patient_payload())
    assert r.status_code == 201
    assert r.data['ok'] is True
    assert r.data['token']
    assert set(r.data['user']) == {'id', 'name', 'email', 'role'}
    assert r.data['user']['role'] == 'Patient'

    user = User.objects.get(pk=r.data['user']['id'])
    assert user.password != 'hunter22'
    assert check_password('hunter22', user.password)
    assert (user.age, user.contact, user.blood_type) == (34, '555-0101', 'O+')
    assert user.hospital_id is None


def test_inventoryman_needs_no_hospital(api_client):
    r = register(api_client, name='Ivan', email='ivan@example.com', password='hunter22', role='Inventoryman')
    assert r.status_code == 201
    assert User.objects.get(email='ivan@example.com').role == Role.INVENTORYMAN


def test_admin_registers_with_hospital_secret(api_client, hospital):
    r = register(api_client, **admin_payload(hospital))
    assert r.status_code == 201
    assert User.objects.get(pk=r.data['user']['id']).hospital_id == hospital.pk


def test_receptionist_checked_against_own_role_secret(api_client, hospital):
    payload = {
        'name': 'Rita', 'email': 'rita@example.com', 'password': 'hunter22', 'role': 'Receptionist',
        'hospitalName': hospital.name, 'hospitalReceptionistpass': SECRETS['adminPassword'],
    }
    r = register(api_client, **payload)
    assert r.status_code == 401
    assert error_code(r) == 'invalid_hospital_password'
    assert r.data['error']['message'] == 'Invalid receptionist password for this hospital'

    payload['hospitalReceptionistpass'] = SECRETS['receptionistPassword']
    assert register(api_client, **payload).status_code == 201


def test_wrong_admin_secret_rejected(api_client, hospital):
    payload = admin_payload(hospital)
    payload['hospitalAdminpass'] = 'nope'
    r = register(api_client, **payload)
    assert r.status_code == 401
    assert r.data['error']['message'] == 'Invalid admin password for this hospital'
    assert not User.objects.filter(email=payload['email']).exists()


def test_missing_role_secret_is_a_mismatch(api_client, hospital):
    payload = admin_payload(hospital)
    del payload['hospitalAdminpass']
    r = register(api_client, **payload)
    assert r.status_code == 401
    assert error_code(r) == 'invalid_hospital_password'


def test_unknown_hospital(api_client, hospital):
    payload = admin_payload(hospital)
    payload['hospitalName'] = 'Nowhere General'
    r = register(api_client, **payload)
    assert r.status_code == 404
    assert error_code(r) == 'hospital_not_found'


def test_doctor_registration(api_client, hospital, department):
    r = register(api_client, **doctor_payload(hospital, department))
    assert r.status_code == 201
    doc = User.objects.get(pk=r.data['user']['id'])
    assert doc.department_id == department.pk
    assert doc.hospital_id == hospital.pk
    assert doc.working_days == ['Monday', 'Wednesday']


def test_doctor_missing_fields(api_client, hospital, department):
    payload = doctor_payload(hospital, department)
    del payload['workingdays']
    r = register(api_client, **payload)
    assert r.status_code == 400
    assert error_code(r) == 'missing_doctor_fields'
    assert 'workingdays' in r.data['error']['fields']


def test_doctor_department_from_other_hospital(api_client, hospital, other_hospital):
    foreign = make_department(other_hospital, name='Oncology')
    r = register(api_client, **doctor_payload(hospital, foreign))
    assert r.status_code == 404
    assert error_code(r) == 'department_not_found'


def test_hospital_secret_checked_before_doctor_fields(api_client, hospital, department):
    payload = doctor_payload(hospital, department)
    payload['hospitalDoctorpass'] = 'wrong'
    del payload['specialty']
    r = register(api_client, **payload)
    assert error_code(r) == 'invalid_hospital_password'


def test_patient_missing_fields(api_client):
    payload = patient_payload()
    del payload['age']
    r = register(api_client, **payload)
    assert r.status_code == 400
    assert error_code(r) == 'missing_patient_fields'


def test_invalid_role(api_client):
    payload = patient_payload()
    payload['role'] = 'Janitor'
    r = register(api_client, **payload)
    assert r.status_code == 400
    assert error_code(r) == 'invalid_role'


@pytest.mark.parametrize('field, value', [('email', 'not-an-email'), ('password', '123'), ('name', '')])
def test_base_field_validation(api_client, field, value):
    payload = patient_payload()
    payload[field] = value
    r = register(api_client, **payload)
    assert r.status_code == 400
    assert error_code(r) == 'validation_error'
    assert field in r.data['error']['fields']


def test_duplicate_email(api_client):
    assert register(api_client, **patient_payload()).status_code == 201
    r = register(api_client, **patient_payload())
    assert r.status_code == 400
    assert error_code(r) == 'duplicate_email'


def test_duplicate_email_domain_case_insensitive(api_client):
    assert register(api_client, **patient_payload('pat@Example.COM')).status_code == 201
    r = register(api_client, **patient_payload('pat@example.com'))
    assert error_code(r) == 'duplicate_email'


def test_duplicate_email_reported_before_role(api_client):
    register(api_client, **patient_payload())
    payload = patient_payload()
    payload['role'] = 'Janitor'
    assert error_code(register(api_client, **payload)) == 'duplicate_email'


def test_concurrent_duplicate_surfaces_as_duplicate_email(monkeypatch):
    registrar = IdentityRegistrar.from_settings()
    registrar.register(patient_payload())
    # Simulate losing the race: the pre-check sees no row, the insert hits the unique index
    monkeypatch.setattr(registrar.users, 'exists', lambda **filters: False)
    with pytest.raises(DuplicateEmail):
        registrar.register(patient_payload())
    assert User.objects.filter(email='pat@example.com').count() == 1


def test_token_failure_rolls_back_insert(monkeypatch):
    registrar = IdentityRegistrar.from_settings()

    def broken_issue(*args, **kwargs):
        raise InternalError('Could not issue session token')

    monkeypatch.setattr(registrar.issuer, 'issue', broken_issue)
    with pytest.raises(InternalError):
        registrar.register(patient_payload())
    assert not User.objects.filter(email='pat@example.com').exists()


def test_build_registration_variants(hospital, department):
    registrar = IdentityRegistrar.from_settings()

    doctor = registrar.build_registration(doctor_payload(hospital, department))
    assert isinstance(doctor, DoctorRegistration)
    assert doctor.department == department
    assert doctor.working_days == ('Monday', 'Wednesday')

    patient = registrar.build_registration(patient_payload())
    assert isinstance(patient, PatientRegistration)
    assert 'hunter22' not in repr(patient)

    stock = registrar.build_registration(
        {'name': 'Ivan', 'email': 'ivan@example.com', 'password': 'hunter22', 'role': 'Inventoryman'}
    )
    assert isinstance(stock, InventorymanRegistration)
    assert stock.record_fields() == {'name': 'Ivan', 'email': 'ivan@example.com', 'role': 'Inventoryman'}


def test_prepare_record_hashes_password():
    registrar = IdentityRegistrar.from_settings()
    variant = registrar.build_registration(patient_payload())
    record = registrar.prepare_record(variant)
    assert record['password'] != 'hunter22'
    assert check_password('hunter22', record['password'])
    assert record['role'] == 'Patient'


def test_registration_is_audited(api_client):
    from registry.models import AuditEvent

    r = register(api_client, **patient_payload())
    event = AuditEvent.objects.get(action='register')
    assert event.user_id == r.data['user']['id']
    assert 'hunter22' not in str(event.detail)


@pytest.mark.parametrize('email', [
    'a' * 200 + '!',
    'a' * 60 + '@' + 'b' * 60 + '!',
    'a.' * 60 + '@x',
    'x@' + 'b-' * 100 + '!',
])
def test_long_malformed_email_rejected_quickly(api_client, email):
    payload = patient_payload()
    payload['email'] = email
    started = time.monotonic()
    r = register(api_client, **payload)
    assert time.monotonic() - started < 2
    assert r.status_code == 400
    assert 'email' in r.data['error']['fields']


@pytest.mark.parametrize('email', ['first.last@mail.example.co.uk', 'a-b_c@d-e.org', 'x@y.io'])
def test_email_pattern_accepts_common_addresses(email):
    assert re.match(EMAIL_PATTERN, email)


def test_hospital_name_with_ampersand(api_client):
    hospital = make_hospital('Saint Mary & Joseph')
    assert Hospital.objects.get(pk=hospital.pk).name == 'Saint Mary & Joseph'
    r = register(api_client, **admin_payload(hospital))
    assert r.status_code == 201
    assert User.objects.get(pk=r.data['user']['id']).hospital_id == hospital.pk


def test_names_keep_special_characters_and_lose_tags(api_client):
    payload = patient_payload()
    payload['name'] = '<b>Tom & Jerry</b>'
    r = register(api_client, **payload)
    assert r.status_code == 201
    assert r.data['user']['name'] == 'Tom & Jerry'


def test_escaped_markup_in_name_rejected(api_client):
    payload = patient_payload()
    payload['name'] = '&lt;script&gt;alert(1)&lt;/script&gt;'
    r = register(api_client, **payload)
    assert r.status_code == 400
    assert 'name' in r.data['error']['fields']
