"""
Public registration.

Registration input is turned into exactly one per-role variant
(:class:`AdminRegistration`, :class:`DoctorRegistration`, ...).  A variant
can only be built once every field its role needs has been validated
and, for hospital staff, once the hospital (and a doctor's department)
has been resolved and the hospital's role secret verified.  The
registrar then hashes the password, inserts the user and issues a
session token inside one transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from django.db import transaction

from registry.exceptions import (
    ConflictError,
    DepartmentNotFound,
    DuplicateEmail,
    HospitalNotFound,
    InvalidHospitalPassword,
    InvalidRole,
    MissingDoctorFields,
    MissingPatientFields,
    ValidationError,
)
from registry.models import HOSPITAL_ROLES, Department, Hospital, Role, User
from registry.projections import IdentityProjection
from registry.serializers.registration import (
    DoctorFieldsSerializer,
    PatientFieldsSerializer,
    RegistrationSerializer,
)
from registry.services.audit import log_action
from registry.services.credentials import CredentialHasher
from registry.services.store import RecordStore
from registry.services.tokens import SessionTokenIssuer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Per-role registration variants
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class Registration:
    name: str
    email: str
    password: str = field(repr=False)

    role: ClassVar[str] = ''

    def record_fields(self) -> dict:
        return {'name': self.name, 'email': self.email, 'role': self.role}


@dataclass(frozen=True)
class HospitalStaffRegistration(Registration):
    hospital: Hospital

    def record_fields(self) -> dict:
        return {**super().record_fields(), 'hospital': self.hospital}


@dataclass(frozen=True)
class AdminRegistration(HospitalStaffRegistration):
    role: ClassVar[str] = Role.ADMIN.value


@dataclass(frozen=True)
class ReceptionistRegistration(HospitalStaffRegistration):
    role: ClassVar[str] = Role.RECEPTIONIST.value


@dataclass(frozen=True)
class DoctorRegistration(HospitalStaffRegistration):
    department: Department
    specialty: str
    working_days: tuple
    description: str = ''

    role: ClassVar[str] = Role.DOCTOR.value

    def record_fields(self) -> dict:
        return {
            **super().record_fields(),
            'department': self.department,
            'specialty': self.specialty,
            'working_days': list(self.working_days),
            'description': self.description,
        }


@dataclass(frozen=True)
class PatientRegistration(Registration):
    age: int
    contact: str
    blood_type: str = ''

    role: ClassVar[str] = Role.PATIENT.value

    def record_fields(self) -> dict:
        return {
            **super().record_fields(),
            'age': self.age,
            'contact': self.contact,
            'blood_type': self.blood_type,
        }


@dataclass(frozen=True)
class InventorymanRegistration(Registration):
    role: ClassVar[str] = Role.INVENTORYMAN.value


STAFF_VARIANTS = {
    Role.ADMIN.value: AdminRegistration,
    Role.RECEPTIONIST.value: ReceptionistRegistration,
}


@dataclass(frozen=True)
class RegistrationResult:
    user: IdentityProjection
    token: str = field(repr=False)

    def as_dict(self) -> dict:
        return {'token': self.token, 'user': self.user.as_dict()}


def _validated(serializer_class, data, error_class, message=None) -> dict:
    s = serializer_class(data=data)
    if not s.is_valid():
        raise error_class(message, fields=s.errors)
    return s.validated_data


def normalize_email(email: str) -> str:
    return User.objects.normalize_email(email.strip())


# ---------------------------------------------------------------------
# Registrar
# ---------------------------------------------------------------------
class IdentityRegistrar:

    def __init__(self, *, users: RecordStore, hospitals: RecordStore, departments: RecordStore,
                 hasher: CredentialHasher, issuer: SessionTokenIssuer):
        self.users = users
        self.hospitals = hospitals
        self.departments = departments
        self.hasher = hasher
        self.issuer = issuer

    @classmethod
    def from_settings(cls) -> 'IdentityRegistrar':
        return cls(
            users=RecordStore(User),
            hospitals=RecordStore(Hospital),
            departments=RecordStore(Department),
            hasher=CredentialHasher(),
            issuer=SessionTokenIssuer.from_settings(),
        )

    def register(self, payload: Mapping[str, Any]) -> RegistrationResult:
        email = payload.get('email')
        if isinstance(email, str) and email.strip() and self.users.exists(email=normalize_email(email)):
            raise DuplicateEmail()

        registration = self.build_registration(payload)

        with transaction.atomic():
            user = self._insert(self.prepare_record(registration))
            # Issued inside the transaction so a signing failure rolls the insert back
            token = self.issuer.issue(user.pk, user.role)

        logger.info('Registered user %s as %s', user.pk, user.role)
        log_action(user_id=user.pk, action='register', object_type='user', object_id=user.pk,
                   detail={'role': user.role, 'hospitalId': user.hospital_id})
        return RegistrationResult(user=IdentityProjection.from_user(user), token=token)

    def build_registration(self, payload: Mapping[str, Any]) -> Registration:
        """Validate ``payload`` and return the variant for its role."""
        s = RegistrationSerializer(data=payload)
        if not s.is_valid():
            if 'role' in s.errors:
                raise InvalidRole(fields=s.errors)
            raise ValidationError('Invalid registration details', fields=s.errors)
        base = dict(s.validated_data)
        role = base.pop('role')
        base['email'] = normalize_email(base['email'])

        if role in HOSPITAL_ROLES:
            hospital = self._verify_hospital_access(role, payload)
            if role == Role.DOCTOR.value:
                return self._doctor_registration(base, hospital, payload)
            return STAFF_VARIANTS[role](**base, hospital=hospital)

        if role == Role.PATIENT.value:
            patient = _validated(PatientFieldsSerializer, payload, MissingPatientFields)
            return PatientRegistration(
                **base,
                age=patient['age'],
                contact=patient['contact'],
                blood_type=patient.get('bloodtype', ''),
            )

        return InventorymanRegistration(**base)

    def prepare_record(self, registration: Registration) -> dict:
        """Turn a variant into store fields, replacing the password by its hash."""
        return {**registration.record_fields(), 'password': self.hasher.hash(registration.password)}

    def _verify_hospital_access(self, role: str, payload: Mapping[str, Any]) -> Hospital:
        hospital_name = payload.get('hospitalName')
        hospital = None
        if isinstance(hospital_name, str) and hospital_name.strip():
            hospital = self.hospitals.find_one(name=hospital_name.strip())
        if hospital is None:
            raise HospitalNotFound()

        secret = payload.get(f'hospital{role}pass')
        if not isinstance(secret, str) or not self.hasher.verify(secret, hospital.secret_for(role)):
            logger.info('Rejected %s registration for hospital %s: bad role secret', role, hospital.pk)
            raise InvalidHospitalPassword.for_role(role)
        return hospital

    def _doctor_registration(self, base: dict, hospital: Hospital, payload: Mapping[str, Any]) -> DoctorRegistration:
        doctor = _validated(DoctorFieldsSerializer, payload, MissingDoctorFields)
        # Scoped to the resolved hospital: a department id from another
        # hospital resolves to nothing.
        department = self.departments.find_one(pk=doctor['departmentId'], hospital=hospital)
        if department is None:
            raise DepartmentNotFound()
        return DoctorRegistration(
            **base,
            hospital=hospital,
            department=department,
            specialty=doctor['specialty'],
            working_days=tuple(doctor['workingdays']),
            description=doctor.get('description', ''),
        )

    def _insert(self, record: dict) -> User:
        try:
            return self.users.insert(**record)
        except ConflictError as exc:
            # Lost a race with a concurrent registration for the same email
            raise DuplicateEmail() from exc
