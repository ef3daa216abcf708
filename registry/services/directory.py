"""
Hospital and department directory.

Reads are public.  Writes need an Admin identity, and updates are
limited to the Admin's own hospital.  Hospital role secrets are hashed
before they are stored and never leave this module in clear.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from registry.exceptions import (
    ConflictError,
    DepartmentNotFound,
    Forbidden,
    HospitalNotFound,
    ValidationError,
)
from registry.models import Department, Hospital, Role, User
from registry.serializers.directory import DepartmentSerializer, HospitalSerializer
from registry.services.access import AccessGuard, SessionIdentity
from registry.services.audit import log_action
from registry.services.credentials import CredentialHasher
from registry.services.store import RecordStore

logger = logging.getLogger(__name__)

ADMIN_ONLY = (Role.ADMIN.value,)

# wire name -> model field
SECRET_INPUTS = {
    'adminPassword': 'admin_password',
    'doctorPassword': 'doctor_password',
    'receptionistPassword': 'receptionist_password',
}

HOSPITAL_EXISTS = 'Hospital with this name already exists'
DEPARTMENT_EXISTS = 'Department with this name already exists in this hospital'


def _validated(serializer: Any) -> dict:
    if not serializer.is_valid():
        raise ValidationError(fields=serializer.errors)
    return dict(serializer.validated_data)


class Directory:

    def __init__(self, *, hospitals: RecordStore, departments: RecordStore, users: RecordStore,
                 hasher: CredentialHasher):
        self.hospitals = hospitals
        self.departments = departments
        self.users = users
        self.hasher = hasher

    @classmethod
    def from_settings(cls) -> 'Directory':
        return cls(
            hospitals=RecordStore(Hospital),
            departments=RecordStore(Department),
            users=RecordStore(User),
            hasher=CredentialHasher(),
        )

    # -- hospitals ---------------------------------------------------------
    def list_hospitals(self) -> list[Hospital]:
        return self.hospitals.find_many()

    def get_hospital(self, pk) -> Hospital:
        hospital = self.hospitals.find_by_id(pk)
        if hospital is None:
            raise HospitalNotFound()
        return hospital

    def create_hospital(self, identity: SessionIdentity, data: Mapping[str, Any]) -> Hospital:
        AccessGuard.check_roles(identity, ADMIN_ONLY)
        hospital = self.add_hospital(data)
        log_action(user_id=identity.id, action='hospital.create', object_type='hospital',
                   object_id=hospital.pk, detail={'name': hospital.name})
        return hospital

    def add_hospital(self, data: Mapping[str, Any]) -> Hospital:
        """Create a hospital without an acting identity (bootstrap path)."""
        vd = _validated(HospitalSerializer(data=data))
        if self.hospitals.exists(name=vd['name']):
            raise ConflictError(HOSPITAL_EXISTS)
        record = {
            'name': vd['name'],
            'coordinates': vd['coordinates'],
            'services': vd['services'],
        }
        for wire, field in SECRET_INPUTS.items():
            record[field] = self.hasher.hash(vd[wire])
        try:
            hospital = self.hospitals.insert(**record)
        except ConflictError as exc:
            raise ConflictError(HOSPITAL_EXISTS) from exc
        logger.info('Created hospital %s', hospital.pk)
        return hospital

    def update_hospital(self, identity: SessionIdentity, pk, data: Mapping[str, Any]) -> Hospital:
        AccessGuard.check_roles(identity, ADMIN_ONLY)
        hospital = self.get_hospital(pk)
        AccessGuard.ensure_same_hospital(identity, hospital.pk, 'update this hospital')

        vd = _validated(HospitalSerializer(data=data, partial=True))
        patch = {k: vd[k] for k in ('name', 'coordinates', 'services') if k in vd}
        for wire, field in SECRET_INPUTS.items():
            if wire in vd:
                patch[field] = self.hasher.hash(vd[wire])

        if 'name' in patch:
            other = self.hospitals.find_one(name=patch['name'])
            if other is not None and other.pk != hospital.pk:
                raise ConflictError(HOSPITAL_EXISTS)
        try:
            hospital = self.hospitals.update_by_id(hospital.pk, patch)
        except ConflictError as exc:
            raise ConflictError(HOSPITAL_EXISTS) from exc

        logger.info('Hospital %s updated by user %s', hospital.pk, identity.id)
        log_action(user_id=identity.id, action='hospital.update', object_type='hospital',
                   object_id=hospital.pk, detail={'fields': sorted(vd)})
        return hospital

    # -- departments -------------------------------------------------------
    def list_departments(self, hospital_id: Optional[Any] = None) -> list[Department]:
        if hospital_id in (None, ''):
            return self.departments.find_many()
        return self.departments.find_many(hospital_id=hospital_id)

    def get_department(self, pk) -> Department:
        department = self.departments.find_by_id(pk)
        if department is None:
            raise DepartmentNotFound('Department not found')
        return department

    def create_department(self, identity: SessionIdentity, data: Mapping[str, Any]) -> Department:
        AccessGuard.check_roles(identity, ADMIN_ONLY)
        if identity.hospital_id is None:
            raise Forbidden('Admin is not bound to a hospital')

        vd = _validated(DepartmentSerializer(data=data))
        if self.departments.exists(name=vd['name'], hospital_id=identity.hospital_id):
            raise ConflictError(DEPARTMENT_EXISTS)
        try:
            department = self.departments.insert(
                name=vd['name'],
                description=vd.get('description', ''),
                hospital_id=identity.hospital_id,
            )
        except ConflictError as exc:
            raise ConflictError(DEPARTMENT_EXISTS) from exc

        logger.info('Created department %s in hospital %s', department.pk, department.hospital_id)
        log_action(user_id=identity.id, action='department.create', object_type='department',
                   object_id=department.pk, detail={'name': department.name, 'hospitalId': department.hospital_id})
        return department

    def update_department(self, identity: SessionIdentity, pk, data: Mapping[str, Any]) -> Department:
        AccessGuard.check_roles(identity, ADMIN_ONLY)
        department = self.get_department(pk)
        AccessGuard.ensure_same_hospital(identity, department.hospital_id, 'update this department')

        # Only name and description are declared, so a department cannot be moved
        patch = _validated(DepartmentSerializer(data=data, partial=True))
        if 'name' in patch:
            other = self.departments.find_one(name=patch['name'], hospital_id=department.hospital_id)
            if other is not None and other.pk != department.pk:
                raise ConflictError(DEPARTMENT_EXISTS)
        try:
            department = self.departments.update_by_id(department.pk, patch)
        except ConflictError as exc:
            raise ConflictError(DEPARTMENT_EXISTS) from exc

        log_action(user_id=identity.id, action='department.update', object_type='department',
                   object_id=department.pk, detail={'fields': sorted(patch)})
        return department

    def list_doctors(self, department_id) -> list[User]:
        department = self.get_department(department_id)
        return self.users.find_many(department=department, role=Role.DOCTOR.value)
