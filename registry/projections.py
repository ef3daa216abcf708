"""
Response projections.

Each projection is built by copying an explicit list of attributes off a
model instance, so fields that are not named here (password digests,
hospital role secrets) can never reach a response, whatever the store
returned.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional


def _ts(value) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class IdentityProjection:
    id: int
    name: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user) -> 'IdentityProjection':
        return cls(id=user.pk, name=user.name, email=user.email, role=user.role)

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class UserProfile:
    """Everything about a user that the user may see about themselves."""
    id: int
    name: str
    email: str
    role: str
    hospitalId: Optional[int]
    departmentId: Optional[int]
    specialty: str
    workingdays: list
    description: str
    age: Optional[int]
    contact: str
    bloodtype: str
    createdAt: Optional[str]

    @classmethod
    def from_user(cls, user) -> 'UserProfile':
        return cls(
            id=user.pk,
            name=user.name,
            email=user.email,
            role=user.role,
            hospitalId=user.hospital_id,
            departmentId=user.department_id,
            specialty=user.specialty,
            workingdays=list(user.working_days or []),
            description=user.description,
            age=user.age,
            contact=user.contact,
            bloodtype=user.blood_type,
            createdAt=_ts(user.date_joined),
        )

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DoctorListing:
    id: int
    name: str
    email: str
    specialty: str
    workingdays: list
    description: str
    hospitalId: Optional[int]
    departmentId: Optional[int]

    @classmethod
    def from_user(cls, user) -> 'DoctorListing':
        return cls(
            id=user.pk,
            name=user.name,
            email=user.email,
            specialty=user.specialty,
            workingdays=list(user.working_days or []),
            description=user.description,
            hospitalId=user.hospital_id,
            departmentId=user.department_id,
        )

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class HospitalSummary:
    id: int
    name: str
    coordinates: list
    services: list
    createdAt: Optional[str] = None

    @classmethod
    def from_hospital(cls, hospital, *, with_timestamp: bool = True) -> 'HospitalSummary':
        return cls(
            id=hospital.pk,
            name=hospital.name,
            coordinates=list(hospital.coordinates),
            services=list(hospital.services),
            createdAt=_ts(hospital.created_at) if with_timestamp else None,
        )

    def as_dict(self) -> dict:
        data = asdict(self)
        if data['createdAt'] is None:
            data.pop('createdAt')
        return data


@dataclass(frozen=True)
class DepartmentSummary:
    id: int
    name: str
    hospitalId: int
    description: str
    createdAt: Optional[str]

    @classmethod
    def from_department(cls, department) -> 'DepartmentSummary':
        return cls(
            id=department.pk,
            name=department.name,
            hospitalId=department.hospital_id,
            description=department.description,
            createdAt=_ts(department.created_at),
        )

    def as_dict(self) -> dict:
        return asdict(self)
