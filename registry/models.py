"""
Database models for the hospital directory.

Hospitals own departments and hold one hashed access secret per staff
role.  Users carry a role and, depending on that role, a hospital,
a department and a handful of profile fields.  Field validation and
the role-conditional rules live on the models so that every write
through :mod:`registry.services.store` re-checks them, updates included.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, RegexValidator
from django.db import models

EMAIL_PATTERN = r'^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$'


class Role(models.TextChoices):
    ADMIN = 'Admin', 'Admin'
    PATIENT = 'Patient', 'Patient'
    DOCTOR = 'Doctor', 'Doctor'
    RECEPTIONIST = 'Receptionist', 'Receptionist'
    INVENTORYMAN = 'Inventoryman', 'Inventoryman'


# Roles that register against a hospital's role secret
HOSPITAL_ROLES = frozenset({Role.ADMIN.value, Role.DOCTOR.value, Role.RECEPTIONIST.value})


def validate_coordinates(value) -> None:
    """Coordinates are a ``[latitude, longitude]`` pair of numbers."""
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
    ):
        raise ValidationError('Coordinates must contain latitude and longitude values', code='coordinates')


def validate_services(value) -> None:
    if not isinstance(value, list) or not value:
        raise ValidationError('Please add services offered', code='services')
    if not all(isinstance(s, str) and s.strip() for s in value):
        raise ValidationError('Services must be non-empty strings', code='services')


def validate_working_days(value) -> None:
    if not isinstance(value, list) or not all(isinstance(d, str) and d.strip() for d in value):
        raise ValidationError('Working days must be a list of day names', code='working_days')


class Hospital(models.Model):
    """A hospital and the secrets that gate staff registration.

    The three ``*_password`` columns only ever hold digests produced by
    :class:`registry.services.credentials.CredentialHasher`.
    """
    name = models.CharField(max_length=50, unique=True)
    admin_password = models.CharField(max_length=128)
    doctor_password = models.CharField(max_length=128)
    receptionist_password = models.CharField(max_length=128)
    coordinates = models.JSONField(validators=[validate_coordinates])
    services = models.JSONField(validators=[validate_services])
    created_at = models.DateTimeField(auto_now_add=True)

    SECRET_FIELDS = {
        Role.ADMIN.value: 'admin_password',
        Role.DOCTOR.value: 'doctor_password',
        Role.RECEPTIONIST.value: 'receptionist_password',
    }

    class Meta:
        ordering = ['id']

    def secret_for(self, role: str) -> str:
        """Return the stored digest that gates registration for ``role``."""
        return getattr(self, self.SECRET_FIELDS[role])

    def __str__(self) -> str:
        return self.name


class Department(models.Model):
    name = models.CharField(max_length=50)
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='departments')
    description = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['name', 'hospital'], name='unique_department_name_per_hospital'),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.hospital_id})"


class UserManager(BaseUserManager):
    """Manager for the email-keyed user model."""
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('The email must be set')
        user = self.model(email=self.normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', Role.INVENTORYMAN)
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """A person registered against the directory.

    ``email`` is the login key.  Which of the optional columns must be
    filled depends on ``role``; see :data:`ROLE_REQUIRED_FIELDS`.
    """
    username = None
    first_name = None
    last_name = None

    name = models.CharField(max_length=100)
    email = models.EmailField(
        unique=True,
        validators=[RegexValidator(EMAIL_PATTERN, 'Please provide a valid email')],
        error_messages={'unique': 'Email already registered'},
    )
    role = models.CharField(max_length=16, choices=Role.choices)
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.PROTECT, related_name='staff'
    )
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.PROTECT, related_name='doctors'
    )
    specialty = models.CharField(max_length=100, blank=True)
    working_days = models.JSONField(default=list, blank=True, validators=[validate_working_days])
    description = models.TextField(blank=True)
    age = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MaxValueValidator(150)])
    blood_type = models.CharField(max_length=5, blank=True)
    contact = models.CharField(max_length=32, blank=True)

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    class Meta:
        ordering = ['id']

    ROLE_REQUIRED_FIELDS = {
        Role.ADMIN.value: ('hospital',),
        Role.RECEPTIONIST.value: ('hospital',),
        Role.DOCTOR.value: ('hospital', 'department', 'specialty', 'working_days'),
        Role.PATIENT.value: ('age', 'contact'),
        Role.INVENTORYMAN.value: (),
    }

    def clean(self) -> None:
        super().clean()
        errors: dict[str, str] = {}
        for field in self.ROLE_REQUIRED_FIELDS.get(self.role, ()):
            value = getattr(self, f'{field}_id', None) if field in ('hospital', 'department') else getattr(self, field)
            if value is None or value == '' or value == []:
                errors[field] = f'This field is required for role {self.role}.'
        if (
            self.role == Role.DOCTOR
            and self.department_id is not None
            and self.hospital_id is not None
            and not Department.objects.filter(pk=self.department_id, hospital_id=self.hospital_id).exists()
        ):
            errors['department'] = 'Department does not belong to this hospital.'
        if errors:
            raise ValidationError(errors)

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class AuditEvent(models.Model):
    """Append-only trail of directory actions.  Never holds secrets."""
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
