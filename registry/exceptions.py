"""
Error taxonomy for the directory API and the DRF exception handler that
renders it.

Every failure leaves the API as ``{'ok': False, 'error': {'code', 'message'}}``
(plus ``fields`` for structural validation problems).  Unclassified
exceptions become a generic 500 and are logged rather than echoed.
"""
from __future__ import annotations

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class DirectoryError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Server error'
    default_code = 'internal_error'

    def __init__(self, detail=None, code=None, fields=None):
        super().__init__(detail, code)
        self.fields = fields


class ValidationError(DirectoryError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input'
    default_code = 'validation_error'


class ConflictError(DirectoryError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Record already exists'
    default_code = 'conflict'


class NotFoundError(DirectoryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class CredentialError(DirectoryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid credentials'
    default_code = 'invalid_credentials'


class AuthorizationError(DirectoryError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Not authorized to access this route'
    default_code = 'forbidden'


class InternalError(DirectoryError):
    pass


# Registration

class DuplicateEmail(ConflictError):
    default_detail = 'Email already registered'
    default_code = 'duplicate_email'


class InvalidRole(ValidationError):
    default_detail = 'Role must be one of Admin, Patient, Doctor, Receptionist, Inventoryman'
    default_code = 'invalid_role'


class MissingDoctorFields(ValidationError):
    default_detail = 'Doctors must provide specialty, workingdays and departmentId'
    default_code = 'missing_doctor_fields'


class MissingPatientFields(ValidationError):
    default_detail = 'Patients must provide age and contact'
    default_code = 'missing_patient_fields'


class HospitalNotFound(NotFoundError):
    default_detail = 'Hospital not found'
    default_code = 'hospital_not_found'


class DepartmentNotFound(NotFoundError):
    default_detail = 'Department not found in this hospital'
    default_code = 'department_not_found'


class InvalidHospitalPassword(CredentialError):
    default_detail = 'Invalid password for this hospital'
    default_code = 'invalid_hospital_password'

    @classmethod
    def for_role(cls, role: str) -> 'InvalidHospitalPassword':
        return cls(f'Invalid {role.lower()} password for this hospital')


# Login

class MissingCredentials(ValidationError):
    default_detail = 'Please provide email, password and role'
    default_code = 'missing_credentials'


class InvalidCredentials(CredentialError):
    default_detail = 'Invalid credentials'
    default_code = 'invalid_credentials'


# Access guard

class NotAuthenticated(exceptions.NotAuthenticated):
    """401; subclassing DRF's class keeps the ``WWW-Authenticate`` header."""
    default_detail = 'Not authorized to access this route'
    default_code = 'not_authenticated'


class Forbidden(AuthorizationError):
    pass


def _error_code(exc) -> str:
    codes = exc.get_codes() if isinstance(exc, exceptions.APIException) else None
    if isinstance(codes, str):
        return codes
    return getattr(exc, 'default_code', 'api_error')


def api_exception_handler(exc, context):
    # rest_framework.views loads the configured authentication classes, which import this module
    from rest_framework.views import exception_handler as drf_exception_handler

    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('Unhandled error in %s', type(view).__name__ if view else 'view')
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': 'Server error'}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if resp.status_code >= 500:
        logger.error('Request failed: %s', exc.__class__.__name__)

    if isinstance(resp.data, dict) and 'detail' in resp.data:
        message = resp.data['detail']
        fields = getattr(exc, 'fields', None)
    else:
        # DRF serializer errors arrive as a field -> messages mapping
        message = ValidationError.default_detail
        fields = resp.data
    error = {'code': _error_code(exc), 'message': message}
    if fields:
        error['fields'] = fields

    headers = {}
    if resp.has_header('WWW-Authenticate'):
        headers['WWW-Authenticate'] = resp['WWW-Authenticate']
    return Response({'ok': False, 'error': error}, status=resp.status_code, headers=headers)
