"""
Registration, login and current-user views.

Register and login ignore any ``Authorization`` header, so a stale token
in the client never blocks signing in again.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.exceptions import NotFoundError
from registry.models import User
from registry.permissions import IsAuthenticatedIdentity
from registry.projections import UserProfile
from registry.serializers.auth import LoginSerializer
from registry.services.login import Authenticator
from registry.services.registration import IdentityRegistrar
from registry.services.store import RecordStore
from registry.views import json_object


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register_view(request):
    """Create an account for any role and return a session token.

    Hospital staff (Admin, Doctor, Receptionist) must name an existing
    hospital and present that hospital's secret for their role in
    ``hospital<Role>pass``.  Doctors also need ``departmentId``,
    ``specialty`` and ``workingdays``; patients need ``age`` and
    ``contact``.
    """
    result = IdentityRegistrar.from_settings().register(json_object(request))
    return Response({'ok': True, 'message': 'Registration successful', **result.as_dict()},
                    status=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=json_object(request))
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    result = Authenticator.from_settings().login(vd.get('email'), vd.get('password'), vd.get('role'))
    return Response({'ok': True, 'message': 'Login successful', **result.as_dict()})


@api_view(['GET'])
@permission_classes([IsAuthenticatedIdentity])
def me_view(request):
    user = RecordStore(User).find_by_id(request.user.id)
    if user is None:
        raise NotFoundError('User not found')
    return Response({'ok': True, 'data': UserProfile.from_user(user).as_dict()})
