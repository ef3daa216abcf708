"""
Department views.

Departments belong to one hospital.  An Admin creates departments in
their own hospital and may rename or re-describe only those; the owning
hospital never changes.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.permissions import AdminWriteOrReadOnly
from registry.projections import DepartmentSummary, DoctorListing
from registry.services.directory import Directory
from registry.views import json_object


@api_view(['GET', 'POST'])
@permission_classes([AdminWriteOrReadOnly])
def departments(request):
    """List departments (``?hospitalId=`` narrows to one hospital) or create one."""
    directory = Directory.from_settings()
    if request.method == 'GET':
        items = directory.list_departments(request.query_params.get('hospitalId'))
        data = [DepartmentSummary.from_department(d).as_dict() for d in items]
        return Response({'ok': True, 'count': len(data), 'data': data})

    department = directory.create_department(request.user, json_object(request))
    return Response({'ok': True, 'data': DepartmentSummary.from_department(department).as_dict()},
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT'])
@permission_classes([AdminWriteOrReadOnly])
def department_detail(request, pk):
    directory = Directory.from_settings()
    if request.method == 'GET':
        department = directory.get_department(pk)
    else:
        department = directory.update_department(request.user, pk, json_object(request))
    return Response({'ok': True, 'data': DepartmentSummary.from_department(department).as_dict()})


@api_view(['GET'])
@permission_classes([AllowAny])
def department_doctors(request, pk):
    doctors = Directory.from_settings().list_doctors(pk)
    data = [DoctorListing.from_user(u).as_dict() for u in doctors]
    return Response({'ok': True, 'count': len(data), 'data': data})
