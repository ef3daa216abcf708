from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from registry.permissions import AdminWriteOrReadOnly
from registry.projections import DepartmentSummary, HospitalSummary
from registry.services.directory import Directory
from registry.views import json_object


@api_view(['GET', 'POST'])
@permission_classes([AdminWriteOrReadOnly])
def hospitals(request):
    """``GET`` lists every hospital; ``POST`` (Admin) creates one."""
    directory = Directory.from_settings()
    if request.method == 'GET':
        data = [HospitalSummary.from_hospital(h).as_dict() for h in directory.list_hospitals()]
        return Response({'ok': True, 'count': len(data), 'data': data})

    hospital = directory.create_hospital(request.user, json_object(request))
    return Response(
        {'ok': True, 'data': HospitalSummary.from_hospital(hospital, with_timestamp=False).as_dict()},
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET', 'PUT'])
@permission_classes([AdminWriteOrReadOnly])
def hospital_detail(request, pk):
    """``PUT`` is limited to the Admin's own hospital; omitted fields are kept."""
    directory = Directory.from_settings()
    if request.method == 'GET':
        hospital = directory.get_hospital(pk)
    else:
        hospital = directory.update_hospital(request.user, pk, json_object(request))
    return Response({'ok': True, 'data': HospitalSummary.from_hospital(hospital).as_dict()})


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_departments(request, pk):
    directory = Directory.from_settings()
    hospital = directory.get_hospital(pk)
    data = [DepartmentSummary.from_department(d).as_dict() for d in directory.list_departments(hospital.pk)]
    return Response({'ok': True, 'count': len(data), 'data': data})
