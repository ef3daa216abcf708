from io import StringIO

import pytest
from django.contrib.auth.hashers import check_password
from django.core.management import CommandError, call_command

from registry.models import Hospital

pytestmark = pytest.mark.django_db

ARGS = [
    'Harbor View',
    '--admin-password', 'hv-admin',
    '--doctor-password', 'hv-doctor',
    '--receptionist-password', 'hv-reception',
    '--coordinates', '47.6', '-122.3',
    '--services', 'Trauma', 'Burns',
]


def test_create_hospital_command():
    out = StringIO()
    call_command('create_hospital', *ARGS, stdout=out)
    hospital = Hospital.objects.get(name='Harbor View')
    assert 'ok: Harbor View' in out.getvalue()
    assert hospital.coordinates == [47.6, -122.3]
    assert hospital.services == ['Trauma', 'Burns']
    assert check_password('hv-admin', hospital.admin_password)


def test_create_hospital_command_duplicate():
    call_command('create_hospital', *ARGS, stdout=StringIO())
    with pytest.raises(CommandError, match='already exists'):
        call_command('create_hospital', *ARGS, stdout=StringIO())
