import os
import subprocess
import sys
from pathlib import Path

import pytest
from django.core.management import call_command

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@pytest.mark.parametrize('first', ['registry.exceptions', 'registry.authentication', 'rest_framework.views'])
def test_modules_import_in_fresh_interpreter(first):
    code = (
        'import django; django.setup(); '
        f'import {first}; '
        'import registry.exceptions, registry.authentication, registry.permissions, registry.routers'
    )
    env = {**os.environ, 'DJANGO_SETTINGS_MODULE': 'hospital_directory.settings'}
    result = subprocess.run(
        [sys.executable, '-c', code], cwd=PROJECT_ROOT, env=env, capture_output=True, text=True, timeout=60,
    )
    assert result.returncode == 0, result.stderr


def test_system_check_passes():
    call_command('check')
