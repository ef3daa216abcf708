#!/usr/bin/env python
"""
Entry point for the Django project.  It sets the default settings module
to ``hospital_directory.settings`` and then delegates to Django's
management command line utility.  ``runserver`` listens on ``$PORT``
when it is set.
"""
import os
import sys


def main() -> None:
    """Run administrative tasks for the Django project."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hospital_directory.settings')
    try:
        from django.core.management import execute_from_command_line
        from django.core.management.commands.runserver import Command as runserver
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc
    runserver.default_port = os.getenv('PORT', '8000')
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
