#!/usr/bin/env python
"""
Entry point for the clinic front-desk project.  It sets the default
settings module to ``clinic.settings`` and then delegates to Django's
management command line utility (``runserver``, ``migrate`` and the
front-desk commands ``register_patient`` and ``scan_patient``).
"""
import os
import sys


def main() -> None:
    """Run administrative tasks for the Django project."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinic.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
