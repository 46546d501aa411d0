#!/usr/bin/env python
"""Command-line entry point for the DiaCare backend.

Besides the stock Django commands this exposes the maintenance checks,
e.g. ``python manage.py check_controls --three-minutes``.
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'diacare.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed and is the virtual "
            "environment active?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
