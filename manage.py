#!/usr/bin/env python
# LEAD CRM - DJANGO MANAGEMENT SCRIPT
#
# Common commands:
# - python manage.py migrate              # Create / update the database schema
# - python manage.py createsuperuser      # Create the first super admin
# - python manage.py seed_sample_data     # Fill the "default" branch with demo customers
# - python manage.py runserver            # Start development server
# - python manage.py test apps            # Run the test suite
#
# Background jobs (callback reminders):
# - celery -A config worker -l info
# - celery -A config beat -l info
# ==============================================================================

import os
import sys


def main():
    """Run administrative tasks with config.settings"""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
