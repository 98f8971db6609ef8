# Celery runs the CRM's background jobs:
# - Callback reminders for agents (every 15 minutes)
#
# Start worker: celery -A config worker -l info
# Start beat: celery -A config beat -l info
# ==============================================================================

import os
from celery import Celery
from celery.schedules import crontab

# Celery uses the same settings module as Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('leadcrm')

# All settings prefixed with 'CELERY_' are picked up
app.config_from_object('django.conf:settings', namespace='CELERY')

# Looks for tasks.py in each installed app
app.autodiscover_tasks()


# CELERY BEAT SCHEDULE (Periodic Tasks)
app.conf.beat_schedule = {
    # Remind agents about callbacks due in the next window
    'send-callback-reminders': {
        'task': 'apps.customers.tasks.send_callback_reminders',
        'schedule': crontab(minute='*/15'),
    },
}
