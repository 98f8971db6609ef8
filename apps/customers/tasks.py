import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from apps.accounts.models import UserActivityLog
from .models import Customer

logger = logging.getLogger(__name__)


@shared_task
def send_callback_reminders():
    """Log a reminder for every assigned customer whose call-back falls in the next window"""
    now = timezone.now()
    window_end = now + timedelta(minutes=settings.CALLBACK_REMINDER_WINDOW_MINUTES)
    customers = Customer.objects.filter(
        callback_date__gte=now,
        callback_date__lt=window_end,
        assigned_to__isnull=False,
    ).exclude(status__in=['completed', 'cancelled']).select_related('assigned_to')

    reminders_sent = 0

    for customer in customers:
        UserActivityLog.log(
            customer.assigned_to,
            'callback_reminder',
            'customer',
            customer.pk,
            details={
                'customerName': customer.name,
                'phone': customer.phone,
                'callbackDate': customer.callback_date.isoformat(),
            },
        )
        reminders_sent += 1

    logger.info(f"Callback reminders: {reminders_sent} sent")
    return f'{reminders_sent} callback reminders sent.'
