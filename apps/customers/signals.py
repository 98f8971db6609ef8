import logging

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Customer, CustomerHistory

logger = logging.getLogger(__name__)


# Fields whose changes are written to CustomerHistory
TRACKED_FIELDS = ('status', 'assigned_to', 'notes', 'callback_date', 'name', 'category')


def _field_value(customer, field):
    if field == 'assigned_to':
        return customer.assigned_to_id
    return getattr(customer, field)


def _as_text(value):
    if value is None:
        return None
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


@receiver(pre_save, sender=Customer)
def remember_tracked_values(sender, instance, **kwargs):
    # Check if this is an update (not a new customer)
    if instance.pk:
        try:
            old_customer = Customer.objects.get(pk=instance.pk)
        except Customer.DoesNotExist:
            return
        instance._tracked_old = {field: _field_value(old_customer, field) for field in TRACKED_FIELDS}


@receiver(post_save, sender=Customer)
def record_customer_history(sender, instance, created, **kwargs):
    old_values = getattr(instance, '_tracked_old', None)
    if created or old_values is None:
        return

    # Set by views that know the acting user; None means a system change
    changed_by = getattr(instance, '_changed_by', None)

    entries = []
    for field in TRACKED_FIELDS:
        old_value = old_values[field]
        new_value = _field_value(instance, field)
        if old_value != new_value:
            entries.append(CustomerHistory(
                customer=instance,
                user=changed_by,
                field_name=field,
                old_value=_as_text(old_value),
                new_value=_as_text(new_value),
            ))

    if entries:
        CustomerHistory.objects.bulk_create(entries)
        logger.debug(f"Customer {instance.pk}: recorded {len(entries)} history entries")

    del instance._tracked_old
