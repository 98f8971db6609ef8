from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import User, UserActivityLog


# Keep User.last_activity_at in step with the newest activity log entry
@receiver(post_save, sender=UserActivityLog)
def stamp_last_activity(sender, instance, created, **kwargs):
    if created:
        User.objects.filter(pk=instance.user_id).update(last_activity_at=instance.created_at)
