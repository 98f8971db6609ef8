"""
Sample data generator
=====================

Fills the customers table with synthetic prospects spread over the periods
the dashboard filters on (today, yesterday, this week, this month, last
month). Development only: the API endpoint is gated by
SEED_SAMPLE_DATA_ENABLED and the management command is meant for local use.
"""

import logging
import random
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from apps.core.models import Branch
from .models import Customer

logger = logging.getLogger(__name__)


KOREAN_SURNAMES = ['김', '이', '박', '최', '정', '강', '조', '윤', '장', '임']
KOREAN_NAMES = ['민준', '서연', '지후', '수빈', '예준', '지아', '도윤', '하은', '시우', '지유']
STATUSES = [value for value, _ in Customer.STATUS_CHOICES]
CATEGORIES = [value for value, _ in Customer.CATEGORY_CHOICES]

DEFAULT_BRANCH_SLUG = 'default'

# (period label, count, (min days ago, max days ago))
SEED_PERIODS = (
    ('today', 5, (0, 0)),
    ('yesterday', 8, (1, 1)),
    ('thisWeek', 12, (2, 6)),
    ('thisMonth', 20, (7, 27)),
    ('lastMonth', 15, (30, 59)),
)

# Rows land within the first half day of their target day
SPREAD_HOURS = 12


class SeedError(Exception):
    pass


def random_phone(rng):
    return '010' + str(rng.randrange(100000000)).zfill(8)


def random_name(rng):
    return rng.choice(KOREAN_SURNAMES) + rng.choice(KOREAN_NAMES)


def _random_created_at(rng, now, days_ago):
    offset = timedelta(days=days_ago, seconds=rng.uniform(0, SPREAD_HOURS * 3600))
    return now - offset


def build_sample_customers(branch, rng=None, now=None):
    """
    Unsaved Customer instances for every seed period

    Returns:
        tuple: (customers, summary) where summary counts rows per period
    """
    rng = rng or random.Random()
    now = now or timezone.now()

    customers = []
    summary = {}
    for label, count, (min_days, max_days) in SEED_PERIODS:
        for _ in range(count):
            created_at = _random_created_at(rng, now, rng.randint(min_days, max_days))
            customers.append(Customer(
                phone=random_phone(rng),
                name=random_name(rng),
                status=rng.choice(STATUSES),
                category=rng.choice(CATEGORIES),
                branch=branch,
                created_at=created_at,
                custom_fields={},
            ))
        summary[label] = count

    summary['total'] = len(customers)
    return customers, summary


def seed_sample_customers(rng=None, now=None):
    """
    Insert the sample customers into the default branch

    Raises:
        SeedError: the 'default' branch does not exist
    """
    try:
        branch = Branch.objects.get(slug=DEFAULT_BRANCH_SLUG)
    except Branch.DoesNotExist:
        raise SeedError('Default branch not found. Please create a branch with slug "default" first.')

    customers, summary = build_sample_customers(branch, rng=rng, now=now)

    with transaction.atomic():
        created = Customer.objects.bulk_create(customers)
        # auto_now stamped updated_at on insert; align it with the backdated creation time
        for customer in created:
            Customer.objects.filter(pk=customer.pk).update(updated_at=customer.created_at)

    logger.info(f"Seeded {len(created)} sample customers into branch {branch.slug}")
    return len(created), summary
