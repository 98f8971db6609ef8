"""
Customer intake
===============

One entry point for every way a customer row is created from the outside
(JSON API, landing page form). Duplicate phones are flagged, never rejected.
"""

import logging
from collections import namedtuple

from django.db import transaction

from apps.core.models import Branch
from .models import Customer
from .utils import normalize_phone

logger = logging.getLogger(__name__)


IntakeResult = namedtuple('IntakeResult', ['customer', 'is_duplicate'])


def find_duplicate(phone, exclude_id=None):
    """Most recent customer with the same normalized phone, or None"""
    customers = Customer.objects.filter(phone=normalize_phone(phone))
    if exclude_id is not None:
        customers = customers.exclude(pk=exclude_id)
    return customers.order_by('-created_at').first()


def intake_customer(branch, phone, name=None, source=None, utm_source=None, utm_medium=None, utm_campaign=None):
    """
    Create a prospect for an active branch

    Args:
        branch: Active Branch receiving the customer
        phone: Raw phone number, normalized here

    Returns:
        IntakeResult: (customer, is_duplicate)
    """
    phone = normalize_phone(phone)

    with transaction.atomic():
        is_duplicate = Customer.objects.filter(phone=phone).exists()
        customer = Customer.objects.create(
            phone=phone,
            name=name or None,
            branch=branch,
            status='prospect',
            source=source or 'landing',
            utm_source=utm_source or None,
            utm_medium=utm_medium or None,
            utm_campaign=utm_campaign or None,
            is_duplicate=is_duplicate,
        )

    if is_duplicate:
        logger.info(f"Duplicate intake for phone ending {phone[-4:]} at branch {branch.slug} (customer {customer.id})")
    else:
        logger.info(f"New customer {customer.id} from branch {branch.slug} via {customer.source}")

    return IntakeResult(customer, is_duplicate)


def get_active_branch(branch_id):
    """Active branch by id, or None for unknown/inactive/garbage ids"""
    try:
        return Branch.objects.get(pk=branch_id, is_active=True)
    except (Branch.DoesNotExist, ValueError, TypeError):
        return None
