"""
Customer Model, Phone and Intake Tests
======================================

Test Coverage:
1. Phone helpers - normalization, mobile pattern, 11-digit check, display form
2. intake_customer - prospect creation, duplicate flag, attribution
3. find_duplicate / get_active_branch
4. CustomerHistory signal - one row per changed tracked field

Run tests:
    python manage.py test apps.customers.tests.test_models
"""

from datetime import timedelta

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from apps.accounts.tests.utils import make_user
from apps.core.models import Branch
from apps.customers.models import Customer, CustomerHistory
from apps.customers.services import find_duplicate, get_active_branch, intake_customer
from apps.customers.utils import format_phone, is_full_length_mobile, is_valid_mobile, normalize_phone


class PhoneUtilsTest(SimpleTestCase):

    def test_normalize_strips_non_digits(self):
        self.assertEqual(normalize_phone('010-1234-5678'), '01012345678')
        self.assertEqual(normalize_phone(' 010 1234 5678 '), '01012345678')
        self.assertEqual(normalize_phone(None), '')

    def test_valid_mobile(self):
        self.assertTrue(is_valid_mobile('010-1234-5678'))
        self.assertTrue(is_valid_mobile('0111234567'))

    def test_invalid_mobile(self):
        """
        Test: Numbers outside 01 + 8-9 digits

        Expected: rejected (landline, too short, too long)
        """
        self.assertFalse(is_valid_mobile('02-123-4567'))
        self.assertFalse(is_valid_mobile('010123456'))
        self.assertFalse(is_valid_mobile('010123456789'))
        self.assertFalse(is_valid_mobile(''))

    def test_full_length_mobile(self):
        self.assertTrue(is_full_length_mobile('010-1234-5678'))
        self.assertFalse(is_full_length_mobile('0111234567'))

    def test_format_phone(self):
        self.assertEqual(format_phone('01012345678'), '010-1234-5678')
        self.assertEqual(format_phone('0111234567'), '011-123-4567')


class IntakeServiceTest(TestCase):
    """Shared intake used by the JSON API and the landing page"""

    def setUp(self):
        self.branch = Branch.objects.create(name='강남지점', slug='gangnam')

    def test_first_intake_is_not_duplicate(self):
        result = intake_customer(self.branch, '010-1234-5678', name='김민준')

        self.assertFalse(result.is_duplicate)
        self.assertEqual(result.customer.phone, '01012345678')
        self.assertEqual(result.customer.status, 'prospect')
        self.assertEqual(result.customer.source, 'landing')
        self.assertEqual(result.customer.branch, self.branch)

    def test_second_intake_with_same_phone_is_flagged_not_rejected(self):
        """
        Test: Same phone submitted twice (different formatting)

        Expected: both rows exist, the second carries is_duplicate
        """
        intake_customer(self.branch, '01012345678')
        result = intake_customer(self.branch, '010 1234 5678')

        self.assertTrue(result.is_duplicate)
        self.assertTrue(Customer.objects.get(pk=result.customer.pk).is_duplicate)
        self.assertEqual(Customer.objects.filter(phone='01012345678').count(), 2)

    def test_attribution_fields(self):
        result = intake_customer(
            self.branch, '01012345678', source='facebook',
            utm_source='fb', utm_medium='cpc', utm_campaign='spring',
        )

        customer = result.customer
        self.assertEqual(customer.source, 'facebook')
        self.assertEqual((customer.utm_source, customer.utm_medium, customer.utm_campaign), ('fb', 'cpc', 'spring'))

    def test_blank_name_is_stored_as_null(self):
        result = intake_customer(self.branch, '01012345678', name='')

        self.assertIsNone(result.customer.name)

    def test_find_duplicate_returns_latest(self):
        older = Customer.objects.create(phone='01012345678', created_at=timezone.now() - timedelta(days=3))
        newer = Customer.objects.create(phone='01012345678')

        self.assertEqual(find_duplicate('010-1234-5678'), newer)
        self.assertEqual(find_duplicate('01012345678', exclude_id=newer.pk), older)
        self.assertIsNone(find_duplicate('01099998888'))

    def test_get_active_branch(self):
        inactive = Branch.objects.create(name='폐점', slug='closed', is_active=False)

        self.assertEqual(get_active_branch(self.branch.id), self.branch)
        self.assertIsNone(get_active_branch(inactive.id))
        self.assertIsNone(get_active_branch(99999))
        self.assertIsNone(get_active_branch('abc'))


class CustomerHistorySignalTest(TestCase):

    def setUp(self):
        self.agent = make_user('agent01', name='김상담')
        self.customer = Customer.objects.create(phone='01012345678', name='이서연')

    def test_creation_writes_no_history(self):
        self.assertFalse(CustomerHistory.objects.exists())

    def test_each_changed_tracked_field_writes_one_row(self):
        """
        Test: Change status and assignee, plus an untracked field

        Expected: two history rows attributed to the acting user
        """
        self.customer.status = 'in_progress'
        self.customer.assigned_to = self.agent
        self.customer.income = 300
        self.customer._changed_by = self.agent
        self.customer.save()

        rows = {h.field_name: h for h in CustomerHistory.objects.filter(customer=self.customer)}

        self.assertEqual(set(rows), {'status', 'assigned_to'})
        self.assertEqual(rows['status'].old_value, 'prospect')
        self.assertEqual(rows['status'].new_value, 'in_progress')
        self.assertIsNone(rows['assigned_to'].old_value)
        self.assertEqual(rows['assigned_to'].new_value, str(self.agent.id))
        self.assertEqual(rows['status'].user, self.agent)

    def test_system_change_has_no_user(self):
        self.customer.notes = '부재중'
        self.customer.save()

        entry = CustomerHistory.objects.get(customer=self.customer)
        self.assertIsNone(entry.user)
        self.assertEqual(entry.field_name, 'notes')

    def test_unchanged_save_writes_nothing(self):
        self.customer.save()

        self.assertFalse(CustomerHistory.objects.exists())

    def test_callback_date_is_stored_as_iso(self):
        callback = timezone.now() + timedelta(days=1)
        self.customer.callback_date = callback
        self.customer.save()

        entry = CustomerHistory.objects.get(field_name='callback_date')
        self.assertEqual(entry.new_value, callback.isoformat())
