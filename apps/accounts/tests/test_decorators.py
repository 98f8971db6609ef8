"""
Tests for Custom Decorators
============================

Tests all custom decorators to ensure proper access control.

Test Cases:
1. api_login_required decorator
2. capability_required decorator
3. admin_required decorator
"""

import json

from django.contrib.auth.models import AnonymousUser
from django.http import JsonResponse
from django.test import RequestFactory, TestCase

from apps.accounts.decorators import admin_required, api_login_required, capability_required
from apps.accounts.permissions import Capability
from .utils import make_role, make_super_admin_role, make_user


def ok_view(request):
    return JsonResponse({'ok': True})


class ApiLoginRequiredDecoratorTest(TestCase):
    """Test @api_login_required decorator"""

    def setUp(self):
        self.factory = RequestFactory()
        self.view = api_login_required(ok_view)
        self.user = make_user('agent01')

    def test_anonymous_user_gets_401(self):
        """
        Test: Anonymous request

        Expected: 401 with the JSON error envelope, no redirect
        """
        request = self.factory.get('/api/customers')
        request.user = AnonymousUser()

        response = self.view(request)

        self.assertEqual(response.status_code, 401)
        self.assertEqual(json.loads(response.content), {'error': '로그인이 필요합니다'})

    def test_inactive_user_gets_401(self):
        self.user.is_active = False
        request = self.factory.get('/api/customers')
        request.user = self.user

        self.assertEqual(self.view(request).status_code, 401)

    def test_authenticated_user_passes(self):
        request = self.factory.get('/api/customers')
        request.user = self.user

        response = self.view(request)

        self.assertEqual(response.status_code, 200)


class CapabilityRequiredDecoratorTest(TestCase):
    """Test @capability_required decorator"""

    def setUp(self):
        self.factory = RequestFactory()
        self.view = capability_required(Capability.CUSTOMERS_VIEW, Capability.CUSTOMERS_EXPORT)(ok_view)

        self.viewer = make_user('viewer', role=make_role('viewer', Capability.CUSTOMERS_VIEW))
        self.exporter = make_user('exporter', role=make_role(
            'exporter', Capability.CUSTOMERS_VIEW, Capability.CUSTOMERS_EXPORT,
        ))
        self.admin = make_user('boss', role=make_super_admin_role())

    def _call(self, user):
        request = self.factory.get('/api/customers/export')
        request.user = user
        return self.view(request)

    def test_all_capabilities_are_required(self):
        """
        Test: User holds only one of two required capabilities

        Expected: 403 권한이 없습니다
        """
        response = self._call(self.viewer)

        self.assertEqual(response.status_code, 403)
        self.assertEqual(json.loads(response.content)['error'], '권한이 없습니다')

    def test_user_with_capabilities_passes(self):
        self.assertEqual(self._call(self.exporter).status_code, 200)

    def test_super_admin_passes(self):
        self.assertEqual(self._call(self.admin).status_code, 200)

    def test_anonymous_user_gets_401(self):
        self.assertEqual(self._call(AnonymousUser()).status_code, 401)

    def test_custom_only_permissions_override_role(self):
        """
        Test: custom_only user whose custom object lacks the export flag

        Expected: 403 even though the role grants it
        """
        self.exporter.permission_mode = 'custom_only'
        self.exporter.permissions = {'customers': {'view': True, 'export': False}}
        self.exporter.save()

        self.assertEqual(self._call(self.exporter).status_code, 403)


class AdminRequiredDecoratorTest(TestCase):
    """Test @admin_required decorator"""

    def setUp(self):
        self.factory = RequestFactory()
        self.view = admin_required(ok_view)

    def _call(self, user):
        request = self.factory.post('/api/seed-sample-data')
        request.user = user
        return self.view(request)

    def test_super_admin_role_passes(self):
        admin = make_user('boss', role=make_super_admin_role())
        self.assertEqual(self._call(admin).status_code, 200)

    def test_django_superuser_passes(self):
        superuser = make_user('root_user', is_superuser=True, is_staff=True)
        self.assertEqual(self._call(superuser).status_code, 200)

    def test_regular_user_is_denied(self):
        """
        Test: Manager with every capability but not super_admin

        Expected: 403
        """
        manager = make_user('manager', role=make_role('manager', *Capability))
        self.assertEqual(self._call(manager).status_code, 403)

    def test_anonymous_user_gets_401(self):
        self.assertEqual(self._call(AnonymousUser()).status_code, 401)
