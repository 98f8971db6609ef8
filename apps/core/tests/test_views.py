"""
Core Views Tests
================

Test Coverage:
1. Landing page - render, themed copy, submission, inactive/unknown branch
2. Branches API
3. Settings API - known keys, defaults, permissions
4. Branding upload - valid image, type and size checks

Run tests:
    python manage.py test apps.core.tests.test_views
"""

import io
import json
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, TestCase, override_settings
from PIL import Image

from apps.accounts.permissions import Capability
from apps.accounts.tests.utils import make_role, make_user
from apps.core.models import Branch, Setting
from apps.core.views import branding_filename
from apps.customers.models import Customer


def _json(response):
    return json.loads(response.content)


def _png_bytes(size=(8, 8)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color=(59, 130, 246)).save(buffer, format='PNG')
    return buffer.getvalue()


class LandingViewTest(TestCase):

    def setUp(self):
        self.client = Client()
        self.branch = Branch.objects.create(
            name='강남지점',
            slug='gangnam',
            landing_settings={'title': '강남 무료 상담', 'successMessage': '곧 연락드리겠습니다'},
        )
        self.url = '/landing/gangnam'

    def test_renders_branch_copy(self):
        response = self.client.get(self.url, {'utm_source': 'naver'})

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'core/landing.html')
        self.assertContains(response, '강남 무료 상담')
        self.assertEqual(response.context['form'].initial['utm_source'], 'naver')

    def test_submission_creates_prospect(self):
        """
        Test: Visitor submits name, phone and consent with UTM fields

        Expected: customer created for this branch with landing source,
        success message rendered
        """
        response = self.client.post(self.url, {
            'name': '김민준',
            'phone': '010-1234-5678',
            'agree_privacy': 'on',
            'utm_source': 'naver',
            'utm_campaign': 'spring',
        })

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, '곧 연락드리겠습니다')

        customer = Customer.objects.get()
        self.assertEqual(customer.branch, self.branch)
        self.assertEqual(customer.phone, '01012345678')
        self.assertEqual(customer.source, 'landing')
        self.assertEqual(customer.utm_source, 'naver')
        self.assertEqual(customer.utm_campaign, 'spring')

    def test_invalid_submission_rerenders_form(self):
        response = self.client.post(self.url, {'phone': '1234', 'agree_privacy': 'on'})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.context['submitted'])
        self.assertIn('phone', response.context['form'].errors)
        self.assertFalse(Customer.objects.exists())

    def test_consent_is_required(self):
        response = self.client.post(self.url, {'phone': '01012345678'})

        self.assertIn('agree_privacy', response.context['form'].errors)
        self.assertFalse(Customer.objects.exists())

    def test_inactive_branch_is_404(self):
        self.branch.is_active = False
        self.branch.save()

        self.assertEqual(self.client.get(self.url).status_code, 404)

    def test_unknown_branch_is_404(self):
        self.assertEqual(self.client.get('/landing/nowhere').status_code, 404)


class BranchesApiTest(TestCase):

    def setUp(self):
        self.client = Client()
        self.client.force_login(make_user('viewer', role=make_role('viewer', Capability.BRANCHES_VIEW)))
        Branch.objects.create(name='강남지점', slug='gangnam')
        Branch.objects.create(name='부산지점', slug='busan', is_active=False)

    def test_list_branches(self):
        data = _json(self.client.get('/api/branches'))

        self.assertEqual(len(data['branches']), 2)

    def test_active_only(self):
        data = _json(self.client.get('/api/branches', {'active': 'true'}))

        self.assertEqual([b['slug'] for b in data['branches']], ['gangnam'])

    def test_requires_capability(self):
        self.client.force_login(make_user('agent01'))

        self.assertEqual(self.client.get('/api/branches').status_code, 403)


class SettingsApiTest(TestCase):

    def setUp(self):
        self.client = Client()
        self.editor = make_user('editor', role=make_role('editor', Capability.SETTINGS_VIEW, Capability.SETTINGS_EDIT))
        self.viewer = make_user('viewer', role=make_role('viewer', Capability.SETTINGS_VIEW))

    def _put(self, key, body):
        return self.client.put(f'/api/settings/{key}', data=json.dumps(body), content_type='application/json')

    def test_status_badges_default(self):
        self.client.force_login(self.viewer)

        data = _json(self.client.get('/api/settings/statusBadges'))

        self.assertEqual(data['key'], 'statusBadges')
        self.assertEqual([b['id'] for b in data['value']][:2], ['prospect', 'in_progress'])

    def test_put_then_get(self):
        """
        Test: Save one custom badge

        Expected: stored badge plus the untouched defaults come back
        """
        self.client.force_login(self.editor)
        custom = [{'id': 'hold', 'label': '보류', 'color': '#000000', 'bgColor': '#FFFFFF', 'order': 10}]

        response = self._put('statusBadges', {'value': custom})

        self.assertEqual(response.status_code, 200)
        ids = [b['id'] for b in _json(self.client.get('/api/settings/statusBadges'))['value']]
        self.assertEqual(ids[-1], 'hold')
        self.assertIn('prospect', ids)
        self.assertEqual(Setting.objects.get(key='statusBadges').value, custom)

    def test_value_is_required(self):
        self.client.force_login(self.editor)

        response = self._put('branding', {'logo': 'x'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(_json(response)['error'], 'value is required')

    def test_malformed_badges_are_rejected(self):
        """
        Test: Badge lists with a text order, a missing id, a non-list value

        Expected: 400 for each, nothing stored, reads keep working
        """
        self.client.force_login(self.editor)

        for value in (
            [{'id': 'x', 'order': 'first'}],
            [{'label': 'no id'}],
            [{'id': 'x'}, {'id': 'x'}],
            [{'id': 'x', 'order': True}],
            {'id': 'x'},
        ):
            response = self._put('statusBadges', {'value': value})
            self.assertEqual(response.status_code, 400, value)

        self.assertEqual(_json(self._put('statusBadges', {'value': [{'id': 'x', 'order': 'first'}]}))['error'],
                         'order must be a number: x')
        self.assertFalse(Setting.objects.filter(key='statusBadges').exists())
        self.assertEqual(self.client.get('/api/settings/statusBadges').status_code, 200)

    def test_malformed_labels_and_columns_are_rejected(self):
        self.client.force_login(self.editor)

        self.assertEqual(self._put('columnLabels', {'value': {'name': 3}}).status_code, 400)
        self.assertEqual(self._put('columnLabels', {'value': ['name']}).status_code, 400)
        self.assertEqual(self._put('customColumns', {'value': [{'id': 'memo2', 'order': None}]}).status_code, 400)
        self.assertEqual(self._put('customColumns', {'value': [{'id': 'memo2', 'order': 1}]}).status_code, 200)
        self.assertEqual(self._put('excel_grid_layout', {'value': [[1, 2], 'free-form']}).status_code, 200)

    def test_unknown_key(self):
        self.client.force_login(self.editor)

        response = self.client.get('/api/settings/secretKey')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(_json(response)['error'], 'Unknown setting: secretKey')

    def test_view_only_cannot_write(self):
        self.client.force_login(self.viewer)

        self.assertEqual(self._put('columnLabels', {'value': {}}).status_code, 403)

    def test_unset_opaque_key_is_null(self):
        self.client.force_login(self.viewer)

        self.assertIsNone(_json(self.client.get('/api/settings/excel_grid_layout'))['value'])


class BrandingUploadTest(TestCase):

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        self.client = Client()
        self.client.force_login(make_user('editor', role=make_role('editor', Capability.SETTINGS_EDIT)))

    def _upload(self, upload, branding_type='logo'):
        with override_settings(MEDIA_ROOT=self.media_root):
            return self.client.post('/api/upload/branding', {'file': upload, 'type': branding_type})

    def test_valid_png(self):
        response = self._upload(SimpleUploadedFile('logo.png', _png_bytes(), content_type='image/png'))

        self.assertEqual(response.status_code, 200)
        url = _json(response)['url']
        self.assertTrue(url.startswith('http://testserver/media/branding/logo-'))
        self.assertTrue(url.endswith('.png'))

    def test_rejects_disallowed_type(self):
        response = self._upload(SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain'))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(_json(response)['error'], 'Invalid file type')

    @override_settings(BRANDING_MAX_UPLOAD_SIZE=1024 * 1024)
    def test_rejects_large_file(self):
        response = self._upload(SimpleUploadedFile('big.png', b'\0' * (1024 * 1024 + 1), content_type='image/png'))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(_json(response)['error'], 'File too large (max 1MB)')

    def test_rejects_bytes_that_are_not_an_image(self):
        response = self._upload(SimpleUploadedFile('fake.png', b'not really a png', content_type='image/png'))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(_json(response)['error'], 'Invalid image file')

    def test_missing_file(self):
        response = self.client.post('/api/upload/branding', {'type': 'logo'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(_json(response)['error'], 'No file provided')

    def test_filename(self):
        upload = SimpleUploadedFile('Brand.SVG', b'<svg/>', content_type='image/svg+xml')

        self.assertEqual(branding_filename('favicon', upload, timestamp=1700000000000),
                         'branding/favicon-1700000000000.svg')
