import logging
import os
import time

from django.core.files.storage import default_storage
from django.http import Http404, JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.accounts.decorators import api_login_required, capability_required
from apps.accounts.permissions import Capability
from apps.customers.forms import LandingForm
from apps.customers.services import intake_customer
from .forms import BrandingUploadForm, SettingUpdateForm
from .models import Branch
from .settings_store import SETTINGS_KEYS, read_setting_for_api, set_setting
from .utils import SERVER_ERROR_MESSAGE, first_form_error, json_error, load_body

logger = logging.getLogger(__name__)


# PUBLIC LANDING PAGE
@csrf_exempt
@require_http_methods(["GET", "POST"])
def landing_view(request, branch_slug):
    """
    Public consultation form for one branch

    GET renders the form themed from the branch's landing settings.
    POST runs the shared intake service and renders the success message.
    Unknown or inactive branches are 404.
    """
    try:
        branch = Branch.objects.get(slug=branch_slug, is_active=True)
    except Branch.DoesNotExist:
        raise Http404('Branch not found')

    landing = branch.get_landing_settings()
    submitted = False

    if request.method == 'POST':
        form = LandingForm(request.POST, landing_settings=landing)
        if form.is_valid():
            intake_customer(
                branch,
                form.cleaned_data['phone'],
                name=form.cleaned_data.get('name'),
                source='landing',
                utm_source=form.cleaned_data.get('utm_source'),
                utm_medium=form.cleaned_data.get('utm_medium'),
                utm_campaign=form.cleaned_data.get('utm_campaign'),
            )
            submitted = True
    else:
        form = LandingForm(
            initial={
                'utm_source': request.GET.get('utm_source', ''),
                'utm_medium': request.GET.get('utm_medium', ''),
                'utm_campaign': request.GET.get('utm_campaign', ''),
            },
            landing_settings=landing,
        )

    context = {
        'branch': branch,
        'landing': landing,
        'form': form,
        'submitted': submitted,
    }
    return render(request, 'core/landing.html', context)


# BRANCHES
@api_login_required
@capability_required(Capability.BRANCHES_VIEW)
@require_http_methods(["GET"])
def branches_api(request):
    branches = Branch.objects.all()
    if request.GET.get('active') == 'true':
        branches = branches.filter(is_active=True)
    return JsonResponse({'branches': [b.to_dict() for b in branches]})


# SETTINGS STORE
@api_login_required
@require_http_methods(["GET", "PUT"])
def settings_api(request, key):
    if key not in SETTINGS_KEYS:
        return json_error(f'Unknown setting: {key}', status=404)

    if request.method == 'PUT':
        return _update_setting(request, key)
    return _get_setting(request, key)


@capability_required(Capability.SETTINGS_VIEW)
def _get_setting(request, key):
    return JsonResponse({'key': key, 'value': read_setting_for_api(key)})


@capability_required(Capability.SETTINGS_EDIT)
def _update_setting(request, key):
    data, error_response = load_body(request)
    if error_response:
        return error_response
    form = SettingUpdateForm(key, data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    try:
        set_setting(key, form.cleaned_data['value'])
    except Exception as e:
        logger.error(f"Setting '{key}' save error: {e}", exc_info=True)
        return json_error(SERVER_ERROR_MESSAGE, status=500)

    logger.info(f"User {request.user.username} updated setting '{key}'")
    return JsonResponse({'success': True, 'key': key, 'value': read_setting_for_api(key)})


# BRANDING UPLOAD
BRANDING_EXTENSIONS = {
    'image/png': 'png',
    'image/svg+xml': 'svg',
    'image/x-icon': 'ico',
    'image/jpeg': 'jpg',
}


def branding_filename(branding_type, upload, timestamp=None):
    """branding/<type>-<millis>.<ext>, keeping the uploaded extension when there is one"""
    timestamp = timestamp if timestamp is not None else int(time.time() * 1000)
    ext = os.path.splitext(upload.name)[1].lstrip('.').lower() or BRANDING_EXTENSIONS.get(upload.content_type, 'bin')
    return f'branding/{branding_type}-{timestamp}.{ext}'


@api_login_required
@capability_required(Capability.SETTINGS_EDIT)
@require_http_methods(["POST"])
def branding_upload_api(request):
    form = BrandingUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    upload = form.cleaned_data['file']
    branding_type = form.cleaned_data.get('type') or 'logo'

    try:
        name = default_storage.save(branding_filename(branding_type, upload), upload)
    except Exception as e:
        logger.error(f"Branding upload failed: {e}", exc_info=True)
        return json_error('Upload failed', status=500)

    url = request.build_absolute_uri(default_storage.url(name))
    logger.info(f"User {request.user.username} uploaded {branding_type} branding file {name}")
    return JsonResponse({'url': url})
