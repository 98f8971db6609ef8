import logging
import math
import random

from django.conf import settings
from django.core.paginator import EmptyPage, Paginator
from django.db import transaction
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.accounts.decorators import api_login_required, admin_required, capability_required
from apps.accounts.models import UserActivityLog
from apps.accounts.permissions import Capability
from apps.core.utils import SERVER_ERROR_MESSAGE, first_form_error, json_error, load_body, parse_int
from .exports import build_csv_response, build_excel_response
from .forms import CustomerFilterForm, CustomerIntakeForm, CustomerUpdateForm, DuplicateCheckForm
from .models import Customer
from .seed import SeedError, seed_sample_customers
from .services import find_duplicate, get_active_branch, intake_customer

logger = logging.getLogger(__name__)


CUSTOMER_NOT_FOUND_MESSAGE = '고객을 찾을 수 없습니다'
INVALID_BRANCH_MESSAGE = '유효하지 않은 접수처입니다'
MAX_PAGE_SIZE = 1000


def _filtered_customers(request):
    customers = Customer.objects.select_related('branch', 'assigned_to')
    filter_form = CustomerFilterForm(request.GET)
    # Every field is optional and cleaned leniently, so the form is always valid
    filter_form.is_valid()
    return filter_form.filter_queryset(customers)


# CUSTOMER LIST / INTAKE
@csrf_exempt
@require_http_methods(["GET", "POST"])
def customers_api(request):
    if request.method == 'POST':
        return _create_customer(request)
    return _list_customers(request)


def _create_customer(request):
    """Public intake endpoint used by landing pages and ad integrations"""
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = CustomerIntakeForm(data)
    if not form.is_valid():
        logger.warning(f"Rejected customer intake: {first_form_error(form)}")
        return json_error(first_form_error(form), status=400)

    branch = get_active_branch(form.cleaned_data['branchId'])
    if branch is None:
        logger.warning(f"Rejected customer intake for unknown/inactive branch {form.cleaned_data['branchId']}")
        return json_error(INVALID_BRANCH_MESSAGE, status=400)

    try:
        result = intake_customer(
            branch,
            form.cleaned_data['phone'],
            name=form.cleaned_data.get('name'),
            source=form.cleaned_data.get('source'),
            utm_source=form.cleaned_data.get('utmSource'),
            utm_medium=form.cleaned_data.get('utmMedium'),
            utm_campaign=form.cleaned_data.get('utmCampaign'),
        )
    except Exception as e:
        logger.error(f"Customer creation error: {e}", exc_info=True)
        return json_error(SERVER_ERROR_MESSAGE, status=500)

    return JsonResponse({
        'success': True,
        'customer': {
            'id': result.customer.id,
            'isDuplicate': result.is_duplicate,
        },
    })


@api_login_required
@capability_required(Capability.CUSTOMERS_VIEW)
def _list_customers(request):
    page = max(parse_int(request.GET.get('page'), 1), 1)
    limit = parse_int(request.GET.get('limit'), settings.CUSTOMER_PAGE_SIZE)
    if limit < 1:
        limit = settings.CUSTOMER_PAGE_SIZE
    limit = min(limit, MAX_PAGE_SIZE)

    try:
        paginator = Paginator(_filtered_customers(request), limit)
        total = paginator.count
        try:
            rows = [c.to_dict() for c in paginator.page(page)]
        except EmptyPage:
            rows = []
    except Exception as e:
        logger.error(f"Fetch customers error: {e}", exc_info=True)
        return json_error(SERVER_ERROR_MESSAGE, status=500)

    return JsonResponse({
        'customers': rows,
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'totalPages': math.ceil(total / limit),
        },
    })


# SINGLE CUSTOMER
@api_login_required
@require_http_methods(["GET", "PATCH"])
def customer_detail_api(request, pk):
    try:
        customer = Customer.objects.select_related('branch', 'assigned_to').get(pk=pk)
    except Customer.DoesNotExist:
        return json_error(CUSTOMER_NOT_FOUND_MESSAGE, status=404)

    if request.method == 'PATCH':
        return _update_customer(request, customer)
    return _get_customer(request, customer)


@capability_required(Capability.CUSTOMERS_VIEW)
def _get_customer(request, customer):
    history = [
        {
            'id': entry.id,
            'fieldName': entry.field_name,
            'oldValue': entry.old_value,
            'newValue': entry.new_value,
            'userId': entry.user_id,
            'userName': entry.user.name if entry.user else None,
            'createdAt': entry.created_at.isoformat(),
        }
        for entry in customer.history.select_related('user')[:50]
    ]
    return JsonResponse({'customer': customer.to_dict(), 'history': history})


@capability_required(Capability.CUSTOMERS_EDIT)
def _update_customer(request, customer):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = CustomerUpdateForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    changes = form.cleaned_data['changes']
    if 'assigned_to' in changes and not request.user.can(Capability.CUSTOMERS_ASSIGN):
        logger.warning(f"User {request.user.username} tried to reassign customer {customer.pk} without permission")
        return json_error('권한이 없습니다', status=403)

    try:
        with transaction.atomic():
            for field, value in changes.items():
                setattr(customer, field, value)
            customer._changed_by = request.user
            customer.save()
        UserActivityLog.log(request.user, 'customer_update', 'customer', customer.pk,
                            details={'fields': sorted(changes)})
    except Exception as e:
        logger.error(f"Customer {customer.pk} update error: {e}", exc_info=True)
        return json_error('고객 정보 수정 실패', status=500)

    logger.info(f"Customer {customer.pk} updated by {request.user.username}: {', '.join(sorted(changes))}")
    return JsonResponse({'success': True, 'customer': customer.to_dict()})


# DUPLICATE CHECK
@csrf_exempt
@require_http_methods(["POST"])
def duplicate_check_api(request):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = DuplicateCheckForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    try:
        existing = find_duplicate(form.cleaned_data['phone'])
    except Exception as e:
        logger.error(f"Duplicate check error: {e}", exc_info=True)
        return json_error(SERVER_ERROR_MESSAGE, status=500)

    return JsonResponse({
        'isDuplicate': existing is not None,
        'existingCustomer': {
            'id': existing.id,
            'status': existing.status,
            'createdAt': existing.created_at.isoformat(),
        } if existing else None,
    })


# EXPORT
@api_login_required
@capability_required(Capability.CUSTOMERS_EXPORT)
@require_http_methods(["GET"])
def customer_export_view(request):
    export_format = request.GET.get('format', 'excel')
    if export_format not in ('excel', 'csv'):
        return json_error('Invalid export format', status=400)

    customers = _filtered_customers(request)
    UserActivityLog.log(request.user, 'customer_export', 'customer', details={
        'format': export_format,
        'count': customers.count(),
    })
    logger.info(f"User {request.user.username} exported customers as {export_format}")

    if export_format == 'csv':
        return build_csv_response(customers)
    return build_excel_response(customers)


# SAMPLE DATA
@api_login_required
@admin_required
@require_http_methods(["GET", "POST"])
def seed_sample_data_api(request):
    if not settings.SEED_SAMPLE_DATA_ENABLED:
        return json_error('Sample data seeding is disabled', status=404)

    if request.method == 'GET':
        return JsonResponse({'currentCount': Customer.objects.count()})

    try:
        count, summary = seed_sample_customers(rng=random.Random())
    except SeedError as e:
        return json_error(str(e), status=400)
    except Exception as e:
        logger.error(f"Sample data seeding failed: {e}", exc_info=True)
        return json_error(SERVER_ERROR_MESSAGE, status=500)

    return JsonResponse({
        'success': True,
        'message': f'Successfully created {count} sample customers',
        'summary': summary,
        'count': count,
    })
