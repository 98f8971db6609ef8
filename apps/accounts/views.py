import logging
import math

from django.contrib.auth import authenticate, login, logout
from django.core.paginator import EmptyPage, Paginator
from django.db import transaction
from django.http import JsonResponse
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_http_methods

from apps.core.utils import (
    first_form_error,
    json_error,
    parse_int,
    load_body,
)
from .credentials import build_credentials
from .decorators import api_login_required, capability_required
from .forms import ActivityLogForm, LoginForm, MemoForm, PermissionsForm, UserCreateForm, UserUpdateForm
from .models import Role, Team, User, UserActivityLog
from .permissions import Capability

logger = logging.getLogger(__name__)


USER_NOT_FOUND_MESSAGE = '사용자를 찾을 수 없습니다'
TEAM_NOT_FOUND_MESSAGE = '팀을 찾을 수 없습니다'
GENERIC_ERROR_MESSAGE = '서버 오류'


# HELPER FUNCTIONS
def get_client_ip(request):
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        # First entry of the proxy chain is the original client
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


# AUTHENTICATION VIEWS
@never_cache
@require_http_methods(["POST"])
def login_view(request):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = LoginForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    credentials = build_credentials(form.cleaned_data['username'], form.cleaned_data['password'])
    user = authenticate(request, username=credentials.email, password=credentials.password)

    if user is None:
        logger.warning(f"Failed login for {form.cleaned_data['username']} from {get_client_ip(request)}")
        return json_error('아이디 또는 비밀번호가 올바르지 않습니다', status=401)

    login(request, user)
    UserActivityLog.log(user, 'login', details={'ip': get_client_ip(request)})
    logger.info(f"User {user.username} logged in")

    return JsonResponse({'success': True, 'user': user.to_dict()})


@require_http_methods(["POST"])
def logout_view(request):
    if request.user.is_authenticated:
        logger.info(f"User {request.user.username} logged out")
    logout(request)
    return JsonResponse({'success': True})


@api_login_required
@require_http_methods(["GET"])
def me_view(request):
    return JsonResponse({
        'user': request.user.to_dict(),
        'permissions': request.user.get_effective_permissions(),
    })


# USER MANAGEMENT API
@api_login_required
@require_http_methods(["GET", "POST", "PUT"])
def users_api(request):
    if request.method == 'POST':
        return _create_user(request)
    if request.method == 'PUT':
        return _update_user(request)
    return _list_users(request)


@capability_required(Capability.USERS_VIEW)
def _list_users(request):
    users = User.objects.select_related('role', 'team').order_by('name')

    if request.GET.get('teamId'):
        team_id = parse_int(request.GET['teamId'], None)
        if team_id is None:
            return json_error('teamId must be a number', status=400)
        users = users.filter(team_id=team_id)
    if request.GET.get('isActive') in ('true', 'false'):
        users = users.filter(is_active=request.GET['isActive'] == 'true')

    return JsonResponse({'users': [u.to_dict() for u in users]})


@capability_required(Capability.USERS_CREATE)
def _create_user(request):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = UserCreateForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    try:
        credentials = build_credentials(form.cleaned_data['username'], form.cleaned_data['password'])
        with transaction.atomic():
            user = User.objects.create_user(
                email=credentials.email,
                password=credentials.password,
                username=form.cleaned_data['username'],
                name=form.cleaned_data['name'],
                role=form.cleaned_data['roleId'],
                team=form.cleaned_data.get('teamId'),
                is_active=form.cleaned_data['isActive'],
            )
        logger.info(f"User {user.username} created by {request.user.username}")
        return JsonResponse({'user': user.to_dict()})

    except Exception as e:
        logger.error(f"User creation failed: {e}", exc_info=True)
        return json_error('사용자 생성 실패', status=500)


@capability_required(Capability.USERS_EDIT)
def _update_user(request):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = UserUpdateForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    try:
        user = User.objects.get(pk=form.cleaned_data['id'])
    except User.DoesNotExist:
        return json_error(USER_NOT_FOUND_MESSAGE, status=404)

    try:
        changes = form.changed_fields()
        for field, value in changes.items():
            setattr(user, field, value)

        update_fields = list(changes)
        if 'password' in data:
            # Password is re-derived from the stored username
            credentials = build_credentials(user.username, form.cleaned_data['password'])
            user.set_password(credentials.password)
            update_fields.append('password')

        if update_fields:
            user.save(update_fields=update_fields + ['updated_at'])
            logger.info(f"User {user.username} updated by {request.user.username}: {', '.join(update_fields)}")

        return JsonResponse({'success': True})

    except Exception as e:
        logger.error(f"User update failed for {user.pk}: {e}", exc_info=True)
        return json_error('사용자 수정 실패', status=500)


# PERMISSIONS API
@api_login_required
@require_http_methods(["GET", "PATCH"])
def user_permissions_api(request, pk):
    if request.method == 'PATCH':
        return _update_permissions(request, pk)
    return _get_permissions(request, pk)


@capability_required(Capability.USERS_VIEW)
def _get_permissions(request, pk):
    try:
        user = User.objects.select_related('role').get(pk=pk)
    except User.DoesNotExist:
        return json_error(USER_NOT_FOUND_MESSAGE, status=404)

    return JsonResponse({
        'permissions': user.permissions,
        'permissionMode': user.permission_mode,
        'rolePermissions': user.get_role_permissions() or None,
    })


@capability_required(Capability.USERS_EDIT)
def _update_permissions(request, pk):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = PermissionsForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    try:
        user = User.objects.get(pk=pk)
    except User.DoesNotExist:
        return json_error(USER_NOT_FOUND_MESSAGE, status=404)

    try:
        user.permissions = form.cleaned_data['permissions']
        user.permission_mode = form.cleaned_data['permissionMode']
        user.save(update_fields=['permissions', 'permission_mode', 'updated_at'])
        logger.info(f"Permissions of {user.username} set to {user.permission_mode} by {request.user.username}")
        return JsonResponse({'success': True})

    except Exception as e:
        logger.error(f"Permission update failed for {pk}: {e}", exc_info=True)
        return json_error('권한 업데이트 실패', status=500)


# ACTIVITY LOG API
@api_login_required
@require_http_methods(["GET", "POST"])
def user_activity_api(request, pk):
    try:
        user = User.objects.get(pk=pk)
    except User.DoesNotExist:
        return json_error(USER_NOT_FOUND_MESSAGE, status=404)

    # Users may always read and append their own log
    if request.user.pk != user.pk:
        needed = Capability.USERS_VIEW if request.method == 'GET' else Capability.USERS_EDIT
        if not request.user.can(needed):
            return json_error('권한이 없습니다', status=403)

    if request.method == 'POST':
        return _append_activity(request, user)

    page = max(parse_int(request.GET.get('page'), 1), 1)
    limit = max(parse_int(request.GET.get('limit'), 20), 1)

    logs = UserActivityLog.objects.filter(user=user).order_by('-created_at', '-id')
    paginator = Paginator(logs, limit)
    try:
        page_logs = list(paginator.page(page))
    except EmptyPage:
        page_logs = []

    return JsonResponse({
        'logs': [log.to_dict() for log in page_logs],
        'total': paginator.count,
        'page': page,
        'limit': limit,
        'totalPages': math.ceil(paginator.count / limit),
    })


def _append_activity(request, user):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = ActivityLogForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    try:
        log = UserActivityLog.log(
            user,
            form.cleaned_data['action'],
            resource_type=form.cleaned_data.get('resourceType') or None,
            resource_id=form.cleaned_data.get('resourceId') or None,
            details=form.cleaned_data.get('details'),
        )
        return JsonResponse({'success': True, 'log': log.to_dict()})

    except Exception as e:
        logger.error(f"Activity log insert failed for {user.pk}: {e}", exc_info=True)
        return json_error('활동 로그 기록 실패', status=500)


# MEMO API
@api_login_required
@capability_required(Capability.USERS_EDIT)
@require_http_methods(["PATCH"])
def user_memo_api(request, pk):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = MemoForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    updated = User.objects.filter(pk=pk).update(memo=form.cleaned_data['memo'])
    if not updated:
        return json_error(USER_NOT_FOUND_MESSAGE, status=404)

    return JsonResponse({'success': True})


@api_login_required
@capability_required(Capability.TEAMS_EDIT)
@require_http_methods(["PATCH"])
def team_memo_api(request, pk):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = MemoForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    updated = Team.objects.filter(pk=pk).update(memo=form.cleaned_data['memo'])
    if not updated:
        return json_error(TEAM_NOT_FOUND_MESSAGE, status=404)

    return JsonResponse({'success': True})


# ORGANIZATION API
@api_login_required
@capability_required(Capability.TEAMS_VIEW)
@require_http_methods(["GET"])
def organization_api(request):
    try:
        teams = Team.objects.order_by('name')
        users = User.objects.select_related('role', 'team').order_by('name')
        roles = Role.objects.order_by('name')

        return JsonResponse({
            'teams': [t.to_dict() for t in teams],
            'users': [u.to_dict() for u in users],
            'roles': [
                {'id': r.id, 'name': r.name, 'description': r.description, 'permissions': r.permissions}
                for r in roles
            ],
        })

    except Exception as e:
        logger.error(f"Organization fetch failed: {e}", exc_info=True)
        return json_error(GENERIC_ERROR_MESSAGE, status=500)
