# Decorators in this file:
# 1. api_login_required - JSON endpoints need an authenticated session
# 2. capability_required - User must hold every listed Capability
# 3. admin_required - Only super admins can access
#
# All three answer with the JSON error envelope {"error": "..."} instead of
# redirecting, since every caller is an API endpoint.
# ==============================================================================
import logging
from functools import wraps

from django.http import JsonResponse

logger = logging.getLogger(__name__)


LOGIN_REQUIRED_MESSAGE = '로그인이 필요합니다'
PERMISSION_DENIED_MESSAGE = '권한이 없습니다'


def api_login_required(view_func):
    """
    Decorator: Only authenticated, active users can call this endpoint

    Anonymous requests get 401 with the JSON error envelope.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated or not request.user.is_active:
            return JsonResponse({'error': LOGIN_REQUIRED_MESSAGE}, status=401)
        return view_func(request, *args, **kwargs)

    return wrapper


def capability_required(*capabilities):
    """
    Decorator: User must hold all of the given capabilities

    Args:
        *capabilities: Capability members (apps.accounts.permissions)

    Usage:
        @api_login_required
        @capability_required(Capability.USERS_CREATE)
        def users_api(request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return JsonResponse({'error': LOGIN_REQUIRED_MESSAGE}, status=401)

            missing = [c for c in capabilities if not request.user.can(c)]
            if missing:
                logger.warning(
                    f"User {request.user.username} denied {request.method} {request.path}: "
                    f"missing {', '.join(str(c) for c in missing)}"
                )
                return JsonResponse({'error': PERMISSION_DENIED_MESSAGE}, status=403)

            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


def admin_required(view_func):
    """
    Decorator: Only super admins (role super_admin or Django superuser)
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({'error': LOGIN_REQUIRED_MESSAGE}, status=401)

        if request.user.is_super_admin():
            return view_func(request, *args, **kwargs)

        return JsonResponse({'error': PERMISSION_DENIED_MESSAGE}, status=403)

    return wrapper
