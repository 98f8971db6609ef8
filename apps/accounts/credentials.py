# Login credential adapter
#
# Agents log in with a short login id and a 4-digit PIN. Django's auth
# backend stores an email + password, so the pair is stretched into a
# synthetic email/password before it reaches authenticate()/set_password().
# This is an adapter for the auth backend, not a security boundary.
# ==============================================================================

import re
from collections import namedtuple

from django.conf import settings


USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_]{3,20}$')
PASSWORD_PATTERN = re.compile(r'^\d{4}$')

AuthCredentials = namedtuple('AuthCredentials', ['email', 'password'])


def to_auth_email(username):
    """'Agent01 ' -> 'agent01@crm.internal'"""
    return f"{username.strip().lower()}@{settings.AUTH_EMAIL_DOMAIN}"


def to_auth_password(password):
    return f"{password}{settings.AUTH_PASSWORD_SUFFIX}"


def build_credentials(username, password):
    return AuthCredentials(
        email=to_auth_email(username),
        password=to_auth_password(password),
    )


def validate_username(username):
    """
    Returns:
        str | None: error message, or None when valid
    """
    if not username or not isinstance(username, str):
        return '아이디를 입력해주세요'
    if not USERNAME_PATTERN.match(username.strip()):
        return '아이디는 3-20자의 영문, 숫자, 밑줄만 사용할 수 있습니다'
    return None


def validate_password(password):
    if not password or not isinstance(password, str):
        return '비밀번호를 입력해주세요'
    if not PASSWORD_PATTERN.match(password):
        return '비밀번호는 4자리 숫자여야 합니다'
    return None
