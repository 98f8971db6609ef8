"""
Shared test fixtures for users and roles

Users are created through build_credentials so the stored email/password
match what login_view derives from a username + PIN.
"""

from apps.accounts.credentials import build_credentials
from apps.accounts.models import Role, User
from apps.accounts.permissions import SUPER_ADMIN_ROLE, empty_permissions, full_permissions


def make_role(name, *capabilities):
    """Role granting exactly the given capabilities"""
    permissions = empty_permissions()
    for capability in capabilities:
        permissions[capability.resource.value][capability.action] = True
    return Role.objects.create(name=name, permissions=permissions)


def make_super_admin_role():
    return Role.objects.get_or_create(name=SUPER_ADMIN_ROLE, defaults={'permissions': full_permissions()})[0]


def make_user(username, pin='1234', role=None, name=None, **extra_fields):
    credentials = build_credentials(username, pin)
    return User.objects.create_user(
        email=credentials.email,
        password=credentials.password,
        username=username,
        name=name if name is not None else username,
        role=role,
        **extra_fields
    )
