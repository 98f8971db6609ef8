"""
Closed capability set
=====================

Permissions are stored as nested JSON ({resource: {action: bool}}) on roles
and users, but code never indexes into that JSON with free strings. Every
check goes through a `Capability` member, so a typo in a resource or action
name fails at import time instead of silently evaluating to False.
"""

from enum import Enum


SUPER_ADMIN_ROLE = 'super_admin'

PERMISSION_MODES = ('role_only', 'custom_only')


class Resource(str, Enum):
    CUSTOMERS = 'customers'
    TEAMS = 'teams'
    USERS = 'users'
    SETTINGS = 'settings'
    DASHBOARD = 'dashboard'
    BRANCHES = 'branches'


# Allowed actions per resource, in display order
RESOURCE_ACTIONS = {
    Resource.CUSTOMERS: ('view', 'create', 'edit', 'delete', 'assign', 'export'),
    Resource.TEAMS: ('view', 'create', 'edit', 'delete'),
    Resource.USERS: ('view', 'create', 'edit', 'delete'),
    Resource.SETTINGS: ('view', 'edit'),
    Resource.DASHBOARD: ('view', 'viewAll'),
    Resource.BRANCHES: ('view', 'create', 'edit', 'delete'),
}


class Capability(Enum):
    """Every (resource, action) pair a user can be granted"""

    CUSTOMERS_VIEW = (Resource.CUSTOMERS, 'view')
    CUSTOMERS_CREATE = (Resource.CUSTOMERS, 'create')
    CUSTOMERS_EDIT = (Resource.CUSTOMERS, 'edit')
    CUSTOMERS_DELETE = (Resource.CUSTOMERS, 'delete')
    CUSTOMERS_ASSIGN = (Resource.CUSTOMERS, 'assign')
    CUSTOMERS_EXPORT = (Resource.CUSTOMERS, 'export')

    TEAMS_VIEW = (Resource.TEAMS, 'view')
    TEAMS_CREATE = (Resource.TEAMS, 'create')
    TEAMS_EDIT = (Resource.TEAMS, 'edit')
    TEAMS_DELETE = (Resource.TEAMS, 'delete')

    USERS_VIEW = (Resource.USERS, 'view')
    USERS_CREATE = (Resource.USERS, 'create')
    USERS_EDIT = (Resource.USERS, 'edit')
    USERS_DELETE = (Resource.USERS, 'delete')

    SETTINGS_VIEW = (Resource.SETTINGS, 'view')
    SETTINGS_EDIT = (Resource.SETTINGS, 'edit')

    DASHBOARD_VIEW = (Resource.DASHBOARD, 'view')
    DASHBOARD_VIEW_ALL = (Resource.DASHBOARD, 'viewAll')

    BRANCHES_VIEW = (Resource.BRANCHES, 'view')
    BRANCHES_CREATE = (Resource.BRANCHES, 'create')
    BRANCHES_EDIT = (Resource.BRANCHES, 'edit')
    BRANCHES_DELETE = (Resource.BRANCHES, 'delete')

    @property
    def resource(self):
        return self.value[0]

    @property
    def action(self):
        return self.value[1]

    def __str__(self):
        return f"{self.resource.value}.{self.action}"


def _check_table_is_closed():
    declared = {(c.resource, c.action) for c in Capability}
    expected = {(r, a) for r, actions in RESOURCE_ACTIONS.items() for a in actions}
    if declared != expected:
        raise ImportError(f"Capability enum out of sync with RESOURCE_ACTIONS: {declared ^ expected}")


_check_table_is_closed()


def empty_permissions():
    return {r.value: {a: False for a in actions} for r, actions in RESOURCE_ACTIONS.items()}


def full_permissions():
    return {r.value: {a: True for a in actions} for r, actions in RESOURCE_ACTIONS.items()}


def _lookup(permission_object, capability):
    if not isinstance(permission_object, dict):
        return False
    resource_perms = permission_object.get(capability.resource.value)
    if not isinstance(resource_perms, dict):
        return False
    return resource_perms.get(capability.action) is True


def _source_object(role_permissions, custom_permissions, permission_mode):
    # custom_only replaces the role object wholesale, it is never merged
    if permission_mode == 'custom_only' and custom_permissions:
        return custom_permissions
    return role_permissions


def has_capability(capability, role_permissions=None, custom_permissions=None,
                   permission_mode='role_only', is_super_admin=False):
    if is_super_admin:
        return True
    source = _source_object(role_permissions, custom_permissions, permission_mode)
    return _lookup(source, capability)


def resolve_permissions(role_permissions=None, custom_permissions=None,
                        permission_mode='role_only', is_super_admin=False):
    """
    Build the effective nested permission object

    Returns:
        dict: {resource: {action: bool}} with every resource and action present
    """
    if is_super_admin:
        return full_permissions()

    source = _source_object(role_permissions, custom_permissions, permission_mode)
    resolved = empty_permissions()
    for capability in Capability:
        resolved[capability.resource.value][capability.action] = _lookup(source, capability)
    return resolved


def validate_permission_structure(value):
    """
    Validate a custom permission object coming from the API

    Accepts None (clear custom permissions) or an object with exactly the six
    resources, each carrying exactly its boolean action flags.

    Returns:
        str | None: error message, or None when valid
    """
    if value is None:
        return None
    if not isinstance(value, dict):
        return 'permissions must be an object or null'

    expected_resources = {r.value for r in Resource}
    unknown = set(value) - expected_resources
    if unknown:
        return f"Unknown permission resource: {sorted(unknown)[0]}"

    for resource, actions in RESOURCE_ACTIONS.items():
        resource_perms = value.get(resource.value)
        if not isinstance(resource_perms, dict):
            return f"permissions.{resource.value} is required"
        extra = set(resource_perms) - set(actions)
        if extra:
            return f"Unknown action permissions.{resource.value}.{sorted(extra)[0]}"
        for action in actions:
            if not isinstance(resource_perms.get(action), bool):
                return f"permissions.{resource.value}.{action} must be a boolean"
    return None
