# Models:
# 1. Role - Named permission bundle (super_admin, manager, agent, ...)
# 2. Team - Organization unit, optionally nested under a parent team
# 3. User - Custom user model (login id + 4-digit PIN, see credentials.py)
# 4. UserActivityLog - Append-only audit trail per user


from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.utils import timezone
from django.core.validators import RegexValidator
from django.utils.translation import gettext_lazy as _

from .permissions import Capability, SUPER_ADMIN_ROLE, has_capability, resolve_permissions


# ROLE MODEL
class Role(models.Model):
    """
    Permission bundle shared by many users

    `permissions` holds the nested resource -> action -> bool object, e.g.
    {"customers": {"view": true, "edit": false, ...}, "teams": {...}, ...}
    """

    name = models.CharField(_('name'), max_length=50, unique=True, help_text=_('Role identifier (e.g., super_admin, manager, agent)'))
    description = models.CharField(_('description'), max_length=255, blank=True)
    permissions = models.JSONField(_('permissions'), default=dict, blank=True, help_text=_('Nested permission flags keyed by resource'))
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    class Meta:
        verbose_name = _('role')
        verbose_name_plural = _('roles')
        ordering = ['name']

    def __str__(self):
        return self.name

    def is_super_admin(self):
        return self.name == SUPER_ADMIN_ROLE


# TEAM MODEL
class Team(models.Model):

    name = models.CharField(_('name'), max_length=100, help_text=_('Team name (e.g., 영업1팀)'))
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children',
                               verbose_name=_('parent team'))
    description = models.TextField(_('description'), blank=True)
    memo = models.TextField(_('memo'), blank=True, null=True, help_text=_('Free-text note shown on the organization page'))
    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('team')
        verbose_name_plural = _('teams')
        ordering = ['name']

    def __str__(self):
        return self.name

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'parentId': self.parent_id,
            'description': self.description,
            'memo': self.memo,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


# USER MANAGER (handles user creation)
class UserManager(BaseUserManager):
    """
    Custom user manager

    The stored email is the synthetic login address derived from the
    username (see credentials.build_credentials). Callers that start from
    a username + PIN should go through build_credentials first.
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a regular user

        Args:
            email (str): Synthetic login email (required)
            password (str): Already-transformed password
            **extra_fields: username, name, role, team, ...

        Raises:
            ValueError: If email is not provided
        """
        if not email:
            raise ValueError(_('Users must have an email address'))

        email = self.normalize_email(email).lower()

        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        extra_fields.setdefault('username', email.split('@')[0])

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)

        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True'))

        return self.create_user(email, password, **extra_fields)


# USER MODEL
class User(AbstractBaseUser, PermissionsMixin):
    """
    CRM user (agent, manager, administrator)

    Features:
    - Login id (username) + 4-digit PIN, adapted to email/password auth
    - Role-based permissions with an optional per-user custom override
    - Team membership
    - Activity tracking (last_activity_at, activity logs)
    """

    PERMISSION_MODE_CHOICES = [
        ('role_only', _('Role permissions')),
        ('custom_only', _('Custom permissions')),
    ]

    username_validator = RegexValidator(regex=r'^[a-zA-Z0-9_]{3,20}$',
                                        message=_('아이디는 3-20자의 영문, 숫자, 밑줄만 사용할 수 있습니다'))

    email = models.EmailField(_('email address'), unique=True, max_length=255, help_text=_('Synthetic login address (username@AUTH_EMAIL_DOMAIN)'))
    username = models.CharField(_('username'), max_length=20, unique=True, validators=[username_validator], help_text=_('Login id, 3-20 characters'))
    name = models.CharField(_('name'), max_length=100, blank=True, help_text=_('Display name (e.g., 김민준)'))

    role = models.ForeignKey(Role, on_delete=models.SET_NULL, null=True, blank=True, related_name='users', verbose_name=_('role'))
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name='members', verbose_name=_('team'))

    permissions = models.JSONField(_('custom permissions'), null=True, blank=True, help_text=_('Used only when permission mode is custom_only'))
    permission_mode = models.CharField(_('permission mode'), max_length=20, choices=PERMISSION_MODE_CHOICES, default='role_only')

    memo = models.TextField(_('memo'), blank=True, null=True)
    last_activity_at = models.DateTimeField(_('last activity'), null=True, blank=True)

    is_active = models.BooleanField(_('active'), default=True, help_text=_('Unselect this instead of deleting accounts.'))
    is_staff = models.BooleanField(_('staff status'), default=False, help_text=_('Designates whether the user can log into admin site.'))
    date_joined = models.DateTimeField(_('date joined'), default=timezone.now)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username', 'name']

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['name']
        indexes = [
            models.Index(fields=['username'], name='user_username_idx'),
            models.Index(fields=['team', 'is_active'], name='user_team_active_idx'),
        ]

    def __str__(self):
        if self.name:
            return f"{self.name} ({self.username})"
        return self.username

    def get_full_name(self):
        return self.name or self.username

    def get_short_name(self):
        return self.name or self.username

    # PERMISSION CHECKS
    def is_super_admin(self):
        return self.is_superuser or bool(self.role and self.role.is_super_admin())

    def is_admin(self):
        return self.is_super_admin()

    def get_role_permissions(self):
        return self.role.permissions if self.role else None

    def get_effective_permissions(self):
        """Nested permission object after applying super_admin / custom_only rules"""
        return resolve_permissions(
            role_permissions=self.get_role_permissions(),
            custom_permissions=self.permissions,
            permission_mode=self.permission_mode,
            is_super_admin=self.is_super_admin(),
        )

    def can(self, capability: Capability) -> bool:
        return has_capability(
            capability,
            role_permissions=self.get_role_permissions(),
            custom_permissions=self.permissions,
            permission_mode=self.permission_mode,
            is_super_admin=self.is_super_admin(),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'email': self.email,
            'roleId': self.role_id,
            'role': {'id': self.role.id, 'name': self.role.name} if self.role else None,
            'teamId': self.team_id,
            'team': {'id': self.team.id, 'name': self.team.name} if self.team else None,
            'isActive': self.is_active,
            'permissionMode': self.permission_mode,
            'memo': self.memo,
            'lastActivityAt': self.last_activity_at.isoformat() if self.last_activity_at else None,
            'createdAt': self.date_joined.isoformat(),
        }


# USER ACTIVITY LOG
class UserActivityLog(models.Model):
    """Append-only log of what a user did (login, customer edits, exports, ...)"""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='activity_logs', verbose_name=_('user'))
    action = models.CharField(_('action'), max_length=50, db_index=True, help_text=_('e.g., login, customer_update, export'))
    resource_type = models.CharField(_('resource type'), max_length=50, blank=True, null=True)
    resource_id = models.CharField(_('resource id'), max_length=64, blank=True, null=True)
    details = models.JSONField(_('details'), null=True, blank=True)
    created_at = models.DateTimeField(_('created at'), default=timezone.now, db_index=True)

    class Meta:
        verbose_name = _('user activity log')
        verbose_name_plural = _('user activity logs')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='activity_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.user} - {self.action}"

    @classmethod
    def log(cls, user, action, resource_type=None, resource_id=None, details=None):
        return cls.objects.create(
            user=user,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=details,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'action': self.action,
            'resource_type': self.resource_type,
            'resource_id': self.resource_id,
            'details': self.details,
            'created_at': self.created_at.isoformat(),
        }
