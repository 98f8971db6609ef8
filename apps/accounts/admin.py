from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _
from django.utils.html import format_html

from .models import Role, Team, User, UserActivityLog


# CUSTOM USER ADMIN
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        'username',
        'name',
        'role',
        'team',
        'permission_mode_badge',
        'is_active_badge',
        'last_activity_at',
    )
    list_display_links = ('username', 'name')
    list_filter = ('role', 'team', 'permission_mode', 'is_active', 'is_staff')
    search_fields = ('username', 'name', 'email', 'team__name')
    ordering = ('name',)
    list_per_page = 25
    list_select_related = ('role', 'team')

    fieldsets = (
        (_('Login Credentials'), {
            'fields': ('username', 'email', 'password'),
            'classes': ('wide',),
            'description': _('Email is derived from the username. Password is stored encrypted.')
        }),
        (_('Personal Information'), {
            'fields': ('name', 'memo'),
        }),
        (_('Organization & Role'), {
            'fields': ('team', 'role'),
        }),
        (_('CRM Permissions'), {
            'fields': ('permission_mode', 'permissions'),
            'classes': ('collapse',),
        }),
        (_('Django Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Activity Tracking'), {
            'fields': ('last_activity_at', 'date_joined', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (_('Login Credentials'), {
            'fields': ('username', 'email', 'password1', 'password2'),
            'classes': ('wide',),
        }),
        (_('Organization & Role'), {
            'fields': ('name', 'team', 'role'),
        }),
    )

    readonly_fields = ('date_joined', 'last_login', 'last_activity_at')

    def permission_mode_badge(self, obj):
        color = '#6D28D9' if obj.permission_mode == 'custom_only' else '#1E40AF'
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            color, obj.get_permission_mode_display()
        )

    permission_mode_badge.short_description = _('Permission mode')
    permission_mode_badge.admin_order_field = 'permission_mode'

    def is_active_badge(self, obj):
        if obj.is_active:
            return format_html(
                '<span style="background: #047857; color: white; padding: 3px 10px; '
                'border-radius: 3px; font-size: 11px;">✓ {}</span>', _('Active')
            )
        return format_html(
            '<span style="background: #DC2626; color: white; padding: 3px 10px; '
            'border-radius: 3px; font-size: 11px;">✗ {}</span>', _('Inactive')
        )

    is_active_badge.short_description = _('Status')
    is_active_badge.admin_order_field = 'is_active'

    def has_delete_permission(self, request, obj=None):
        if obj and obj == request.user:
            return False  # Cannot delete yourself
        return super().has_delete_permission(request, obj)


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('name', 'description', 'users_count', 'created_at')
    search_fields = ('name', 'description')

    def users_count(self, obj):
        return format_html(
            '<span style="color: #3B82F6; font-weight: bold;">{}</span>',
            obj.users.count()
        )

    users_count.short_description = _('Users')


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'parent', 'members_count', 'updated_at')
    list_filter = ('parent',)
    search_fields = ('name', 'description', 'memo')

    def members_count(self, obj):
        return obj.members.filter(is_active=True).count()

    members_count.short_description = _('Active members')


@admin.register(UserActivityLog)
class UserActivityLogAdmin(admin.ModelAdmin):
    list_display = ('user', 'action', 'resource_type', 'resource_id', 'created_at')
    list_filter = ('action', 'resource_type')
    search_fields = ('user__username', 'user__name', 'action')
    readonly_fields = ('user', 'action', 'resource_type', 'resource_id', 'details', 'created_at')
    date_hierarchy = 'created_at'


# ADMIN SITE CUSTOMIZATION
admin.site.site_header = _('Lead CRM Administration')
admin.site.site_title = _('Lead CRM')
admin.site.index_title = _('Lead CRM Admin Panel')
