from django.contrib import admin
from django.utils.html import format_html

from apps.core.settings_store import DEFAULT_CATEGORY_BADGES, DEFAULT_STATUS_BADGES, find_badge
from .models import Customer, CustomerHistory
from .utils import format_phone


class CustomerHistoryInline(admin.TabularInline):

    model = CustomerHistory
    extra = 0  # History rows are written by signals
    readonly_fields = ['created_at', 'user', 'field_name', 'old_value', 'new_value']
    fields = ['created_at', 'user', 'field_name', 'old_value', 'new_value']
    classes = ['collapse']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('user')


def _badge_html(badge):
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 10px; '
        'border-radius: 3px; font-size: 11px;">{}</span>',
        badge['bgColor'], badge['color'], badge['label']
    )


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):

    list_display = [
        'id',
        'name',
        'phone_display',
        'status_badge',
        'category_badge',
        'branch',
        'assigned_to',
        'is_duplicate',
        'created_at',
    ]

    list_filter = [
        'status',
        'category',
        'branch',
        'assigned_to',
        'is_duplicate',
        'source',
        'created_at',
    ]

    search_fields = [
        'name',
        'phone',
        'address',
        'notes',
    ]

    ordering = ['-created_at']
    list_per_page = 50
    date_hierarchy = 'created_at'
    list_select_related = ['branch', 'assigned_to']

    fieldsets = [
        ('Basic Information', {
            'fields': ['phone', 'name', 'birth_date', 'gender', 'address', 'address_detail', 'occupation'],
        }),
        ('Financial Profile', {
            'fields': [
                'income', 'employment_period', 'existing_loans', 'loan_amount', 'loan_purpose',
                'credit_score', 'required_amount', 'fund_purpose',
                'has_overdue', 'has_license', 'has_insurance', 'has_credit_card',
            ],
            'classes': ['collapse'],
        }),
        ('Pipeline', {
            'fields': ['status', 'category', 'branch', 'assigned_to', 'callback_date', 'notes', 'is_duplicate'],
        }),
        ('Attribution', {
            'fields': ['source', 'utm_source', 'utm_medium', 'utm_campaign', 'custom_fields'],
            'classes': ['collapse'],
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at'],
            'classes': ['collapse'],
        }),
    ]

    readonly_fields = ['updated_at']
    inlines = [CustomerHistoryInline]

    def phone_display(self, obj):
        return format_phone(obj.phone)

    phone_display.short_description = 'Phone'
    phone_display.admin_order_field = 'phone'

    def status_badge(self, obj):
        return _badge_html(find_badge(DEFAULT_STATUS_BADGES, obj.status))

    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def category_badge(self, obj):
        return _badge_html(find_badge(DEFAULT_CATEGORY_BADGES, obj.category))

    category_badge.short_description = 'Category'
    category_badge.admin_order_field = 'category'

    def save_model(self, request, obj, form, change):
        obj._changed_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(CustomerHistory)
class CustomerHistoryAdmin(admin.ModelAdmin):
    list_display = ('customer', 'field_name', 'old_value', 'new_value', 'user', 'created_at')
    list_filter = ('field_name',)
    search_fields = ('customer__name', 'customer__phone')
    readonly_fields = ('customer', 'user', 'field_name', 'old_value', 'new_value', 'created_at')
    date_hierarchy = 'created_at'
