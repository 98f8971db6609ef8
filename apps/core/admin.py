import json

from django.contrib import admin
from django.utils.html import format_html

from .models import Branch, Setting


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):

    list_display = [
        'name',
        'slug',
        'color_preview',
        'status_badge',
        'customers_count',
        'landing_link',
        'created_at',
    ]
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'slug', 'description')
        }),
        ('Landing Page', {
            'fields': ('logo_url', 'primary_color', 'landing_settings'),
            'description': 'landing_settings keys: title, description, buttonText, successMessage, privacyText'
        }),
        ('Status', {
            'fields': ('is_active',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def color_preview(self, obj):
        return format_html(
            '<div style="width: 40px; height: 20px; background-color: {}; '
            'border-radius: 3px; border: 1px solid #ddd;"></div>',
            obj.primary_color
        )

    color_preview.short_description = 'Color'

    def status_badge(self, obj):
        if obj.is_active:
            return format_html(
                '<span style="background-color: #28a745; color: white; '
                'padding: 3px 10px; border-radius: 3px; font-size: 11px;">'
                'Active</span>'
            )
        return format_html(
            '<span style="background-color: #dc3545; color: white; '
            'padding: 3px 10px; border-radius: 3px; font-size: 11px;">'
            'Inactive</span>'
        )

    status_badge.short_description = 'Status'

    def customers_count(self, obj):
        return format_html(
            '<span style="color: #667eea; font-weight: bold;">{} customers</span>',
            obj.customers.count()
        )

    customers_count.short_description = 'Customers'

    def landing_link(self, obj):
        return format_html('<a href="/landing/{}" target="_blank">/landing/{}</a>', obj.slug, obj.slug)

    landing_link.short_description = 'Landing page'


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):

    list_display = ['key', 'value_preview', 'updated_at']
    search_fields = ['key']
    readonly_fields = ['updated_at']

    def value_preview(self, obj):
        text = json.dumps(obj.value, ensure_ascii=False)
        return text if len(text) <= 80 else text[:77] + '...'

    value_preview.short_description = 'Value'
