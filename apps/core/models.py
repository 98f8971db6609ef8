from django.db import models
from django.utils.text import slugify


DEFAULT_LANDING_SETTINGS = {
    'title': '상담 신청',
    'description': '지금 바로 상담을 신청하세요',
    'buttonText': '상담 신청하기',
    'successMessage': '상담 신청이 완료되었습니다',
    'privacyText': '개인정보 수집 및 이용에 동의합니다',
}


class Branch(models.Model):
    """Intake point (office or campaign) with its own public landing page"""

    # Basic Information
    name = models.CharField(max_length=100, help_text="Branch name (e.g. 강남지점)")
    slug = models.SlugField(max_length=100, unique=True, allow_unicode=True, help_text="Landing page URL segment (auto-generated)")
    description = models.TextField(blank=True, help_text="Shown under the landing page title")

    # Theming
    logo_url = models.CharField(max_length=500, blank=True, help_text="Logo URL (see branding upload)")
    primary_color = models.CharField(max_length=7, default='#3B82F6', help_text="Hex color code used by the landing page")
    landing_settings = models.JSONField(default=dict, blank=True,
                                        help_text="Landing copy: title, description, buttonText, successMessage, privacyText")

    # Status
    is_active = models.BooleanField(default=True, help_text="Inactive branches reject intake")

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Branch"
        verbose_name_plural = "Branches"
        ordering = ['name']
        indexes = [
            models.Index(fields=['slug'], name='branch_slug_idx'),
            models.Index(fields=['is_active'], name='branch_active_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name, allow_unicode=True)
        super().save(*args, **kwargs)

    def get_landing_settings(self):
        """Stored landing copy layered over the defaults"""
        merged = dict(DEFAULT_LANDING_SETTINGS)
        merged.update({k: v for k, v in (self.landing_settings or {}).items() if v})
        return merged

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'logoUrl': self.logo_url,
            'primaryColor': self.primary_color,
            'isActive': self.is_active,
            'landingSettings': self.landing_settings,
        }


class Setting(models.Model):
    """
    Generic key-value settings store

    Values are opaque JSON blobs: badge lists, column labels, custom columns,
    grid layouts, branding, the dashboard layout, ...
    """

    key = models.CharField(max_length=100, unique=True, help_text="Setting key (e.g. statusBadges)")
    value = models.JSONField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Setting"
        verbose_name_plural = "Settings"
        ordering = ['key']

    def __str__(self):
        return self.key
