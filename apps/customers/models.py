from django.db import models
from django.utils import timezone

from apps.accounts.models import User
from apps.core.models import Branch


class Customer(models.Model):

    # Status choices
    STATUS_CHOICES = [
        ('prospect', '가망고객'),
        ('in_progress', '진행중'),
        ('completed', '완료'),
        ('callback', '재통화'),
        ('absent', '부재'),
        ('cancelled', '취소'),
    ]

    # Category choices
    CATEGORY_CHOICES = [
        ('new_customer', '신규고객'),
        ('existing', '기존고객'),
        ('blacklist', '사고자(블랙)'),
        ('vip', 'VIP'),
    ]

    # Basic Information
    phone = models.CharField(max_length=20, db_index=True, help_text='Digits only (e.g. 01012345678)')
    name = models.CharField(max_length=100, null=True, blank=True)
    birth_date = models.CharField(max_length=20, null=True, blank=True, help_text='Free text as entered (e.g. 900101)')
    gender = models.CharField(max_length=10, null=True, blank=True)
    address = models.CharField(max_length=255, null=True, blank=True)
    address_detail = models.CharField(max_length=255, null=True, blank=True)
    occupation = models.CharField(max_length=100, null=True, blank=True)

    # Financial Profile
    income = models.IntegerField(null=True, blank=True, help_text='Monthly income (만원)')
    employment_period = models.CharField(max_length=50, null=True, blank=True)
    existing_loans = models.IntegerField(null=True, blank=True)
    loan_amount = models.IntegerField(null=True, blank=True)
    loan_purpose = models.CharField(max_length=255, null=True, blank=True)
    credit_score = models.IntegerField(null=True, blank=True)
    required_amount = models.IntegerField(null=True, blank=True)
    fund_purpose = models.CharField(max_length=255, null=True, blank=True)
    has_overdue = models.BooleanField(default=False)
    has_license = models.BooleanField(default=False)
    has_insurance = models.BooleanField(default=False)
    has_credit_card = models.BooleanField(default=False)

    # Pipeline
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='prospect', db_index=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='new_customer', db_index=True)
    assigned_to = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_customers')
    branch = models.ForeignKey(Branch, on_delete=models.SET_NULL, null=True, blank=True, related_name='customers')
    notes = models.TextField(null=True, blank=True)
    callback_date = models.DateTimeField(null=True, blank=True, db_index=True, help_text='Scheduled call-back time')
    is_duplicate = models.BooleanField(default=False, help_text='Phone already existed when this row was created')
    custom_fields = models.JSONField(default=dict, blank=True)

    # Attribution
    source = models.CharField(max_length=50, default='landing')
    utm_source = models.CharField(max_length=100, null=True, blank=True)
    utm_medium = models.CharField(max_length=100, null=True, blank=True)
    utm_campaign = models.CharField(max_length=100, null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        verbose_name = 'Customer'
        verbose_name_plural = 'Customers'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='customer_status_created_idx'),
            models.Index(fields=['assigned_to', 'status'], name='customer_assignee_status_idx'),
            models.Index(fields=['branch', 'created_at'], name='customer_branch_created_idx'),
        ]

    def __str__(self):
        return f"{self.name or '이름 없음'} ({self.phone}) - {self.get_status_display()}"

    def to_dict(self):
        return {
            'id': self.id,
            'phone': self.phone,
            'name': self.name,
            'birth_date': self.birth_date,
            'gender': self.gender,
            'address': self.address,
            'address_detail': self.address_detail,
            'occupation': self.occupation,
            'income': self.income,
            'employment_period': self.employment_period,
            'existing_loans': self.existing_loans,
            'loan_amount': self.loan_amount,
            'loan_purpose': self.loan_purpose,
            'credit_score': self.credit_score,
            'required_amount': self.required_amount,
            'fund_purpose': self.fund_purpose,
            'has_overdue': self.has_overdue,
            'has_license': self.has_license,
            'has_insurance': self.has_insurance,
            'has_credit_card': self.has_credit_card,
            'status': self.status,
            'category': self.category,
            'assigned_to': self.assigned_to_id,
            'assigned_user': {'id': self.assigned_to.id, 'name': self.assigned_to.name} if self.assigned_to else None,
            'branch_id': self.branch_id,
            'branch': {'id': self.branch.id, 'name': self.branch.name} if self.branch else None,
            'notes': self.notes,
            'callback_date': self.callback_date.isoformat() if self.callback_date else None,
            'is_duplicate': self.is_duplicate,
            'source': self.source,
            'utm_source': self.utm_source,
            'utm_medium': self.utm_medium,
            'utm_campaign': self.utm_campaign,
            'custom_fields': self.custom_fields,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class CustomerHistory(models.Model):
    """One row per tracked field change on a customer"""

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='history')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='customer_changes',
                             help_text='Who made the change (null = system)')
    field_name = models.CharField(max_length=50)
    old_value = models.TextField(null=True, blank=True)
    new_value = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name = 'Customer History'
        verbose_name_plural = 'Customer History'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.customer_id}.{self.field_name}: {self.old_value} → {self.new_value}"
