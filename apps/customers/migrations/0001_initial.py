import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone', models.CharField(db_index=True, help_text='Digits only (e.g. 01012345678)', max_length=20)),
                ('name', models.CharField(blank=True, max_length=100, null=True)),
                ('birth_date', models.CharField(blank=True, help_text='Free text as entered (e.g. 900101)', max_length=20, null=True)),
                ('gender', models.CharField(blank=True, max_length=10, null=True)),
                ('address', models.CharField(blank=True, max_length=255, null=True)),
                ('address_detail', models.CharField(blank=True, max_length=255, null=True)),
                ('occupation', models.CharField(blank=True, max_length=100, null=True)),
                ('income', models.IntegerField(blank=True, help_text='Monthly income (만원)', null=True)),
                ('employment_period', models.CharField(blank=True, max_length=50, null=True)),
                ('existing_loans', models.IntegerField(blank=True, null=True)),
                ('loan_amount', models.IntegerField(blank=True, null=True)),
                ('loan_purpose', models.CharField(blank=True, max_length=255, null=True)),
                ('credit_score', models.IntegerField(blank=True, null=True)),
                ('required_amount', models.IntegerField(blank=True, null=True)),
                ('fund_purpose', models.CharField(blank=True, max_length=255, null=True)),
                ('has_overdue', models.BooleanField(default=False)),
                ('has_license', models.BooleanField(default=False)),
                ('has_insurance', models.BooleanField(default=False)),
                ('has_credit_card', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('prospect', '가망고객'), ('in_progress', '진행중'), ('completed', '완료'), ('callback', '재통화'), ('absent', '부재'), ('cancelled', '취소')], db_index=True, default='prospect', max_length=20)),
                ('category', models.CharField(choices=[('new_customer', '신규고객'), ('existing', '기존고객'), ('blacklist', '사고자(블랙)'), ('vip', 'VIP')], db_index=True, default='new_customer', max_length=20)),
                ('notes', models.TextField(blank=True, null=True)),
                ('callback_date', models.DateTimeField(blank=True, db_index=True, help_text='Scheduled call-back time', null=True)),
                ('is_duplicate', models.BooleanField(default=False, help_text='Phone already existed when this row was created')),
                ('custom_fields', models.JSONField(blank=True, default=dict)),
                ('source', models.CharField(default='landing', max_length=50)),
                ('utm_source', models.CharField(blank=True, max_length=100, null=True)),
                ('utm_medium', models.CharField(blank=True, max_length=100, null=True)),
                ('utm_campaign', models.CharField(blank=True, max_length=100, null=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_customers', to=settings.AUTH_USER_MODEL)),
                ('branch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customers', to='core.branch')),
            ],
            options={
                'verbose_name': 'Customer',
                'verbose_name_plural': 'Customers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='customer_status_created_idx'),
                    models.Index(fields=['assigned_to', 'status'], name='customer_assignee_status_idx'),
                    models.Index(fields=['branch', 'created_at'], name='customer_branch_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CustomerHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('field_name', models.CharField(max_length=50)),
                ('old_value', models.TextField(blank=True, null=True)),
                ('new_value', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='customers.customer')),
                ('user', models.ForeignKey(blank=True, help_text='Who made the change (null = system)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customer_changes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Customer History',
                'verbose_name_plural': 'Customer History',
                'ordering': ['-created_at'],
            },
        ),
    ]
