from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Branch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Branch name (e.g. 강남지점)', max_length=100)),
                ('slug', models.SlugField(allow_unicode=True, help_text='Landing page URL segment (auto-generated)', max_length=100, unique=True)),
                ('description', models.TextField(blank=True, help_text='Shown under the landing page title')),
                ('logo_url', models.CharField(blank=True, help_text='Logo URL (see branding upload)', max_length=500)),
                ('primary_color', models.CharField(default='#3B82F6', help_text='Hex color code used by the landing page', max_length=7)),
                ('landing_settings', models.JSONField(blank=True, default=dict, help_text='Landing copy: title, description, buttonText, successMessage, privacyText')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive branches reject intake')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Branch',
                'verbose_name_plural': 'Branches',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['slug'], name='branch_slug_idx'),
                    models.Index(fields=['is_active'], name='branch_active_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Setting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(help_text='Setting key (e.g. statusBadges)', max_length=100, unique=True)),
                ('value', models.JSONField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Setting',
                'verbose_name_plural': 'Settings',
                'ordering': ['key'],
            },
        ),
    ]
