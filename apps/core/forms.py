import math

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from PIL import Image, UnidentifiedImageError


# Raster types are opened with Pillow to make sure the bytes match the label
RASTER_CONTENT_TYPES = ('image/png', 'image/jpeg', 'image/x-icon')

BRANDING_TYPE_CHOICES = [
    ('logo', 'Logo'),
    ('favicon', 'Favicon'),
    ('og', 'Social preview'),
]


class BrandingUploadForm(forms.Form):

    file = forms.FileField(error_messages={'required': 'No file provided'})
    type = forms.ChoiceField(choices=BRANDING_TYPE_CHOICES, initial='logo', required=False)

    def clean_file(self):
        upload = self.cleaned_data['file']

        if upload.content_type not in settings.BRANDING_ALLOWED_CONTENT_TYPES:
            raise ValidationError('Invalid file type')

        if upload.size > settings.BRANDING_MAX_UPLOAD_SIZE:
            max_mb = settings.BRANDING_MAX_UPLOAD_SIZE // (1024 * 1024)
            raise ValidationError(f'File too large (max {max_mb}MB)')

        if upload.content_type in RASTER_CONTENT_TYPES:
            try:
                with Image.open(upload) as image:
                    image.verify()
            except (UnidentifiedImageError, OSError, SyntaxError):
                raise ValidationError('Invalid image file')
            finally:
                upload.seek(0)

        return upload

    def clean_type(self):
        return self.cleaned_data.get('type') or 'logo'


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _validate_entries(value, label):
    """Badge and custom-column lists: objects with a string id and an optional numeric order"""
    if not isinstance(value, list):
        raise ValidationError(f'{label} must be a list')
    seen = set()
    for entry in value:
        if not isinstance(entry, dict):
            raise ValidationError(f'{label} entries must be objects')
        entry_id = entry.get('id')
        if not isinstance(entry_id, str) or not entry_id:
            raise ValidationError(f'{label} entries need a string id')
        if entry_id in seen:
            raise ValidationError(f'Duplicate id in {label}: {entry_id}')
        seen.add(entry_id)
        if 'order' in entry and not _is_number(entry['order']):
            raise ValidationError(f'order must be a number: {entry_id}')
        for text_key in ('label', 'color', 'bgColor'):
            if text_key in entry and not isinstance(entry[text_key], str):
                raise ValidationError(f'{text_key} must be a string: {entry_id}')
        if 'hidden' in entry and not isinstance(entry['hidden'], bool):
            raise ValidationError(f'hidden must be true or false: {entry_id}')


def _validate_column_labels(value, label):
    if not isinstance(value, dict):
        raise ValidationError(f'{label} must be an object')
    for column, text in value.items():
        if not isinstance(text, str):
            raise ValidationError(f'Label must be a string: {column}')


def _validate_object(value, label):
    if value is not None and not isinstance(value, dict):
        raise ValidationError(f'{label} must be an object')


SETTING_VALIDATORS = {
    'statusBadges': _validate_entries,
    'categoryBadges': _validate_entries,
    'customColumns': _validate_entries,
    'columnLabels': _validate_column_labels,
    'branding': _validate_object,
}


class SettingUpdateForm(forms.Form):
    """
    PUT /api/settings/<key> body: {value}

    Structured keys are checked before they are stored, since every later
    read merges and sorts them. excel_grid_layout stays opaque.
    """

    def __init__(self, key, *args, **kwargs):
        self.key = key
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned_data = super().clean()
        if 'value' not in self.data:
            raise ValidationError('value is required')

        value = self.data['value']
        validator = SETTING_VALIDATORS.get(self.key)
        if validator:
            validator(value, self.key)

        cleaned_data['value'] = value
        return cleaned_data
