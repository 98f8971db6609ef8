from django import forms
from django.core.exceptions import ValidationError

from .defaults import WIDGET_TYPES
from .store import GRID_COLUMNS


class WidgetCreateForm(forms.Form):
    """POST /api/dashboard/widgets body: {type, title?, w?, h?, x?, y?, config?}"""

    type = forms.ChoiceField(
        choices=[(t, t) for t in WIDGET_TYPES],
        error_messages={
            'required': 'type is required',
            'invalid_choice': 'Unknown widget type: %(value)s',
        },
    )
    title = forms.CharField(max_length=100, required=False)
    w = forms.IntegerField(required=False, min_value=1, max_value=GRID_COLUMNS)
    h = forms.IntegerField(required=False, min_value=1)
    x = forms.IntegerField(required=False, min_value=0)
    y = forms.IntegerField(required=False, min_value=0)
    config = forms.JSONField(required=False)

    def clean_config(self):
        config = self.cleaned_data.get('config')
        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValidationError('config must be an object')
        return config
