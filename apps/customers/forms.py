from crispy_forms.helper import FormHelper
from crispy_forms.layout import Layout, Field, Submit, HTML
from crispy_forms.bootstrap import FormActions
from django import forms
from django.core.exceptions import ValidationError
from django.db.models import Q

from apps.accounts.models import User
from apps.core.models import Branch
from apps.core.utils import parse_datetime_param
from .models import Customer
from .utils import INVALID_PHONE_MESSAGE, is_full_length_mobile, is_valid_mobile, normalize_phone


# PUBLIC INTAKE
class CustomerIntakeForm(forms.Form):
    """POST /api/customers body: {phone, branchId, name?, source?, utmSource?, utmMedium?, utmCampaign?}"""

    phone = forms.CharField(max_length=30, error_messages={'required': 'Phone is required'})
    branchId = forms.IntegerField(error_messages={
        'required': '유효하지 않은 접수처입니다',
        'invalid': '유효하지 않은 접수처입니다',
    })
    name = forms.CharField(max_length=100, required=False)
    source = forms.CharField(max_length=50, required=False)
    utmSource = forms.CharField(max_length=100, required=False)
    utmMedium = forms.CharField(max_length=100, required=False)
    utmCampaign = forms.CharField(max_length=100, required=False)

    def clean_phone(self):
        phone = normalize_phone(self.cleaned_data['phone'])
        if not is_valid_mobile(phone):
            raise ValidationError(INVALID_PHONE_MESSAGE)
        return phone


class LandingForm(forms.Form):
    """Public consultation request rendered on /landing/<branch-slug>"""

    name = forms.CharField(
        max_length=100,
        required=False,
        label='이름',
        widget=forms.TextInput(attrs={'placeholder': '홍길동', 'autocomplete': 'name'}),
    )
    phone = forms.CharField(
        max_length=20,
        label='연락처',
        error_messages={'required': '연락처를 입력해주세요'},
        widget=forms.TextInput(attrs={'placeholder': '010-0000-0000', 'inputmode': 'numeric', 'autocomplete': 'tel'}),
    )
    agree_privacy = forms.BooleanField(
        label='개인정보 수집 및 이용에 동의합니다',
        error_messages={'required': '개인정보 수집 및 이용에 동의해주세요'},
    )

    # UTM parameters ride along from the landing URL query string
    utm_source = forms.CharField(required=False, widget=forms.HiddenInput)
    utm_medium = forms.CharField(required=False, widget=forms.HiddenInput)
    utm_campaign = forms.CharField(required=False, widget=forms.HiddenInput)

    def __init__(self, *args, **kwargs):
        landing_settings = kwargs.pop('landing_settings', {})
        super().__init__(*args, **kwargs)

        if landing_settings.get('privacyText'):
            self.fields['agree_privacy'].label = landing_settings['privacyText']

        self.helper = FormHelper()
        self.helper.form_method = 'post'
        self.helper.form_class = 'landing-form'

        self.helper.layout = Layout(
            Field('name', css_class='form-control-lg'),
            Field('phone', css_class='form-control-lg'),
            Field('agree_privacy'),
            'utm_source',
            'utm_medium',
            'utm_campaign',
            HTML('<p class="text-muted small mb-3">입력하신 정보는 상담 목적으로만 사용됩니다.</p>'),
            FormActions(
                Submit('submit', landing_settings.get('buttonText') or '상담 신청하기', css_class='btn btn-primary btn-lg w-100')
            ),
        )

    def clean_phone(self):
        phone = normalize_phone(self.cleaned_data['phone'])
        if not is_valid_mobile(phone):
            raise ValidationError(INVALID_PHONE_MESSAGE)
        return phone


class DuplicateCheckForm(forms.Form):
    """POST /api/customers/duplicate-check body: {phone, branchId?}"""

    phone = forms.CharField(max_length=30, error_messages={'required': 'Phone is required'})
    branchId = forms.IntegerField(required=False)

    def clean_phone(self):
        phone = normalize_phone(self.cleaned_data['phone'])
        if not is_full_length_mobile(phone):
            raise ValidationError(INVALID_PHONE_MESSAGE)
        return phone


# LIST FILTERS
SORTABLE_FIELDS = (
    'created_at',
    'updated_at',
    'name',
    'phone',
    'status',
    'category',
    'callback_date',
    'assigned_to',
    'branch_id',
    'income',
    'loan_amount',
    'credit_score',
    'required_amount',
)

BOOLEAN_FILTERS = {
    'isDuplicate': 'is_duplicate',
    'hasLicense': 'has_license',
    'hasInsurance': 'has_insurance',
    'hasCreditCard': 'has_credit_card',
}


def _split_csv(value):
    return [item for item in (value or '').split(',') if item]


class CustomerFilterForm(forms.Form):
    """
    Query-string filters shared by the list and the Excel export

    Bound to request.GET. Every field is optional; unparseable values are
    ignored rather than rejected so a stale bookmark still loads the list.
    """

    status = forms.CharField(required=False)
    statuses = forms.CharField(required=False)
    categories = forms.CharField(required=False)
    branchId = forms.CharField(required=False)
    assignedTo = forms.CharField(required=False)
    search = forms.CharField(required=False)
    sortBy = forms.CharField(required=False)
    sortOrder = forms.CharField(required=False)
    dateFrom = forms.CharField(required=False)
    dateTo = forms.CharField(required=False)

    def clean_sortBy(self):
        sort_by = self.cleaned_data.get('sortBy') or 'created_at'
        return sort_by if sort_by in SORTABLE_FIELDS else 'created_at'

    def clean_sortOrder(self):
        return 'asc' if self.cleaned_data.get('sortOrder') == 'asc' else 'desc'

    def filter_queryset(self, queryset):
        data = self.cleaned_data

        statuses = _split_csv(data.get('statuses'))
        if statuses:
            queryset = queryset.filter(status__in=statuses)
        elif data.get('status'):
            queryset = queryset.filter(status=data['status'])

        categories = _split_csv(data.get('categories'))
        if categories:
            queryset = queryset.filter(category__in=categories)

        if data.get('branchId', '').isdigit():
            queryset = queryset.filter(branch_id=int(data['branchId']))
        if data.get('assignedTo', '').isdigit():
            queryset = queryset.filter(assigned_to_id=int(data['assignedTo']))

        search = (data.get('search') or '').strip()
        if search:
            queryset = queryset.filter(
                Q(phone__icontains=search) | Q(name__icontains=search) | Q(address__icontains=search)
            )

        date_from = parse_datetime_param(data.get('dateFrom'))
        if date_from:
            queryset = queryset.filter(created_at__gte=date_from)
        date_to = parse_datetime_param(data.get('dateTo'), end_of_day=True)
        if date_to:
            queryset = queryset.filter(created_at__lte=date_to)

        # Present flags are compared against the literal 'true'
        for param, field in BOOLEAN_FILTERS.items():
            if param in self.data:
                queryset = queryset.filter(**{field: self.data.get(param) == 'true'})

        order_field = data['sortBy']
        if order_field == 'branch_id':
            order_field = 'branch'
        prefix = '' if data['sortOrder'] == 'asc' else '-'
        return queryset.order_by(f'{prefix}{order_field}', f'{prefix}id')


# INLINE EDIT
TEXT_FIELDS = (
    'name', 'birth_date', 'gender', 'address', 'address_detail', 'occupation',
    'employment_period', 'loan_purpose', 'fund_purpose', 'notes',
    'source', 'utm_source', 'utm_medium', 'utm_campaign',
)
INTEGER_FIELDS = ('income', 'existing_loans', 'loan_amount', 'credit_score', 'required_amount')
# Range of a models.IntegerField column
INTEGER_MIN, INTEGER_MAX = -2147483648, 2147483647
BOOLEAN_FIELDS = ('has_overdue', 'has_license', 'has_insurance', 'has_credit_card', 'is_duplicate')
CHOICE_FIELDS = {
    'status': dict(Customer.STATUS_CHOICES),
    'category': dict(Customer.CATEGORY_CHOICES),
}

# camelCase spellings accepted for the relation/date keys
FIELD_ALIASES = {
    'assignedTo': 'assigned_to',
    'branchId': 'branch_id',
    'callbackDate': 'callback_date',
    'customFields': 'custom_fields',
}

EDITABLE_FIELDS = (
    TEXT_FIELDS + INTEGER_FIELDS + BOOLEAN_FIELDS + tuple(CHOICE_FIELDS)
    + ('phone', 'assigned_to', 'branch_id', 'callback_date', 'custom_fields')
)


class CustomerUpdateForm(forms.Form):
    """
    PATCH /api/customers/<id> body: any subset of the editable columns

    Validated values end up in cleaned_data['changes'] as model attribute
    name -> Python value, ready for setattr().
    """

    def clean(self):
        cleaned_data = super().clean()
        changes = {}

        if not self.data:
            raise ValidationError('수정할 항목이 없습니다')

        for key, value in self.data.items():
            field = FIELD_ALIASES.get(key, key)
            if field not in EDITABLE_FIELDS:
                raise ValidationError(f'수정할 수 없는 항목입니다: {key}')
            changes.update(self._clean_value(field, value))

        cleaned_data['changes'] = changes
        return cleaned_data

    def _clean_value(self, field, value):
        if field in TEXT_FIELDS:
            if value is None:
                return {field: None}
            if not isinstance(value, str):
                raise ValidationError(f'{field} must be a string')
            max_length = Customer._meta.get_field(field).max_length
            value = value.strip()
            if max_length and len(value) > max_length:
                raise ValidationError(f'{field} is too long (max {max_length})')
            return {field: value or None}

        if field in INTEGER_FIELDS:
            if value is None or value == '':
                return {field: None}
            if isinstance(value, bool):
                raise ValidationError(f'{field} must be a number')
            try:
                number = int(value)
            except (TypeError, ValueError, OverflowError):
                raise ValidationError(f'{field} must be a number')
            if not INTEGER_MIN <= number <= INTEGER_MAX:
                raise ValidationError(f'{field} is out of range')
            return {field: number}

        if field in BOOLEAN_FIELDS:
            if not isinstance(value, bool):
                raise ValidationError(f'{field} must be true or false')
            return {field: value}

        if field in CHOICE_FIELDS:
            if not isinstance(value, str) or value not in CHOICE_FIELDS[field]:
                raise ValidationError(f'유효하지 않은 값입니다: {field}')
            return {field: value}

        if field == 'phone':
            phone = normalize_phone(value)
            if not is_valid_mobile(phone):
                raise ValidationError(INVALID_PHONE_MESSAGE)
            return {'phone': phone}

        if field == 'assigned_to':
            if value in (None, ''):
                return {'assigned_to': None}
            try:
                return {'assigned_to': User.objects.get(pk=value)}
            except (User.DoesNotExist, ValueError, TypeError, OverflowError):
                raise ValidationError('존재하지 않는 담당자입니다')

        if field == 'branch_id':
            if value in (None, ''):
                return {'branch': None}
            try:
                return {'branch': Branch.objects.get(pk=value)}
            except (Branch.DoesNotExist, ValueError, TypeError, OverflowError):
                raise ValidationError('유효하지 않은 접수처입니다')

        if field == 'callback_date':
            if value in (None, ''):
                return {'callback_date': None}
            parsed = parse_datetime_param(value) if isinstance(value, str) else None
            if parsed is None:
                raise ValidationError('올바른 날짜 형식이 아닙니다')
            return {'callback_date': parsed}

        if field == 'custom_fields':
            if not isinstance(value, dict):
                raise ValidationError('custom_fields must be an object')
            return {'custom_fields': value}

        raise ValidationError(f'수정할 수 없는 항목입니다: {field}')
