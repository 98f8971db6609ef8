from django import forms
from django.core.exceptions import ValidationError

from .credentials import validate_password, validate_username
from .models import Role, Team, User
from .permissions import PERMISSION_MODES, validate_permission_structure


# Every form here is bound to a decoded JSON body (dict), not request.POST.


class LoginForm(forms.Form):

    username = forms.CharField(max_length=20, error_messages={'required': '아이디를 입력해주세요'})
    password = forms.CharField(max_length=4, strip=False, error_messages={'required': '비밀번호를 입력해주세요'})

    def clean_username(self):
        username = self.cleaned_data['username'].strip()
        error = validate_username(username)
        if error:
            raise ValidationError(error)
        return username

    def clean_password(self):
        password = self.cleaned_data['password']
        error = validate_password(password)
        if error:
            raise ValidationError(error)
        return password


class UserCreateForm(forms.Form):
    """POST /api/users body: {username, name, password, roleId, teamId?, isActive?}"""

    username = forms.CharField(max_length=20, error_messages={'required': '아이디를 입력해주세요'})
    name = forms.CharField(max_length=100, error_messages={'required': '이름을 입력해주세요'})
    password = forms.CharField(strip=False, error_messages={'required': '비밀번호를 입력해주세요'})
    roleId = forms.ModelChoiceField(queryset=Role.objects.all(), error_messages={
        'required': '역할을 선택해주세요',
        'invalid_choice': '존재하지 않는 역할입니다',
    })
    teamId = forms.ModelChoiceField(queryset=Team.objects.all(), required=False, error_messages={
        'invalid_choice': '존재하지 않는 팀입니다',
    })
    isActive = forms.NullBooleanField(required=False)

    def clean_username(self):
        username = self.cleaned_data['username'].strip()
        error = validate_username(username)
        if error:
            raise ValidationError(error)
        if User.objects.filter(username__iexact=username).exists():
            raise ValidationError('이미 사용 중인 아이디입니다')
        return username

    def clean_password(self):
        password = self.cleaned_data['password']
        error = validate_password(password)
        if error:
            raise ValidationError(error)
        return password

    def clean_isActive(self):
        value = self.cleaned_data.get('isActive')
        return True if value is None else value


class UserUpdateForm(forms.Form):
    """
    PUT /api/users body: {id, name?, password?, roleId?, teamId?, isActive?}

    Only keys present in the body are applied (see changed_fields()).
    """

    id = forms.IntegerField(error_messages={'required': '사용자 ID가 필요합니다'})
    name = forms.CharField(max_length=100, required=False)
    password = forms.CharField(strip=False, required=False)
    roleId = forms.ModelChoiceField(queryset=Role.objects.all(), required=False, error_messages={
        'invalid_choice': '존재하지 않는 역할입니다',
    })
    teamId = forms.ModelChoiceField(queryset=Team.objects.all(), required=False, error_messages={
        'invalid_choice': '존재하지 않는 팀입니다',
    })
    isActive = forms.NullBooleanField(required=False)

    def clean_name(self):
        name = self.cleaned_data.get('name')
        if 'name' in self.data and not name:
            raise ValidationError('이름을 입력해주세요')
        return name

    def clean_password(self):
        password = self.cleaned_data.get('password')
        if 'password' in self.data:
            error = validate_password(password)
            if error:
                raise ValidationError(error)
        return password

    def clean_roleId(self):
        role = self.cleaned_data.get('roleId')
        if 'roleId' in self.data and role is None:
            raise ValidationError('역할을 선택해주세요')
        return role

    def changed_fields(self):
        """Map of model field -> new value, for keys present in the body"""
        mapping = {
            'name': 'name',
            'roleId': 'role',
            'teamId': 'team',
            'isActive': 'is_active',
        }
        changes = {}
        for key, field in mapping.items():
            if key in self.data:
                value = self.cleaned_data.get(key)
                if key == 'isActive' and value is None:
                    continue
                changes[field] = value
        return changes


class PermissionsForm(forms.Form):
    """PATCH /api/users/<id>/permissions body: {permissions: {...}|null, permissionMode}"""

    permissionMode = forms.ChoiceField(
        choices=[(mode, mode) for mode in PERMISSION_MODES],
        error_messages={
            'required': 'permissionMode is required',
            'invalid_choice': 'permissionMode must be role_only or custom_only',
        },
    )

    def clean(self):
        cleaned_data = super().clean()
        if 'permissions' not in self.data:
            raise ValidationError('permissions is required')
        error = validate_permission_structure(self.data.get('permissions'))
        if error:
            raise ValidationError(error)
        cleaned_data['permissions'] = self.data.get('permissions')
        return cleaned_data


class MemoForm(forms.Form):
    """PATCH .../memo body: {memo: string|null}"""

    def clean(self):
        cleaned_data = super().clean()
        if 'memo' not in self.data:
            raise ValidationError('memo is required')
        memo = self.data.get('memo')
        if memo is not None and not isinstance(memo, str):
            raise ValidationError('memo must be a string or null')
        cleaned_data['memo'] = memo
        return cleaned_data


class ActivityLogForm(forms.Form):
    """POST /api/users/<id>/activity body: {action, resourceType?, resourceId?, details?}"""

    action = forms.CharField(max_length=50, error_messages={'required': 'action은 필수입니다'})
    resourceType = forms.CharField(max_length=50, required=False)
    resourceId = forms.CharField(max_length=64, required=False)
    details = forms.JSONField(required=False)
