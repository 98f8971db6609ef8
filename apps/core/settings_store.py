"""
Key-value settings store
========================

Thin layer over the Setting model plus the built-in defaults for the badge
and column-label blobs. Reads of badge lists merge stored entries with the
defaults so a partially saved list never hides a built-in status.
"""

import copy
import logging

from .models import Setting

logger = logging.getLogger(__name__)


# Keys the settings API accepts
SETTINGS_KEYS = (
    'statusBadges',
    'categoryBadges',
    'columnLabels',
    'customColumns',
    'excel_grid_layout',
    'branding',
)


DEFAULT_STATUS_BADGES = [
    {'id': 'prospect', 'label': '가망고객', 'color': '#1E40AF', 'bgColor': '#DBEAFE', 'hidden': False, 'order': 0, 'isDefault': True},
    {'id': 'in_progress', 'label': '진행중', 'color': '#B45309', 'bgColor': '#FEF3C7', 'hidden': False, 'order': 1, 'isDefault': True},
    {'id': 'completed', 'label': '완료', 'color': '#047857', 'bgColor': '#D1FAE5', 'hidden': False, 'order': 2, 'isDefault': True},
    {'id': 'callback', 'label': '재통화', 'color': '#6D28D9', 'bgColor': '#EDE9FE', 'hidden': False, 'order': 3, 'isDefault': True},
    {'id': 'absent', 'label': '부재', 'color': '#C2410C', 'bgColor': '#FFEDD5', 'hidden': False, 'order': 4, 'isDefault': True},
    {'id': 'cancelled', 'label': '취소', 'color': '#DC2626', 'bgColor': '#FEE2E2', 'hidden': False, 'order': 5, 'isDefault': True},
]

DEFAULT_CATEGORY_BADGES = [
    {'id': 'new_customer', 'label': '신규고객', 'color': '#0369A1', 'bgColor': '#E0F2FE', 'hidden': False, 'order': 0, 'isDefault': True},
    {'id': 'existing', 'label': '기존고객', 'color': '#4B5563', 'bgColor': '#F3F4F6', 'hidden': False, 'order': 1, 'isDefault': True},
    {'id': 'blacklist', 'label': '사고자(블랙)', 'color': '#DC2626', 'bgColor': '#FEE2E2', 'hidden': False, 'order': 2, 'isDefault': True},
    {'id': 'vip', 'label': 'VIP', 'color': '#B45309', 'bgColor': '#FEF3C7', 'hidden': False, 'order': 3, 'isDefault': True},
    {'id': 'duplicate', 'label': '중복', 'color': '#C2410C', 'bgColor': '#FFEDD5', 'hidden': False, 'order': 4, 'isDefault': True},
]

DEFAULT_COLUMN_LABELS = {
    'category': '분류',
    'status': '상태',
    'name': '이름',
    'phone': '전화번호',
    'birth_date': '생년월일',
    'gender': '성별',
    'address': '주소',
    'address_detail': '상세주소',
    'occupation': '직업',
    'income': '급여',
    'employment_period': '재직기간',
    'existing_loans': '보유대출',
    'loan_amount': '대출희망금액',
    'loan_purpose': '대출목적',
    'credit_score': '신용점수',
    'required_amount': '필요자금',
    'fund_purpose': '자금용도',
    'has_overdue': '연체유무',
    'has_license': '면허증유무',
    'has_insurance': '4대보험유무',
    'has_credit_card': '신용카드유무',
    'assigned_to': '담당자',
    'branch_id': '접수처',
    'notes': '메모',
    'callback_date': '콜백일시',
    'created_at': '등록일',
    'updated_at': '최종수정일',
}

FALLBACK_BADGE_COLOR = '#6B7280'
FALLBACK_BADGE_BG_COLOR = '#F3F4F6'


def get_setting(key, default=None):
    try:
        return Setting.objects.get(key=key).value
    except Setting.DoesNotExist:
        return default


def set_setting(key, value):
    setting, _ = Setting.objects.update_or_create(key=key, defaults={'value': value})
    logger.info(f"Setting '{key}' saved")
    return setting


def _sort_order(entry):
    order = entry.get('order')
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        return 999
    return order


def _merge_badges(stored, defaults):
    if not isinstance(stored, list):
        return copy.deepcopy(defaults)
    stored = [b for b in stored if isinstance(b, dict) and isinstance(b.get('id'), str)]
    stored_ids = {b['id'] for b in stored}
    missing = [copy.deepcopy(d) for d in defaults if d['id'] not in stored_ids]
    return sorted(stored + missing, key=_sort_order)


def get_status_badges():
    return _merge_badges(get_setting('statusBadges'), DEFAULT_STATUS_BADGES)


def get_category_badges():
    return _merge_badges(get_setting('categoryBadges'), DEFAULT_CATEGORY_BADGES)


def find_badge(badges, badge_id):
    """Badge with this id, or a neutral gray placeholder for unknown ids"""
    for badge in badges:
        if badge['id'] == badge_id:
            return badge
    return {
        'id': badge_id,
        'label': badge_id,
        'color': FALLBACK_BADGE_COLOR,
        'bgColor': FALLBACK_BADGE_BG_COLOR,
        'hidden': False,
        'order': 999,
    }


def get_column_labels():
    labels = dict(DEFAULT_COLUMN_LABELS)
    stored = get_setting('columnLabels')
    if isinstance(stored, dict):
        labels.update(stored)
    return labels


def get_custom_columns():
    stored = get_setting('customColumns')
    if not isinstance(stored, list):
        return []
    return sorted((c for c in stored if isinstance(c, dict)), key=_sort_order)


def read_setting_for_api(key):
    """Value returned by GET /api/settings/<key>, with defaults applied"""
    if key == 'statusBadges':
        return get_status_badges()
    if key == 'categoryBadges':
        return get_category_badges()
    if key == 'columnLabels':
        return get_column_labels()
    if key == 'customColumns':
        return get_custom_columns()
    return get_setting(key)
