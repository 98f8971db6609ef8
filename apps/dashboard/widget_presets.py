"""Style, conditional-color and grid-size presets offered by the widget editor"""

import copy
import uuid


STYLE_PRESETS = [
    {'id': 'default', 'name': '기본', 'titleSize': 'auto', 'valueSize': 'auto', 'iconSize': 'auto', 'spacing': 'normal'},
    {'id': 'emphasis', 'name': '강조', 'titleSize': 'lg', 'valueSize': '4xl', 'iconSize': 'lg', 'spacing': 'spacious',
     'iconColor': '#3B82F6', 'valueColor': '#3B82F6'},
    {'id': 'compact', 'name': '컴팩트', 'titleSize': 'xs', 'valueSize': 'xl', 'iconSize': 'sm', 'spacing': 'compact'},
    {'id': 'wide', 'name': '넓은', 'titleSize': 'base', 'valueSize': '3xl', 'iconSize': 'md', 'spacing': 'spacious'},
    {'id': 'success', 'name': '성공강조', 'titleSize': 'base', 'valueSize': '3xl', 'iconSize': 'md', 'spacing': 'normal',
     'iconColor': '#16A34A', 'valueColor': '#16A34A'},
    {'id': 'warning', 'name': '경고', 'titleSize': 'base', 'valueSize': '3xl', 'iconSize': 'md', 'spacing': 'normal',
     'iconColor': '#F59E0B', 'valueColor': '#F59E0B'},
    {'id': 'danger', 'name': '위험', 'titleSize': 'base', 'valueSize': '3xl', 'iconSize': 'md', 'spacing': 'normal',
     'iconColor': '#EF4444', 'valueColor': '#EF4444'},
]

GREEN = ('#16A34A', '#DCFCE7')
AMBER = ('#F59E0B', '#FEF3C7')
RED = ('#DC2626', '#FEE2E2')


def _rule(operator, value, colors, label):
    return {'field': 'value', 'operator': operator, 'value': value, 'color': colors[0], 'bgColor': colors[1], 'label': label}


CONDITIONAL_PRESETS = [
    {
        'id': 'success-fail',
        'name': '성공/실패',
        'description': '비율 위젯용: 70% 이상 성공, 50% 미만 위험',
        'rules': [_rule('gte', 70, GREEN, '성공'), _rule('lt', 50, RED, '위험')],
    },
    {
        'id': 'three-levels',
        'name': '3단계 등급',
        'description': '비율 위젯용: 우수/보통/미달 3단계',
        'rules': [_rule('gte', 80, GREEN, '우수'), _rule('gte', 50, AMBER, '보통'), _rule('lt', 50, RED, '미달')],
    },
    {
        'id': 'warning-threshold',
        'name': '경고 임계값',
        'description': '숫자 위젯용: 100 이상 정상, 30 미만 경고',
        'rules': [_rule('gte', 100, GREEN, '정상'), _rule('lt', 30, RED, '경고')],
    },
    {
        'id': 'absence-monitoring',
        'name': '부재/취소 감시',
        'description': '역방향: 30% 이상 위험, 10% 미만 양호',
        'rules': [_rule('gte', 30, RED, '위험'), _rule('lt', 10, GREEN, '양호')],
    },
]

GRID_SIZE_PRESETS = [
    {'id': 'compact', 'name': '컴팩트', 'description': '2×2', 'w': 2, 'h': 2, 'recommended': ['stat']},
    {'id': 'small', 'name': '기본', 'description': '3×2', 'w': 3, 'h': 2, 'recommended': ['stat']},
    {'id': 'medium', 'name': '중간', 'description': '4×2', 'w': 4, 'h': 2, 'recommended': ['stat', 'chart']},
    {'id': 'wide', 'name': '가로형', 'description': '6×2', 'w': 6, 'h': 2, 'recommended': ['stat', 'chart']},
    {'id': 'tall', 'name': '세로형', 'description': '3×4', 'w': 3, 'h': 4, 'recommended': ['chart']},
    {'id': 'large', 'name': '크게', 'description': '6×4', 'w': 6, 'h': 4, 'recommended': ['chart']},
    {'id': 'extra-large', 'name': '초대형', 'description': '12×4', 'w': 12, 'h': 4, 'recommended': ['chart']},
]

STYLE_KEYS = ('titleSize', 'valueSize', 'iconSize', 'spacing', 'iconColor', 'valueColor')


def _find(presets, preset_id):
    for preset in presets:
        if preset['id'] == preset_id:
            return preset
    return None


def style_overrides_from_preset(preset_id):
    """styleOverrides dict for a style preset id, or None if unknown"""
    preset = _find(STYLE_PRESETS, preset_id)
    if preset is None:
        return None
    return {key: preset.get(key, '') for key in STYLE_KEYS}


def preset_id_for_style(overrides):
    """Reverse lookup: which style preset produced these overrides"""
    overrides = overrides or {}
    for preset in STYLE_PRESETS:
        if all((preset.get(key) or '') == (overrides.get(key) or '') for key in STYLE_KEYS):
            return preset['id']
    return None


def color_rules_from_preset(preset_id):
    """Fresh rule list (with new rule ids) for a conditional preset, or None"""
    preset = _find(CONDITIONAL_PRESETS, preset_id)
    if preset is None:
        return None
    batch = uuid.uuid4().hex[:8]
    return [dict(copy.deepcopy(rule), id=f'rule-{batch}-{index}') for index, rule in enumerate(preset['rules'])]


def grid_size_presets_for(widget_category):
    return [p for p in GRID_SIZE_PRESETS if widget_category in p['recommended']]


def grid_size_from_preset(preset_id):
    preset = _find(GRID_SIZE_PRESETS, preset_id)
    return (preset['w'], preset['h']) if preset else None


def grid_preset_for_size(w, h):
    for preset in GRID_SIZE_PRESETS:
        if preset['w'] == w and preset['h'] == h:
            return preset['id']
    return None
