"""
Conditional widget colors
=========================

Rules are evaluated in list order and the first match wins. A rule never
raises: rules that cannot be evaluated (unknown operator, `between` without
an upper bound, changePercent rule with no change data) are skipped.
"""

import math
import numbers


COLOR_PRESETS = [
    {'name': '파랑', 'color': '#1E40AF', 'bgColor': '#DBEAFE'},
    {'name': '초록', 'color': '#047857', 'bgColor': '#D1FAE5'},
    {'name': '빨강', 'color': '#DC2626', 'bgColor': '#FEE2E2'},
    {'name': '노랑', 'color': '#B45309', 'bgColor': '#FEF3C7'},
    {'name': '보라', 'color': '#6D28D9', 'bgColor': '#EDE9FE'},
    {'name': '주황', 'color': '#C2410C', 'bgColor': '#FFEDD5'},
    {'name': '청록', 'color': '#0E7490', 'bgColor': '#CFFAFE'},
    {'name': '분홍', 'color': '#BE185D', 'bgColor': '#FCE7F3'},
]

ALERT_COLORS = {
    'success': {'color': '#047857', 'bgColor': '#D1FAE5', 'label': '양호'},
    'warning': {'color': '#B45309', 'bgColor': '#FEF3C7', 'label': '주의'},
    'danger': {'color': '#DC2626', 'bgColor': '#FEE2E2', 'label': '위험'},
    'info': {'color': '#1E40AF', 'bgColor': '#DBEAFE', 'label': '정보'},
}

OPERATOR_LABELS = {
    'gt': '보다 큼 (>)',
    'gte': '이상 (>=)',
    'lt': '보다 작음 (<)',
    'lte': '이하 (<=)',
    'eq': '같음 (=)',
    'neq': '같지 않음 (!=)',
    'between': '범위 내',
}

OPERATORS = tuple(OPERATOR_LABELS)
RULE_FIELDS = ('value', 'changePercent')


def _is_number(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def evaluate_condition(value, operator, threshold, threshold2=None):
    if operator == 'gt':
        return value > threshold
    if operator == 'gte':
        return value >= threshold
    if operator == 'lt':
        return value < threshold
    if operator == 'lte':
        return value <= threshold
    if operator == 'eq':
        return value == threshold
    if operator == 'neq':
        return value != threshold
    if operator == 'between':
        return threshold2 is not None and threshold <= value <= threshold2
    return False


def _rule_result(rule):
    result = {'color': rule['color'], 'bgColor': rule['bgColor']}
    if rule.get('label'):
        result['label'] = rule['label']
    return result


def evaluate(value, change_percent, rules):
    """
    First matching rule's colors for a widget value

    Args:
        value: Current numeric value of the widget
        change_percent: Change against the previous period, or None
        rules: Ordered list of rule dicts

    Returns:
        dict | None: {color, bgColor, label?} or None for default styling
    """
    if not rules or not _is_number(value):
        return None

    for rule in rules:
        if rule.get('field') == 'changePercent':
            if not _is_number(change_percent):
                continue
            comparand = change_percent
        else:
            comparand = value

        threshold = rule.get('value')
        threshold2 = rule.get('value2')
        if not _is_number(threshold):
            continue
        if rule.get('operator') == 'between' and not _is_number(threshold2):
            continue

        if evaluate_condition(comparand, rule.get('operator'), threshold, threshold2):
            return _rule_result(rule)

    return None


def default_trend_rules():
    return [
        {
            'id': 'rule-1',
            'field': 'changePercent',
            'operator': 'gte',
            'value': 10,
            'color': ALERT_COLORS['success']['color'],
            'bgColor': ALERT_COLORS['success']['bgColor'],
            'label': '양호',
        },
        {
            'id': 'rule-2',
            'field': 'changePercent',
            'operator': 'lt',
            'value': 0,
            'color': ALERT_COLORS['danger']['color'],
            'bgColor': ALERT_COLORS['danger']['bgColor'],
            'label': '위험',
        },
    ]


def evaluate_trend_color(change_percent, rules=None):
    """Color for a change-over-period badge (defaults: >= 10% good, < 0% bad)"""
    if not _is_number(change_percent):
        return None
    # value is irrelevant for changePercent rules but must be finite
    return evaluate(0, change_percent, rules if rules is not None else default_trend_rules())


def change_percent(current, previous):
    """Percent change, or None when there is no usable previous value"""
    if not _is_number(current) or not _is_number(previous) or previous == 0:
        return None
    return (current - previous) / previous * 100


def validate_color_rules(value):
    """
    Returns:
        str | None: error message, or None when valid
    """
    if value is None:
        return None
    if not isinstance(value, list):
        return 'colorRules must be a list'

    for index, rule in enumerate(value):
        if not isinstance(rule, dict):
            return f"colorRules[{index}] must be an object"
        if rule.get('field', 'value') not in RULE_FIELDS:
            return f"colorRules[{index}].field must be value or changePercent"
        if rule.get('operator') not in OPERATORS:
            return f"colorRules[{index}].operator must be one of {', '.join(OPERATORS)}"
        if not _is_number(rule.get('value')):
            return f"colorRules[{index}].value must be a number"
        if 'value2' in rule and rule['value2'] is not None and not _is_number(rule['value2']):
            return f"colorRules[{index}].value2 must be a number"
        for key in ('color', 'bgColor'):
            if not isinstance(rule.get(key), str) or not rule.get(key):
                return f"colorRules[{index}].{key} is required"
    return None
