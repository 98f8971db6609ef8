"""
Dashboard aggregations
======================

Read-only queries over customers and their change history that back the
dashboard widgets (goal gauge, performance table, stale/incomplete lists,
activity timeline). Views only parse query params and shape responses.
"""

from collections import OrderedDict
from datetime import datetime, time, timedelta

from django.utils import timezone

from apps.customers.models import Customer, CustomerHistory


GOAL_METRICS = ('completed', 'total', 'success_rate')
UNASSIGNED_NAME = '미배정'
UNASSIGNED_TEAM_NAME = '미배정 팀'

# status -> counter key on a performance row
STATUS_COUNTERS = OrderedDict([
    ('completed', 'completedCount'),
    ('in_progress', 'inProgressCount'),
    ('prospect', 'prospectCount'),
    ('callback', 'callbackCount'),
    ('absent', 'absentCount'),
    ('cancelled', 'cancelledCount'),
])


def _rate(part, whole):
    return round(part / whole * 100, 1) if whole > 0 else 0


# PERIODS
def day_bounds(day):
    """First and last instant of a local calendar day"""
    start = timezone.make_aware(datetime.combine(day, time.min))
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def month_bounds(now=None, months_back=0):
    """
    First and last instant of a local calendar month

    Args:
        now: Reference instant (defaults to timezone.now())
        months_back: 0 for the month containing now, 1 for the one before, ...
    """
    local = timezone.localtime(now or timezone.now())
    year, month = local.year, local.month - months_back
    while month < 1:
        month += 12
        year -= 1

    start = local.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)
    if month == 12:
        next_start = start.replace(year=year + 1, month=1)
    else:
        next_start = start.replace(month=month + 1)
    return start, next_start - timedelta(microseconds=1)


# GOAL
def goal_metric(customers, metric):
    """completed count, total count or success rate over a customer queryset"""
    total = customers.count()
    completed = customers.filter(status='completed').count()
    if metric == 'total':
        return total
    if metric == 'success_rate':
        return _rate(completed, total)
    return completed


def goal_percentage(current, goal):
    if goal > 0:
        return round(current / goal * 100, 1)
    return 100 if current > 0 else 0


def goal_trend(percentage):
    if percentage > 100:
        return 'up'
    if percentage < 80:
        return 'down'
    return 'same'


def goal_summary(metric='completed', goal_type='previous_month', manual_goal=None, assigned_to=None, now=None):
    """
    Current-month value against a goal

    The goal is either a manual number or the same metric over the previous
    month. A manual goal type without a usable number falls back to the
    previous month.
    """
    if metric not in GOAL_METRICS:
        metric = 'completed'

    customers = Customer.objects.all()
    if assigned_to is not None:
        customers = customers.filter(assigned_to_id=assigned_to)

    current_start, current_end = month_bounds(now)
    previous_start, previous_end = month_bounds(now, months_back=1)

    current = goal_metric(customers.filter(created_at__gte=current_start, created_at__lte=current_end), metric)

    if goal_type == 'manual' and manual_goal is not None:
        goal = manual_goal
    else:
        goal = goal_metric(customers.filter(created_at__gte=previous_start, created_at__lte=previous_end), metric)

    percentage = goal_percentage(current, goal)
    return {
        'current': current,
        'goal': goal,
        'percentage': percentage,
        'trend': goal_trend(percentage),
        'metric': metric,
        'goalType': goal_type,
        'period': {
            'current': {'start': current_start.isoformat(), 'end': current_end.isoformat()},
            'previous': {'start': previous_start.isoformat(), 'end': previous_end.isoformat()}
            if goal_type == 'previous_month' else None,
        },
    }


# PERFORMANCE
def _empty_row(key, name, team_id=None, team_name=None):
    row = {'id': key, 'name': name, 'teamId': team_id, 'teamName': team_name, 'totalCount': 0}
    for counter in STATUS_COUNTERS.values():
        row[counter] = 0
    return row


def performance_rows(customers, group_by='assignee'):
    """
    Per-assignee (or per-team) status counts, ranked by completed count

    Customers without an assignee (or whose assignee has no team) are grouped
    under 'unassigned'.
    """
    rows = OrderedDict()
    for customer in customers.select_related('assigned_to__team'):
        user = customer.assigned_to
        team = user.team if user else None

        if group_by == 'team':
            key = team.id if team else 'unassigned'
            if key not in rows:
                rows[key] = _empty_row(key, team.name if team else UNASSIGNED_TEAM_NAME)
        else:
            key = user.id if user else 'unassigned'
            if key not in rows:
                rows[key] = _empty_row(
                    key,
                    (user.name or user.username) if user else UNASSIGNED_NAME,
                    team_id=team.id if team else None,
                    team_name=team.name if team else None,
                )

        row = rows[key]
        row['totalCount'] += 1
        counter = STATUS_COUNTERS.get(customer.status)
        if counter:
            row[counter] += 1

    # sorted() is stable: ties keep first-seen order
    ranked = sorted(rows.values(), key=lambda r: r['completedCount'], reverse=True)
    for rank, row in enumerate(ranked, start=1):
        row['successRate'] = _rate(row['completedCount'], row['totalCount'])
        row['rank'] = rank
    return ranked


# LISTS
def missing_fields(customer):
    missing = []
    if not (customer.name or '').strip():
        missing.append('name')
    if not (customer.notes or '').strip():
        missing.append('notes')
    return missing


def incomplete_customers(days_back=7, limit=20, assigned_to=None, now=None):
    """Recent open customers still missing a name or notes"""
    since = (now or timezone.now()) - timedelta(days=days_back)
    customers = (
        Customer.objects.select_related('assigned_to')
        .filter(status__in=('prospect', 'in_progress'), created_at__gte=since)
        .order_by('-created_at')
    )
    if assigned_to is not None:
        customers = customers.filter(assigned_to_id=assigned_to)

    # limit applies before the missing-field filter
    rows = []
    for customer in customers[:limit]:
        missing = missing_fields(customer)
        if not missing:
            continue
        rows.append({
            'id': customer.id,
            'name': customer.name,
            'phone': customer.phone,
            'status': customer.status,
            'createdAt': customer.created_at.isoformat(),
            'missingFields': missing,
            'assignedTo': customer.assigned_to_id,
            'assigneeName': customer.assigned_to.name if customer.assigned_to else None,
        })
    return rows


def stale_customers(days=7, status='in_progress', limit=20, assigned_to=None, now=None):
    """Customers in `status` whose last update is at least `days` old, oldest first"""
    now = now or timezone.now()
    customers = (
        Customer.objects.select_related('assigned_to')
        .filter(status=status, updated_at__lte=now - timedelta(days=days))
        .order_by('updated_at')
    )
    if assigned_to is not None:
        customers = customers.filter(assigned_to_id=assigned_to)

    return [
        {
            'id': c.id,
            'name': c.name,
            'phone': c.phone,
            'status': c.status,
            'updatedAt': c.updated_at.isoformat(),
            'createdAt': c.created_at.isoformat(),
            'daysSinceUpdate': (now - c.updated_at).days,
            'assignedTo': c.assigned_to_id,
            'assigneeName': c.assigned_to.name if c.assigned_to else None,
            'notes': c.notes,
        }
        for c in customers[:limit]
    ]


# TIMELINE
ACTIVITY_TYPES = {
    'status': 'status_change',
    'assigned_to': 'assignment',
    'notes': 'note_update',
    'callback_date': 'callback_set',
}

ACTIVITY_DESCRIPTIONS = {
    'status': '{name}의 상태가 변경되었습니다',
    'assigned_to': '{name}의 담당자가 변경되었습니다',
    'notes': '{name}에게 메모가 추가되었습니다',
    'callback_date': '{name}의 재통화 일정이 설정되었습니다',
}
DEFAULT_ACTIVITY_DESCRIPTION = '{name}의 정보가 업데이트되었습니다'


def activity_type(field_name):
    return ACTIVITY_TYPES.get(field_name, 'update')


def activity_description(field_name, customer_name=None):
    template = ACTIVITY_DESCRIPTIONS.get(field_name, DEFAULT_ACTIVITY_DESCRIPTION)
    return template.format(name=customer_name or '고객')


def timeline(limit=20, assigned_to=None):
    """Most recent customer changes, newest first"""
    entries = CustomerHistory.objects.select_related('customer', 'user').order_by('-created_at', '-id')
    if assigned_to is not None:
        entries = entries.filter(customer__assigned_to_id=assigned_to)

    return [
        {
            'id': h.id,
            'customerId': h.customer_id,
            'customerName': h.customer.name or None,
            'customerPhone': h.customer.phone or None,
            'action': activity_type(h.field_name),
            'fieldName': h.field_name,
            'oldValue': h.old_value,
            'newValue': h.new_value,
            'description': activity_description(h.field_name, h.customer.name),
            'userId': h.user_id,
            'userName': h.user.name if h.user else None,
            'createdAt': h.created_at.isoformat(),
        }
        for h in entries[:limit]
    ]
