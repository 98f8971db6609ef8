"""Widget catalog and the showcase layout a fresh dashboard starts with"""

import copy


WIDGET_TYPES = (
    'stat',
    'chart',
    'list',
    'gauge',
    'timeline',
    'table',
    'statusCount',
    'account',
    'libraryQuota',
    'successRate',
    'donutStats',
    'categoryStats',
    'dataTraffic',
    'circularQuota',
    'gradientGauge',
    'activityRings',
    'trendStat',
    'horizontalBar',
    'multiRingDonut',
    'taskProgress',
)

CHART_TYPES = ('pie', 'donut', 'bar', 'line', 'area', 'stacked-bar')
LIST_TYPES = ('callback', 'stale', 'new_incomplete')
TABLE_GROUP_BY = ('assignee', 'team')
GOAL_TYPES = ('manual', 'previous_month')
PERIODS = ('today', 'yesterday', 'week', 'month', 'lastMonth', 'custom')
DEFAULT_PERIOD = 'month'

# (w, h) used when a widget is added without an explicit size
DEFAULT_WIDGET_SIZES = {
    'stat': (3, 2),
    'chart': (3, 4),
    'list': (4, 4),
    'gauge': (3, 4),
    'timeline': (4, 4),
    'table': (5, 4),
    'statusCount': (2, 2),
    'account': (12, 2),
    'libraryQuota': (3, 2),
    'successRate': (3, 2),
    'donutStats': (3, 4),
    'categoryStats': (4, 4),
    'dataTraffic': (3, 4),
    'circularQuota': (2, 3),
    'gradientGauge': (3, 3),
    'activityRings': (3, 4),
    'trendStat': (3, 2),
    'horizontalBar': (3, 4),
    'multiRingDonut': (3, 4),
    'taskProgress': (4, 3),
}


def _widget(id, type, title, x, y, w, h, **config):
    return {'id': id, 'type': type, 'title': title, 'x': x, 'y': y, 'w': w, 'h': h, 'config': config}


DEFAULT_WIDGETS = [
    # STAT
    _widget('showcase-stat-1', 'stat', '[STAT] 총 고객', 0, 0, 3, 2, metric='totalCustomers', icon='users'),
    _widget('showcase-stat-2', 'stat', '[STAT] 가망고객', 3, 0, 3, 2, metric='prospectCustomers', icon='userPlus'),
    _widget('showcase-stat-3', 'stat', '[STAT] 성공률', 6, 0, 3, 2, metric='successRate', icon='percent', isPercentage=True),
    _widget('showcase-stat-4', 'stat', '[STAT] 완료', 9, 0, 3, 2, metric='completedCount', icon='checkCircle'),

    # CHART
    _widget('showcase-chart-pie', 'chart', '[CHART] 파이', 0, 2, 3, 4, chartType='pie'),
    _widget('showcase-chart-donut', 'chart', '[CHART] 도넛', 3, 2, 3, 4, chartType='donut'),
    _widget('showcase-chart-bar', 'chart', '[CHART] 바', 6, 2, 3, 4, chartType='bar'),
    _widget('showcase-chart-line', 'chart', '[CHART] 라인', 9, 2, 3, 4, chartType='line'),

    # LIST
    _widget('showcase-list-callback', 'list', '[LIST] 재통화', 0, 6, 4, 4, listType='callback', maxItems=5),
    _widget('showcase-list-stale', 'list', '[LIST] 정체건', 4, 6, 4, 4, listType='stale', maxItems=5),
    _widget('showcase-list-incomplete', 'list', '[LIST] 미입력', 8, 6, 4, 4, listType='new_incomplete', maxItems=5),

    # GAUGE / TIMELINE / TABLE
    _widget('showcase-gauge', 'gauge', '[GAUGE] 목표달성', 0, 10, 3, 4, goalType='previous_month'),
    _widget('showcase-timeline', 'timeline', '[TIMELINE] 활동', 3, 10, 4, 4, maxItems=8),
    _widget('showcase-table', 'table', '[TABLE] 실적표', 7, 10, 5, 4, tableType='assignee', sortBy='completedCount'),

    # STATUS COUNT
    _widget('showcase-status-prospect', 'statusCount', '[STATUS] 가망', 0, 14, 2, 2, status='prospect'),
    _widget('showcase-status-inprogress', 'statusCount', '[STATUS] 진행', 2, 14, 2, 2, status='in_progress'),
    _widget('showcase-status-completed', 'statusCount', '[STATUS] 완료', 4, 14, 2, 2, status='completed'),
    _widget('showcase-status-callback', 'statusCount', '[STATUS] 재통화', 6, 14, 2, 2, status='callback'),
    _widget('showcase-status-absent', 'statusCount', '[STATUS] 부재', 8, 14, 2, 2, status='absent'),
    _widget('showcase-status-cancelled', 'statusCount', '[STATUS] 취소', 10, 14, 2, 2, status='cancelled'),

    # PANEL STYLE
    _widget('showcase-account', 'account', '[ACCOUNT] 계정정보', 0, 16, 12, 2),
    _widget('showcase-libraryQuota-1', 'libraryQuota', '[LIBRARY] 총고객', 0, 18, 3, 2, metric='totalCustomers'),
    _widget('showcase-libraryQuota-2', 'libraryQuota', '[LIBRARY] 가망', 3, 18, 3, 2, metric='prospectCustomers'),
    _widget('showcase-successRate', 'successRate', '[SUCCESS] 성공률', 6, 18, 3, 2),
    _widget('showcase-donutStats', 'donutStats', '[DONUT] 상태현황', 9, 18, 3, 4),
    _widget('showcase-categoryStats', 'categoryStats', '[CATEGORY] 담당자별', 0, 20, 4, 4),
    _widget('showcase-dataTraffic', 'dataTraffic', '[TRAFFIC] 일별추이', 4, 20, 3, 4),
    _widget('showcase-circular-1', 'circularQuota', '[CIRCULAR] 가망', 7, 20, 2, 3, targetMetric='prospect'),
    _widget('showcase-circular-2', 'circularQuota', '[CIRCULAR] 진행', 9, 22, 2, 3, targetMetric='in_progress'),

    # GAUGES AND RINGS
    _widget('showcase-gradientGauge', 'gradientGauge', '[GRADIENT] 목표달성', 0, 24, 3, 3),
    _widget('showcase-activityRings', 'activityRings', '[RINGS] 진행현황', 3, 24, 3, 4),
    _widget('showcase-trendStat', 'trendStat', '[TREND] 성공률추이', 6, 24, 3, 2),
    _widget('showcase-horizontalBar', 'horizontalBar', '[HBAR] 담당자실적', 9, 25, 3, 4),
    _widget('showcase-multiRingDonut', 'multiRingDonut', '[MULTI] 상태현황', 6, 26, 3, 4),
    _widget('showcase-taskProgress', 'taskProgress', '[TASK] 오늘할일', 0, 28, 4, 3),
]


def default_widgets():
    return copy.deepcopy(DEFAULT_WIDGETS)
