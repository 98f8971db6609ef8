import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date
from django.views.decorators.http import require_http_methods

from apps.accounts.decorators import api_login_required, capability_required
from apps.accounts.permissions import Capability
from apps.core.utils import first_form_error, json_error, load_body, parse_datetime_param, parse_int
from apps.customers.models import Customer
from .defaults import PERIODS, WIDGET_TYPES
from .forms import WidgetCreateForm
from .metrics import (
    day_bounds,
    goal_summary,
    incomplete_customers,
    performance_rows,
    stale_customers,
    timeline,
)
from .store import (
    DashboardStore,
    DatabaseSettingsBackend,
    LayoutPersistError,
    PresetNotFoundError,
    WidgetConfigError,
    WidgetNotFoundError,
)
from .widget_colors import ALERT_COLORS, COLOR_PRESETS, OPERATOR_LABELS, change_percent, evaluate, evaluate_trend_color
from .widget_design import (
    ICON_SIZE_OPTIONS,
    SPACING_OPTIONS,
    TIER_ORDER,
    TITLE_SIZE_OPTIONS,
    VALUE_SIZE_OPTIONS,
    apply_overrides,
    category_for_widget_type,
    get_tokens,
    legacy_tier,
    resolve_tier,
)
from .widget_presets import (
    CONDITIONAL_PRESETS,
    GRID_SIZE_PRESETS,
    STYLE_PRESETS,
    color_rules_from_preset,
    grid_size_from_preset,
    style_overrides_from_preset,
)

logger = logging.getLogger(__name__)


DATE_RANGE_REQUIRED_MESSAGE = 'dateFrom and dateTo are required'
WIDGET_NOT_FOUND_MESSAGE = '위젯을 찾을 수 없습니다'
PRESET_NOT_FOUND_MESSAGE = '프리셋을 찾을 수 없습니다'
LAYOUT_SAVE_FAILED_MESSAGE = '대시보드 레이아웃 저장 실패'


def _assignee_scope(request):
    """
    assignedTo filter for aggregation queries

    Users without dashboard.viewAll only ever see their own customers.
    """
    if request.user.can(Capability.DASHBOARD_VIEW_ALL):
        return parse_int(request.GET.get('assignedTo'), None)
    return request.user.id


def _date_range(request):
    date_from = parse_datetime_param(request.GET.get('dateFrom'))
    date_to = parse_datetime_param(request.GET.get('dateTo'), end_of_day=True)
    return date_from, date_to


# AGGREGATIONS
@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def stats_api(request):
    """Customers created in a date range, with status and assignee"""
    date_from, date_to = _date_range(request)
    if date_from is None or date_to is None:
        return json_error(DATE_RANGE_REQUIRED_MESSAGE, status=400)

    customers = Customer.objects.select_related('assigned_to').filter(
        created_at__gte=date_from, created_at__lte=date_to,
    )
    assigned_to = _assignee_scope(request)
    if assigned_to is not None:
        customers = customers.filter(assigned_to_id=assigned_to)

    try:
        rows = [
            {
                'id': c.id,
                'status': c.status,
                'created_at': c.created_at.isoformat(),
                'assigned_to': c.assigned_to_id,
                'user': {'id': c.assigned_to.id, 'name': c.assigned_to.name} if c.assigned_to else None,
            }
            for c in customers
        ]
    except Exception as e:
        logger.error(f"Dashboard stats error: {e}", exc_info=True)
        return json_error('Failed to fetch stats', status=500)

    return JsonResponse({'customers': rows})


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def callbacks_api(request):
    """Callbacks scheduled on one local day (today by default)"""
    day = parse_date(request.GET.get('date') or '') or timezone.localdate()
    day_start, day_end = day_bounds(day)
    limit = max(parse_int(request.GET.get('limit'), 20), 1)

    customers = (
        Customer.objects.select_related('assigned_to')
        .filter(callback_date__gte=day_start, callback_date__lte=day_end)
        .order_by('callback_date')
    )
    assigned_to = _assignee_scope(request)
    if assigned_to is not None:
        customers = customers.filter(assigned_to_id=assigned_to)

    try:
        callbacks = [
            {
                'id': c.id,
                'name': c.name,
                'phone': c.phone,
                'status': c.status,
                'callbackDate': c.callback_date.isoformat(),
                'assignedTo': c.assigned_to_id,
                'assigneeName': c.assigned_to.name if c.assigned_to else None,
                'notes': c.notes,
            }
            for c in customers[:limit]
        ]
    except Exception as e:
        logger.error(f"Dashboard callbacks error: {e}", exc_info=True)
        return json_error('Failed to fetch callbacks', status=500)

    return JsonResponse({'callbacks': callbacks, 'total': len(callbacks), 'date': day_start.isoformat()})


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def goal_api(request):
    """Monthly goal gauge: current month against a manual or previous-month goal"""
    manual_goal = None
    raw_goal = request.GET.get('manualGoal')
    if raw_goal:
        try:
            manual_goal = float(raw_goal)
        except ValueError:
            return json_error('manualGoal must be a number', status=400)

    try:
        summary = goal_summary(
            metric=request.GET.get('metric') or 'completed',
            goal_type=request.GET.get('goalType') or 'previous_month',
            manual_goal=manual_goal,
            assigned_to=_assignee_scope(request),
        )
    except Exception as e:
        logger.error(f"Dashboard goal error: {e}", exc_info=True)
        return json_error('Failed to fetch goal data', status=500)

    return JsonResponse(summary)


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def incomplete_api(request):
    try:
        rows = incomplete_customers(
            days_back=parse_int(request.GET.get('daysBack'), 7),
            limit=max(parse_int(request.GET.get('limit'), 20), 1),
            assigned_to=_assignee_scope(request),
        )
    except Exception as e:
        logger.error(f"Dashboard incomplete customers error: {e}", exc_info=True)
        return json_error('Failed to fetch incomplete customers', status=500)

    return JsonResponse({'incompleteCustomers': rows, 'total': len(rows)})


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def performance_api(request):
    """Per-assignee or per-team ranking over a date range"""
    date_from, date_to = _date_range(request)
    if date_from is None or date_to is None:
        return json_error(DATE_RANGE_REQUIRED_MESSAGE, status=400)

    group_by = 'team' if request.GET.get('groupBy') == 'team' else 'assignee'
    customers = Customer.objects.filter(created_at__gte=date_from, created_at__lte=date_to)
    assigned_to = _assignee_scope(request)
    if assigned_to is not None:
        customers = customers.filter(assigned_to_id=assigned_to)

    try:
        rows = performance_rows(customers, group_by=group_by)
    except Exception as e:
        logger.error(f"Dashboard performance error: {e}", exc_info=True)
        return json_error('Failed to fetch performance data', status=500)

    return JsonResponse({
        'performance': rows,
        'groupBy': group_by,
        'dateRange': {'from': request.GET['dateFrom'], 'to': request.GET['dateTo']},
    })


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def stale_api(request):
    days = parse_int(request.GET.get('days'), 7)
    try:
        rows = stale_customers(
            days=days,
            status=request.GET.get('status') or 'in_progress',
            limit=max(parse_int(request.GET.get('limit'), 20), 1),
            assigned_to=_assignee_scope(request),
        )
    except Exception as e:
        logger.error(f"Dashboard stale customers error: {e}", exc_info=True)
        return json_error('Failed to fetch stale customers', status=500)

    return JsonResponse({'staleCustomers': rows, 'total': len(rows), 'threshold': days})


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def timeline_api(request):
    try:
        activities = timeline(
            limit=max(parse_int(request.GET.get('limit'), 20), 1),
            assigned_to=_assignee_scope(request),
        )
    except Exception as e:
        logger.error(f"Dashboard timeline error: {e}", exc_info=True)
        return json_error('Failed to fetch timeline', status=500)

    return JsonResponse({'activities': activities, 'total': len(activities)})


# LAYOUT
def _load_store():
    store = DashboardStore(
        DatabaseSettingsBackend(),
        layout_key=settings.DASHBOARD_LAYOUT_KEY,
        presets_key=settings.DASHBOARD_PRESETS_KEY,
        columns=settings.DASHBOARD_GRID_COLUMNS,
    )
    return store.load()


def widget_payload(widget):
    """Widget dict plus its resolved size tier and effective design tokens"""
    tier = resolve_tier(widget.w, widget.h)
    base = get_tokens(category_for_widget_type(widget.type), tier)
    tokens = apply_overrides(base, widget.style_overrides)

    data = widget.to_dict()
    data['tier'] = tier.value
    data['legacyTier'] = legacy_tier(widget.w, widget.h)
    data['tokens'] = tokens.to_dict()
    return data


def _layout_payload(store):
    return {
        'widgets': [widget_payload(w) for w in store.widgets],
        'period': store.period,
        'customDateRange': dict(store.custom_date_range),
    }


def _apply_and_persist(store, operation):
    """
    Run a store mutation and save it

    Returns:
        tuple: (result, None) on success, (None, error JsonResponse) otherwise
    """
    try:
        result = operation(store)
        store.persist()
    except WidgetNotFoundError:
        return None, json_error(WIDGET_NOT_FOUND_MESSAGE, status=404)
    except PresetNotFoundError:
        return None, json_error(PRESET_NOT_FOUND_MESSAGE, status=404)
    except WidgetConfigError as e:
        return None, json_error(str(e), status=400)
    except LayoutPersistError:
        return None, json_error(LAYOUT_SAVE_FAILED_MESSAGE, status=500)
    return result, None


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET", "PUT"])
def layout_api(request):
    store = _load_store()
    if request.method == 'GET':
        return JsonResponse(_layout_payload(store))

    data, error_response = load_body(request)
    if error_response:
        return error_response

    def replace(store):
        if 'widgets' not in data:
            raise WidgetConfigError('widgets is required')
        store.replace_widgets(data['widgets'])
        if 'period' in data:
            date_range = data.get('customDateRange') or {}
            if not isinstance(date_range, dict):
                raise WidgetConfigError('customDateRange must be an object')
            store.set_period(data['period'], date_range.get('from'), date_range.get('to'))

    _, error_response = _apply_and_persist(store, replace)
    if error_response:
        return error_response

    logger.info(f"User {request.user.username} saved dashboard layout ({len(store.widgets)} widgets)")
    return JsonResponse(dict(_layout_payload(store), success=True))


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["POST"])
def layout_reset_api(request):
    store = _load_store()
    _, error_response = _apply_and_persist(store, lambda s: s.reset_widgets())
    if error_response:
        return error_response

    logger.info(f"User {request.user.username} reset the dashboard layout")
    return JsonResponse(dict(_layout_payload(store), success=True))


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["PUT"])
def period_api(request):
    data, error_response = load_body(request)
    if error_response:
        return error_response

    period = data.get('period')
    if period not in PERIODS:
        return json_error(f"period must be one of {', '.join(PERIODS)}", status=400)

    store = _load_store()
    _, error_response = _apply_and_persist(
        store, lambda s: s.set_period(period, data.get('dateFrom'), data.get('dateTo')),
    )
    if error_response:
        return error_response
    return JsonResponse({'success': True, 'period': store.period, 'customDateRange': store.custom_date_range})


# WIDGETS
@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["POST"])
def widgets_api(request):
    """Add a widget; without x/y it is packed into the first free slot"""
    data, error_response = load_body(request)
    if error_response:
        return error_response

    form = WidgetCreateForm(data)
    if not form.is_valid():
        return json_error(first_form_error(form), status=400)

    cleaned = form.cleaned_data
    store = _load_store()
    widget, error_response = _apply_and_persist(store, lambda s: s.add_widget(
        cleaned['type'],
        title=cleaned['title'],
        w=cleaned['w'],
        h=cleaned['h'],
        config=cleaned['config'],
        x=cleaned['x'],
        y=cleaned['y'],
    ))
    if error_response:
        return error_response

    logger.info(f"User {request.user.username} added {widget.type} widget {widget.id} at ({widget.x}, {widget.y})")
    return JsonResponse({'success': True, 'widget': widget_payload(widget)}, status=201)


def _int_field(data, key):
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise WidgetConfigError(f'{key} must be an integer')
    return value


def _patch_widget(store, widget_id, data):
    """Apply a PATCH body to one widget; every key is optional"""
    widget = store.get_widget(widget_id)

    if data.get('gridPreset') is not None:
        size = grid_size_from_preset(data['gridPreset'])
        if size is None:
            raise WidgetConfigError(f"Unknown grid size preset: {data['gridPreset']}")
        widget = store.resize_widget(widget_id, *size)

    if 'x' in data or 'y' in data:
        x = _int_field(data, 'x') if 'x' in data else widget.x
        y = _int_field(data, 'y') if 'y' in data else widget.y
        widget = store.move_widget(widget_id, x, y)

    if 'w' in data or 'h' in data:
        w = _int_field(data, 'w') if 'w' in data else widget.w
        h = _int_field(data, 'h') if 'h' in data else widget.h
        widget = store.resize_widget(widget_id, w, h)

    if data.get('stylePreset') is not None:
        overrides = style_overrides_from_preset(data['stylePreset'])
        if overrides is None:
            raise WidgetConfigError(f"Unknown style preset: {data['stylePreset']}")
        widget = store.update_style_overrides(widget_id, overrides)

    if 'styleOverrides' in data:
        widget = store.update_style_overrides(widget_id, data['styleOverrides'])

    if data.get('conditionalPreset') is not None:
        rules = color_rules_from_preset(data['conditionalPreset'])
        if rules is None:
            raise WidgetConfigError(f"Unknown conditional preset: {data['conditionalPreset']}")
        widget = store.update_color_rules(widget_id, rules)

    if 'colorRules' in data:
        widget = store.update_color_rules(widget_id, data['colorRules'])

    if 'title' in data or 'config' in data:
        if 'title' in data and not isinstance(data['title'], str):
            raise WidgetConfigError('title must be a string')
        widget = store.update_widget(widget_id, title=data.get('title'), config=data.get('config'))

    return widget


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["PATCH", "DELETE"])
def widget_detail_api(request, widget_id):
    store = _load_store()

    if request.method == 'DELETE':
        _, error_response = _apply_and_persist(store, lambda s: s.remove_widget(widget_id))
        if error_response:
            return error_response
        logger.info(f"User {request.user.username} removed widget {widget_id}")
        return JsonResponse({'success': True})

    data, error_response = load_body(request)
    if error_response:
        return error_response
    if not data:
        return json_error('수정할 항목이 없습니다', status=400)

    widget, error_response = _apply_and_persist(store, lambda s: _patch_widget(s, widget_id, data))
    if error_response:
        return error_response
    return JsonResponse({'success': True, 'widget': widget_payload(widget)})


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def widget_color_api(request, widget_id):
    """
    Conditional color for a widget value

    Query params: value (required), previous (optional, for changePercent
    rules and the trend badge).
    """
    store = _load_store()
    try:
        widget = store.get_widget(widget_id)
    except WidgetNotFoundError:
        return json_error(WIDGET_NOT_FOUND_MESSAGE, status=404)

    try:
        value = float(request.GET['value'])
        previous = float(request.GET['previous']) if request.GET.get('previous') else None
    except (KeyError, ValueError):
        return json_error('value must be a number', status=400)

    change = change_percent(value, previous) if previous is not None else None
    return JsonResponse({
        'color': evaluate(value, change, widget.color_rules),
        'changePercent': change,
        'trendColor': evaluate_trend_color(change),
    })


# PRESETS
@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET", "POST"])
def presets_api(request):
    store = _load_store()
    if request.method == 'GET':
        return JsonResponse({'presets': store.presets})

    data, error_response = load_body(request)
    if error_response:
        return error_response

    preset, error_response = _apply_and_persist(store, lambda s: s.save_as_preset(data.get('name')))
    if error_response:
        return error_response

    logger.info(f"User {request.user.username} saved dashboard preset '{preset['name']}'")
    return JsonResponse({'success': True, 'preset': preset}, status=201)


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["POST"])
def preset_load_api(request, preset_id):
    store = _load_store()
    _, error_response = _apply_and_persist(store, lambda s: s.load_preset(preset_id))
    if error_response:
        return error_response
    return JsonResponse(dict(_layout_payload(store), success=True))


@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["DELETE"])
def preset_detail_api(request, preset_id):
    store = _load_store()
    _, error_response = _apply_and_persist(store, lambda s: s.delete_preset(preset_id))
    if error_response:
        return error_response
    return JsonResponse({'success': True})


# DESIGN SYSTEM
@api_login_required
@capability_required(Capability.DASHBOARD_VIEW)
@require_http_methods(["GET"])
def design_api(request):
    """Option lists and presets the widget editor offers"""
    return JsonResponse({
        'widgetTypes': list(WIDGET_TYPES),
        'tiers': [t.value for t in TIER_ORDER],
        'options': {
            'titleSize': list(TITLE_SIZE_OPTIONS),
            'valueSize': list(VALUE_SIZE_OPTIONS),
            'iconSize': list(ICON_SIZE_OPTIONS),
            'spacing': list(SPACING_OPTIONS),
        },
        'operators': OPERATOR_LABELS,
        'stylePresets': STYLE_PRESETS,
        'conditionalPresets': CONDITIONAL_PRESETS,
        'gridSizePresets': GRID_SIZE_PRESETS,
        'colorPresets': COLOR_PRESETS,
        'alertColors': ALERT_COLORS,
    })
