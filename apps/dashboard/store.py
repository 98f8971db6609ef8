"""
Dashboard composition store
===========================

Explicit state container for one dashboard: the ordered widget list, the
saved presets and the selected period. Storage goes through an injected
SettingsBackend, so the store is usable (and testable) without a database.

Failure contract:
- load() never raises. Missing or malformed blobs fall back to the default
  showcase layout and the fault is logged.
- persist() writes layout and presets as one unit. On failure it raises
  LayoutPersistError, nothing is stored and the in-memory state is kept.

Placement of new widgets is a first-fit scan over the 12-column grid, rows
top to bottom and columns left to right.
"""

import copy
import logging
import uuid
from dataclasses import dataclass, field

from django.db import transaction
from django.utils import timezone

from apps.core.settings_store import get_setting, set_setting

from .defaults import (
    CHART_TYPES,
    DEFAULT_PERIOD,
    DEFAULT_WIDGET_SIZES,
    GOAL_TYPES,
    LIST_TYPES,
    PERIODS,
    TABLE_GROUP_BY,
    WIDGET_TYPES,
    default_widgets,
)
from .widget_colors import validate_color_rules
from .widget_design import validate_style_overrides

logger = logging.getLogger(__name__)


GRID_COLUMNS = 12


# ERRORS
class DashboardError(Exception):
    pass


class WidgetConfigError(DashboardError, ValueError):
    """A widget dict (or an update to one) is not well formed"""


class WidgetNotFoundError(DashboardError, LookupError):
    pass


class PresetNotFoundError(DashboardError, LookupError):
    pass


class LayoutPersistError(DashboardError):
    """The settings backend refused or failed the write"""


# STORAGE
class SettingsBackend:
    """read(key) -> value or None, write(key, value), write_many(items)"""

    def read(self, key):
        raise NotImplementedError

    def write(self, key, value):
        raise NotImplementedError

    def write_many(self, items):
        """Write (key, value) pairs as one unit: all of them or none"""
        raise NotImplementedError


class DatabaseSettingsBackend(SettingsBackend):
    """Backend over the core Setting table"""

    def read(self, key):
        return get_setting(key)

    def write(self, key, value):
        set_setting(key, value)

    def write_many(self, items):
        with transaction.atomic():
            for key, value in items:
                self.write(key, value)


class MemorySettingsBackend(SettingsBackend):
    """Dict-backed backend for scripts and tests"""

    def __init__(self, initial=None):
        self.data = copy.deepcopy(initial) if initial else {}

    def read(self, key):
        return copy.deepcopy(self.data.get(key))

    def write(self, key, value):
        self.data[key] = copy.deepcopy(value)

    def write_many(self, items):
        snapshot = copy.deepcopy(self.data)
        try:
            for key, value in items:
                self.write(key, value)
        except Exception:
            self.data = snapshot
            raise


# WIDGET
def _positive_int(value, name):
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise WidgetConfigError(f'{name} must be a positive integer')
    return value


def _non_negative_int(value, name):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise WidgetConfigError(f'{name} must be a non-negative integer')
    return value


def validate_widget_config(config):
    if not isinstance(config, dict):
        raise WidgetConfigError('config must be an object')

    choices = (
        ('chartType', CHART_TYPES),
        ('listType', LIST_TYPES),
        ('tableType', TABLE_GROUP_BY),
        ('goalType', GOAL_TYPES),
    )
    for key, options in choices:
        if config.get(key) is not None and config[key] not in options:
            raise WidgetConfigError(f"{key} must be one of {', '.join(options)}")

    if config.get('maxItems') is not None:
        _positive_int(config['maxItems'], 'maxItems')

    error = validate_style_overrides(config.get('styleOverrides')) or validate_color_rules(config.get('colorRules'))
    if error:
        raise WidgetConfigError(error)


@dataclass
class WidgetConfig:
    id: str
    type: str
    title: str = ''
    x: int = 0
    y: int = 0
    w: int = 3
    h: int = 2
    config: dict = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise WidgetConfigError('id is required')
        if self.type not in WIDGET_TYPES:
            raise WidgetConfigError(f'Unknown widget type: {self.type}')
        if not isinstance(self.title, str):
            raise WidgetConfigError('title must be a string')
        _non_negative_int(self.x, 'x')
        _non_negative_int(self.y, 'y')
        _positive_int(self.w, 'w')
        _positive_int(self.h, 'h')
        if self.w > GRID_COLUMNS:
            raise WidgetConfigError(f'w must be at most {GRID_COLUMNS}')
        if self.x + self.w > GRID_COLUMNS:
            raise WidgetConfigError(f'widget exceeds the {GRID_COLUMNS}-column grid')
        validate_widget_config(self.config)

    @property
    def style_overrides(self):
        return self.config.get('styleOverrides')

    @property
    def color_rules(self):
        return self.config.get('colorRules')

    def overlaps(self, x, y, w, h):
        return x < self.x + self.w and self.x < x + w and y < self.y + self.h and self.y < y + h

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'x': self.x,
            'y': self.y,
            'w': self.w,
            'h': self.h,
            'config': copy.deepcopy(self.config),
        }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise WidgetConfigError('widget must be an object')
        try:
            return cls(
                id=data['id'],
                type=data['type'],
                title=data.get('title') or '',
                x=data.get('x', 0),
                y=data.get('y', 0),
                w=data.get('w', 3),
                h=data.get('h', 2),
                config=copy.deepcopy(data.get('config') or {}),
            )
        except KeyError as e:
            raise WidgetConfigError(f'{e.args[0]} is required')


# SERIALIZATION
def serialize_widgets(widgets):
    return [w.to_dict() for w in widgets]


def deserialize_widgets(data):
    """
    Rebuild a widget list from its JSON form

    Raises:
        WidgetConfigError: malformed entries or duplicate ids
    """
    if not isinstance(data, list):
        raise WidgetConfigError('widgets must be a list')
    widgets = [WidgetConfig.from_dict(item) for item in data]
    ids = [w.id for w in widgets]
    if len(ids) != len(set(ids)):
        raise WidgetConfigError('widget ids must be unique')
    return widgets


def find_free_position(widgets, w, h, columns=GRID_COLUMNS):
    """
    First-fit placement for a w x h widget

    Scans rows top to bottom and columns left to right; the row just below
    the lowest widget is always free, so the scan terminates.
    """
    w = min(w, columns)
    bottom = max((widget.y + widget.h for widget in widgets), default=0)
    for y in range(bottom + 1):
        for x in range(columns - w + 1):
            if not any(widget.overlaps(x, y, w, h) for widget in widgets):
                return x, y
    return 0, bottom


# STORE
class DashboardStore:
    """
    Usage:
        store = DashboardStore(DatabaseSettingsBackend())
        store.load()
        store.add_widget('stat', title='신규', config={'metric': 'totalCustomers'})
        store.persist()
    """

    def __init__(self, backend, layout_key='dashboard_layout', presets_key='dashboard_presets',
                 columns=GRID_COLUMNS):
        self.backend = backend
        self.layout_key = layout_key
        self.presets_key = presets_key
        self.columns = columns

        self.widgets = deserialize_widgets(default_widgets())
        self.presets = []
        self.period = DEFAULT_PERIOD
        self.custom_date_range = {'from': None, 'to': None}

        # Request tickets: newest issued / newest applied
        self._issued_ticket = 0
        self._applied_ticket = 0

    # LOOKUP
    def get_widget(self, widget_id):
        for widget in self.widgets:
            if widget.id == widget_id:
                return widget
        raise WidgetNotFoundError(widget_id)

    def _index_of(self, widget_id):
        for index, widget in enumerate(self.widgets):
            if widget.id == widget_id:
                return index
        raise WidgetNotFoundError(widget_id)

    def _replace_at(self, index, **changes):
        data = self.widgets[index].to_dict()
        data.update(changes)
        widget = WidgetConfig.from_dict(data)
        self.widgets[index] = widget
        return widget

    # WIDGET OPERATIONS
    def add_widget(self, widget_type, title='', w=None, h=None, config=None, x=None, y=None):
        default_w, default_h = DEFAULT_WIDGET_SIZES.get(widget_type, (3, 2))
        w = min(w or default_w, self.columns)
        h = h or default_h

        if x is None or y is None:
            x, y = find_free_position(self.widgets, w, h, self.columns)

        widget = WidgetConfig(
            id=f'widget-{uuid.uuid4().hex}',
            type=widget_type,
            title=title or '',
            x=x,
            y=y,
            w=w,
            h=h,
            config=copy.deepcopy(config or {}),
        )
        self.widgets.append(widget)
        return widget

    def remove_widget(self, widget_id):
        del self.widgets[self._index_of(widget_id)]

    def move_widget(self, widget_id, x, y):
        index = self._index_of(widget_id)
        widget = self.widgets[index]
        x = max(0, min(int(x), self.columns - widget.w))
        y = max(0, int(y))
        return self._replace_at(index, x=x, y=y)

    def resize_widget(self, widget_id, w, h):
        """Resize, clamped to the grid; the widget shifts left if it would overflow"""
        index = self._index_of(widget_id)
        widget = self.widgets[index]
        w = max(1, min(int(w), self.columns))
        h = max(1, int(h))
        x = min(widget.x, self.columns - w)
        return self._replace_at(index, x=x, w=w, h=h)

    def update_style_overrides(self, widget_id, overrides):
        error = validate_style_overrides(overrides)
        if error:
            raise WidgetConfigError(error)
        return self._set_config_key(widget_id, 'styleOverrides', overrides)

    def update_color_rules(self, widget_id, rules):
        error = validate_color_rules(rules)
        if error:
            raise WidgetConfigError(error)
        return self._set_config_key(widget_id, 'colorRules', rules)

    def _set_config_key(self, widget_id, key, value):
        index = self._index_of(widget_id)
        config = copy.deepcopy(self.widgets[index].config)
        if value is None:
            config.pop(key, None)
        else:
            config[key] = copy.deepcopy(value)
        return self._replace_at(index, config=config)

    def update_widget(self, widget_id, title=None, config=None):
        """Rename and/or merge keys into the widget config (None values drop keys)"""
        index = self._index_of(widget_id)
        changes = {}
        if title is not None:
            changes['title'] = title
        if config is not None:
            if not isinstance(config, dict):
                raise WidgetConfigError('config must be an object')
            merged = copy.deepcopy(self.widgets[index].config)
            for key, value in config.items():
                if value is None:
                    merged.pop(key, None)
                else:
                    merged[key] = copy.deepcopy(value)
            changes['config'] = merged
        return self._replace_at(index, **changes)

    def replace_widgets(self, widgets):
        """Bulk replace; validated as a whole before anything changes"""
        items = [w.to_dict() if isinstance(w, WidgetConfig) else w for w in widgets]
        self.widgets = deserialize_widgets(copy.deepcopy(items))

    def reset_widgets(self):
        self.widgets = deserialize_widgets(default_widgets())

    # PRESETS
    def save_as_preset(self, name):
        if not isinstance(name, str) or not name.strip():
            raise WidgetConfigError('name is required')
        preset = {
            'id': f'preset-{uuid.uuid4().hex[:12]}',
            'name': name.strip(),
            'widgets': serialize_widgets(self.widgets),
            'createdAt': timezone.now().isoformat(),
        }
        self.presets.append(preset)
        return preset

    def _find_preset(self, preset_id):
        for preset in self.presets:
            if preset['id'] == preset_id:
                return preset
        raise PresetNotFoundError(preset_id)

    def load_preset(self, preset_id):
        preset = self._find_preset(preset_id)
        self.replace_widgets(preset['widgets'])
        return preset

    def delete_preset(self, preset_id):
        preset = self._find_preset(preset_id)
        self.presets.remove(preset)

    # PERIOD
    def set_period(self, period, date_from=None, date_to=None):
        if period not in PERIODS:
            raise WidgetConfigError(f"period must be one of {', '.join(PERIODS)}")
        self.period = period
        if period == 'custom':
            self.custom_date_range = {'from': date_from, 'to': date_to}
        else:
            self.custom_date_range = {'from': None, 'to': None}

    # PERSISTENCE
    def serialize(self):
        return {
            'widgets': serialize_widgets(self.widgets),
            'period': self.period,
            'customDateRange': dict(self.custom_date_range),
        }

    def persist(self):
        """
        Write layout and presets to the backend

        Raises:
            LayoutPersistError: the backend failed; in-memory state is kept
        """
        try:
            self.backend.write_many([
                (self.layout_key, self.serialize()),
                (self.presets_key, copy.deepcopy(self.presets)),
            ])
        except Exception as e:
            logger.error(f"Dashboard layout persist failed: {e}", exc_info=True)
            raise LayoutPersistError(str(e)) from e
        logger.info(f"Dashboard layout saved ({len(self.widgets)} widgets, {len(self.presets)} presets)")

    def begin_load(self):
        """Issue a ticket for a load that is about to start"""
        self._issued_ticket += 1
        return self._issued_ticket

    def apply_loaded(self, ticket, layout, presets=None):
        """
        Apply a loaded payload unless a newer load was already applied

        Returns:
            bool: True if the payload was applied
        """
        if ticket < self._applied_ticket:
            logger.debug(f"Dropping stale dashboard payload (ticket {ticket} < {self._applied_ticket})")
            return False
        self._applied_ticket = ticket

        self._apply_layout(layout)
        self._apply_presets(presets)
        return True

    def _apply_layout(self, layout):
        # Older layouts were stored as a bare widget list
        if isinstance(layout, list):
            layout = {'widgets': layout}

        if layout is None:
            self.reset_widgets()
            self.period = DEFAULT_PERIOD
            self.custom_date_range = {'from': None, 'to': None}
            return

        try:
            if not isinstance(layout, dict):
                raise WidgetConfigError('layout must be an object')
            self.widgets = deserialize_widgets(layout.get('widgets'))
        except WidgetConfigError as e:
            logger.warning(f"Malformed dashboard layout, falling back to default: {e}")
            self.reset_widgets()
            return

        period = layout.get('period')
        self.period = period if period in PERIODS else DEFAULT_PERIOD
        date_range = layout.get('customDateRange')
        if self.period == 'custom' and isinstance(date_range, dict):
            self.custom_date_range = {'from': date_range.get('from'), 'to': date_range.get('to')}
        else:
            self.custom_date_range = {'from': None, 'to': None}

    def _apply_presets(self, presets):
        valid = []
        for preset in presets if isinstance(presets, list) else []:
            try:
                if not isinstance(preset, dict) or not preset.get('id'):
                    raise WidgetConfigError('preset id is required')
                deserialize_widgets(preset.get('widgets'))
            except WidgetConfigError as e:
                logger.warning(f"Skipping malformed dashboard preset: {e}")
                continue
            valid.append(copy.deepcopy(preset))
        self.presets = valid

    def load(self):
        """
        Read layout and presets from the backend

        Never raises: read failures and malformed data leave the default
        layout in place.
        """
        ticket = self.begin_load()
        try:
            layout = self.backend.read(self.layout_key)
            presets = self.backend.read(self.presets_key)
        except Exception as e:
            logger.error(f"Dashboard layout load failed, using default layout: {e}", exc_info=True)
            layout, presets = None, None
        self.apply_loaded(ticket, layout, presets)
        return self
