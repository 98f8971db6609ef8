"""
Widget design system
====================

Five size tiers derived from a widget's grid area, and the presentation
tokens (Tailwind class names and chart pixel sizes) each tier gets for stat
and chart widgets. Users can override individual tokens per widget; the
sentinel 'auto' keeps the tier default.

Grid: 12 columns, 80px rows.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache


class SizeTier(str, Enum):
    MICRO = 'micro'                  # area <= 2  (1x1, 2x1)
    ULTRA_COMPACT = 'ultra_compact'  # area <= 4  (2x2)
    COMPACT = 'compact'              # area <= 6  (3x2)
    NORMAL = 'normal'                # area <= 12 (4x3, 6x2)
    SPACIOUS = 'spacious'            # area > 12  (6x4 and up)

    @property
    def rank(self):
        return TIER_ORDER.index(self)


TIER_ORDER = (
    SizeTier.MICRO,
    SizeTier.ULTRA_COMPACT,
    SizeTier.COMPACT,
    SizeTier.NORMAL,
    SizeTier.SPACIOUS,
)

# (tier, largest area in the tier); SPACIOUS is unbounded
TIER_AREA_BOUNDS = (
    (SizeTier.MICRO, 2),
    (SizeTier.ULTRA_COMPACT, 4),
    (SizeTier.COMPACT, 6),
    (SizeTier.NORMAL, 12),
)


class WidgetCategory(str, Enum):
    STAT = 'stat'
    CHART = 'chart'


@lru_cache(maxsize=None)
def resolve_tier(w, h):
    """
    Size tier for a widget of w x h grid cells

    Total over positive integers: anything past the last bound is spacious.
    """
    area = w * h
    for tier, max_area in TIER_AREA_BOUNDS:
        if area <= max_area:
            return tier
    return SizeTier.SPACIOUS


# LEGACY TIERS
# Layouts saved before the five-tier system used small/medium/large
LEGACY_TIER_MAP = {
    'small': SizeTier.COMPACT,
    'medium': SizeTier.NORMAL,
    'large': SizeTier.SPACIOUS,
}


def legacy_tier(w, h):
    tier = resolve_tier(w, h)
    if tier in (SizeTier.MICRO, SizeTier.ULTRA_COMPACT, SizeTier.COMPACT):
        return 'small'
    if tier == SizeTier.NORMAL:
        return 'medium'
    return 'large'


# DESIGN TOKENS
@dataclass(frozen=True)
class StatTokens:
    titleSize: str
    valueSize: str
    iconSize: str
    headerPadding: str
    contentPadding: str
    changeSize: str
    layout: str
    iconColor: str = None
    valueColor: str = None

    def to_dict(self):
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class PieRadius:
    innerRadius: int
    outerRadius: int


@dataclass(frozen=True)
class ChartTokens:
    titleSize: str
    headerPadding: str
    contentPadding: str
    chartHeight: int
    axisFontSize: int
    showLabels: bool
    showLegend: bool
    pie: PieRadius

    def to_dict(self):
        return dataclasses.asdict(self)


STAT_DESIGN_TOKENS = {
    SizeTier.MICRO: StatTokens(
        titleSize='text-[10px]',
        valueSize='text-base',
        iconSize='h-3 w-3',
        headerPadding='pb-0 pt-0.5 px-1',
        contentPadding='pb-0.5 px-1',
        changeSize='text-[9px]',
        layout='horizontal',
    ),
    SizeTier.ULTRA_COMPACT: StatTokens(
        titleSize='text-xs',
        valueSize='text-2xl',
        iconSize='h-3.5 w-3.5',
        headerPadding='pb-0 pt-0.5 px-1',
        contentPadding='pb-0.5 px-1',
        changeSize='text-[10px]',
        layout='vertical',
    ),
    SizeTier.COMPACT: StatTokens(
        titleSize='text-sm',
        valueSize='text-3xl',
        iconSize='h-4 w-4',
        headerPadding='pb-0 pt-0.5 px-1.5',
        contentPadding='pb-0.5 px-1.5',
        changeSize='text-xs',
        layout='vertical',
    ),
    SizeTier.NORMAL: StatTokens(
        titleSize='text-sm',
        valueSize='text-4xl',
        iconSize='h-5 w-5',
        headerPadding='pb-0.5 pt-1 px-2',
        contentPadding='pb-1 px-2',
        changeSize='text-xs',
        layout='vertical',
    ),
    SizeTier.SPACIOUS: StatTokens(
        titleSize='text-base',
        valueSize='text-5xl',
        iconSize='h-6 w-6',
        headerPadding='pb-1 pt-1.5 px-2.5',
        contentPadding='pb-1.5 px-2.5',
        changeSize='text-sm',
        layout='vertical',
    ),
}

CHART_DESIGN_TOKENS = {
    SizeTier.MICRO: ChartTokens(
        titleSize='text-[10px]',
        headerPadding='pb-0 pt-0.5 px-1',
        contentPadding='pb-0.5 px-0.5',
        chartHeight=40,
        axisFontSize=8,
        showLabels=False,
        showLegend=False,
        pie=PieRadius(innerRadius=8, outerRadius=20),
    ),
    SizeTier.ULTRA_COMPACT: ChartTokens(
        titleSize='text-xs',
        headerPadding='pb-0 pt-0.5 px-1',
        contentPadding='pb-0.5 px-0.5',
        chartHeight=80,
        axisFontSize=9,
        showLabels=False,
        showLegend=False,
        pie=PieRadius(innerRadius=15, outerRadius=35),
    ),
    SizeTier.COMPACT: ChartTokens(
        titleSize='text-sm',
        headerPadding='pb-0 pt-0.5 px-1',
        contentPadding='pb-0.5 px-1',
        chartHeight=110,
        axisFontSize=10,
        showLabels=False,
        showLegend=False,
        pie=PieRadius(innerRadius=20, outerRadius=45),
    ),
    SizeTier.NORMAL: ChartTokens(
        titleSize='text-sm',
        headerPadding='pb-0.5 pt-1 px-1.5',
        contentPadding='pb-0.5 px-1.5',
        chartHeight=160,
        axisFontSize=11,
        showLabels=False,
        showLegend=False,
        pie=PieRadius(innerRadius=35, outerRadius=65),
    ),
    SizeTier.SPACIOUS: ChartTokens(
        titleSize='text-base',
        headerPadding='pb-0.5 pt-1 px-2',
        contentPadding='pb-1 px-2',
        chartHeight=220,
        axisFontSize=12,
        showLabels=True,
        showLegend=False,
        pie=PieRadius(innerRadius=45, outerRadius=85),
    ),
}

DESIGN_TOKENS = {
    WidgetCategory.STAT: STAT_DESIGN_TOKENS,
    WidgetCategory.CHART: CHART_DESIGN_TOKENS,
}


def _check_tables_are_exhaustive():
    for category in WidgetCategory:
        table = DESIGN_TOKENS.get(category, {})
        missing = set(SizeTier) - set(table)
        if missing:
            raise ImportError(f"{category.value} design tokens missing tiers: {sorted(t.value for t in missing)}")


_check_tables_are_exhaustive()


def get_tokens(category, tier):
    return DESIGN_TOKENS[WidgetCategory(category)][SizeTier(tier)]


def get_stat_tokens(w, h):
    return STAT_DESIGN_TOKENS[resolve_tier(w, h)]


def get_chart_tokens(w, h):
    return CHART_DESIGN_TOKENS[resolve_tier(w, h)]


# STYLE OVERRIDES
AUTO = 'auto'

TITLE_SIZE_OPTIONS = ('xs', 'sm', 'base', 'lg', AUTO)
VALUE_SIZE_OPTIONS = ('lg', 'xl', '2xl', '3xl', '4xl', '5xl', AUTO)
ICON_SIZE_OPTIONS = ('sm', 'md', 'lg', 'xl', AUTO)
SPACING_OPTIONS = ('compact', 'normal', 'spacious', AUTO)

TITLE_SIZE_MAP = {
    'xs': 'text-xs',
    'sm': 'text-sm',
    'base': 'text-base',
    'lg': 'text-lg',
}

VALUE_SIZE_MAP = {
    'lg': 'text-lg',
    'xl': 'text-xl',
    '2xl': 'text-2xl',
    '3xl': 'text-3xl',
    '4xl': 'text-4xl',
    '5xl': 'text-5xl',
}

ICON_SIZE_MAP = {
    'sm': 'h-3 w-3',
    'md': 'h-4 w-4',
    'lg': 'h-5 w-5',
    'xl': 'h-6 w-6',
}

# Spacing option -> (header padding, content padding)
SPACING_MAP = {
    'compact': ('pb-0.5 pt-1 px-2', 'pb-1.5 px-2'),
    'normal': ('pb-1 pt-1.5 px-2.5', 'pb-2 px-2.5'),
    'spacious': ('pb-1.5 pt-2 px-3', 'pb-2.5 px-3'),
}

STYLE_OVERRIDE_KEYS = ('titleSize', 'valueSize', 'iconSize', 'spacing', 'iconColor', 'valueColor')


def _sized(option, mapping):
    if option is None or option == AUTO:
        return None
    return mapping.get(option)


def apply_overrides(base, overrides=None):
    """
    Merge per-widget style overrides into tier tokens

    Each field is independent. Missing, 'auto' or unknown options keep the
    base token. Colors have no tier default: they are set only when given.
    With no overrides the base object itself is returned.
    """
    if not overrides:
        return base

    changes = {}
    sized_fields = (
        ('titleSize', TITLE_SIZE_MAP),
        ('valueSize', VALUE_SIZE_MAP),
        ('iconSize', ICON_SIZE_MAP),
    )
    for field, mapping in sized_fields:
        if not hasattr(base, field):
            continue
        value = _sized(overrides.get(field), mapping)
        if value is not None:
            changes[field] = value

    spacing = SPACING_MAP.get(overrides.get('spacing'))
    if spacing is not None:
        changes['headerPadding'], changes['contentPadding'] = spacing

    for field in ('iconColor', 'valueColor'):
        if hasattr(base, field) and overrides.get(field):
            changes[field] = overrides[field]

    if not changes:
        return base
    return dataclasses.replace(base, **changes)


def validate_style_overrides(value):
    """
    Returns:
        str | None: error message, or None when valid
    """
    if value is None:
        return None
    if not isinstance(value, dict):
        return 'styleOverrides must be an object'

    unknown = set(value) - set(STYLE_OVERRIDE_KEYS)
    if unknown:
        return f"Unknown style override: {sorted(unknown)[0]}"

    choices = {
        'titleSize': TITLE_SIZE_OPTIONS,
        'valueSize': VALUE_SIZE_OPTIONS,
        'iconSize': ICON_SIZE_OPTIONS,
        'spacing': SPACING_OPTIONS,
    }
    for field, options in choices.items():
        if field in value and value[field] is not None and value[field] not in options:
            return f"{field} must be one of {', '.join(options)}"

    for field in ('iconColor', 'valueColor'):
        if field in value and value[field] is not None and not isinstance(value[field], str):
            return f"{field} must be a string"
    return None


def category_for_widget_type(widget_type):
    """Token table a widget type renders with"""
    return WidgetCategory.CHART if widget_type in CHART_LIKE_TYPES else WidgetCategory.STAT


CHART_LIKE_TYPES = frozenset({
    'chart', 'list', 'timeline', 'table', 'donutStats', 'categoryStats', 'dataTraffic',
    'activityRings', 'horizontalBar', 'multiRingDonut', 'taskProgress',
})
