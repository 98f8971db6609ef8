"""
Dashboard Store Tests
=====================

Runs against MemorySettingsBackend, no database.

Test Coverage:
1. Default layout - unique ids, no overlaps, inside the grid
2. Widget operations - add (first-fit packing), move/resize clamping, remove
3. Style overrides and color rules - validation, config merge
4. Persistence - round trip, failed writes, malformed and legacy layouts
5. Load tickets - stale payloads are dropped
6. Presets - save, load, delete, isolation from later edits

Run tests:
    python manage.py test apps.dashboard.tests.test_store
"""

from django.test import SimpleTestCase

from apps.dashboard.defaults import DEFAULT_WIDGETS, default_widgets
from apps.dashboard.store import (
    DashboardStore,
    LayoutPersistError,
    MemorySettingsBackend,
    PresetNotFoundError,
    WidgetConfig,
    WidgetConfigError,
    WidgetNotFoundError,
    deserialize_widgets,
    find_free_position,
)

LAYOUT_KEY = 'dashboard_layout'
PRESETS_KEY = 'dashboard_presets'


class FailingBackend(MemorySettingsBackend):

    def write(self, key, value):
        raise IOError('disk full')


class PresetsWriteFailsBackend(MemorySettingsBackend):

    def write(self, key, value):
        if key == PRESETS_KEY:
            raise IOError('disk full')
        super().write(key, value)


class BrokenReadBackend(MemorySettingsBackend):

    def read(self, key):
        raise IOError('connection lost')


def _widget(id, x, y, w, h, type='stat'):
    return {'id': id, 'type': type, 'title': id, 'x': x, 'y': y, 'w': w, 'h': h, 'config': {}}


class DefaultLayoutTest(SimpleTestCase):

    def setUp(self):
        self.widgets = deserialize_widgets(default_widgets())

    def test_ids_are_unique(self):
        ids = [w.id for w in self.widgets]
        self.assertEqual(len(ids), len(set(ids)))

    def test_no_two_widgets_overlap(self):
        for i, a in enumerate(self.widgets):
            for b in self.widgets[i + 1:]:
                self.assertFalse(a.overlaps(b.x, b.y, b.w, b.h), f'{a.id} overlaps {b.id}')

    def test_default_widgets_returns_a_copy(self):
        widgets = default_widgets()
        widgets[0]['title'] = 'changed'

        self.assertNotEqual(DEFAULT_WIDGETS[0]['title'], 'changed')


class WidgetConfigTest(SimpleTestCase):

    def test_rejects_unknown_type(self):
        with self.assertRaises(WidgetConfigError):
            WidgetConfig(id='w1', type='sparkline')

    def test_rejects_grid_overflow(self):
        with self.assertRaises(WidgetConfigError):
            WidgetConfig(id='w1', type='stat', x=10, w=3)

    def test_rejects_non_positive_size(self):
        with self.assertRaises(WidgetConfigError):
            WidgetConfig(id='w1', type='stat', w=0)

    def test_rejects_bad_config_choice(self):
        with self.assertRaises(WidgetConfigError):
            WidgetConfig(id='w1', type='chart', config={'chartType': 'radar'})

    def test_missing_id(self):
        with self.assertRaises(WidgetConfigError):
            WidgetConfig.from_dict({'type': 'stat'})

    def test_duplicate_ids(self):
        with self.assertRaises(WidgetConfigError):
            deserialize_widgets([_widget('a', 0, 0, 3, 2), _widget('a', 3, 0, 3, 2)])


class PackingTest(SimpleTestCase):

    def test_empty_grid(self):
        self.assertEqual(find_free_position([], 3, 2), (0, 0))

    def test_fills_gap_in_first_row(self):
        """
        Test: Row 0 holds [0-2] and [6-11]

        Expected: a 3-wide widget lands at x=3 on row 0
        """
        widgets = deserialize_widgets([_widget('a', 0, 0, 3, 2), _widget('b', 6, 0, 6, 2)])

        self.assertEqual(find_free_position(widgets, 3, 2), (3, 0))

    def test_too_wide_for_gap_goes_below(self):
        widgets = deserialize_widgets([_widget('a', 0, 0, 3, 2), _widget('b', 6, 0, 6, 2)])

        self.assertEqual(find_free_position(widgets, 4, 2), (0, 2))

    def test_full_width_grid(self):
        widgets = deserialize_widgets([_widget('a', 0, 0, 12, 3)])

        self.assertEqual(find_free_position(widgets, 12, 1), (0, 3))


class StoreOperationsTest(SimpleTestCase):

    def setUp(self):
        self.backend = MemorySettingsBackend({LAYOUT_KEY: {'widgets': [_widget('a', 0, 0, 3, 2)]}})
        self.store = DashboardStore(self.backend).load()

    def test_add_widget_uses_type_default_size_and_packs(self):
        widget = self.store.add_widget('chart', title='파이', config={'chartType': 'pie'})

        self.assertEqual((widget.w, widget.h), (3, 4))
        self.assertEqual((widget.x, widget.y), (3, 0))
        self.assertTrue(widget.id.startswith('widget-'))
        self.assertEqual(len(self.store.widgets), 2)

    def test_add_widget_explicit_position(self):
        widget = self.store.add_widget('stat', x=6, y=5)

        self.assertEqual((widget.x, widget.y), (6, 5))

    def test_add_widget_clamps_width(self):
        widget = self.store.add_widget('account', w=20)

        self.assertEqual(widget.w, 12)

    def test_add_widget_unknown_type(self):
        with self.assertRaises(WidgetConfigError):
            self.store.add_widget('sparkline')

    def test_move_is_clamped(self):
        widget = self.store.move_widget('a', 11, -3)

        self.assertEqual((widget.x, widget.y), (9, 0))

    def test_resize_shifts_left_when_overflowing(self):
        self.store.move_widget('a', 9, 0)

        widget = self.store.resize_widget('a', 6, 3)

        self.assertEqual((widget.x, widget.w, widget.h), (6, 6, 3))

    def test_unknown_widget(self):
        with self.assertRaises(WidgetNotFoundError):
            self.store.move_widget('nope', 0, 0)
        with self.assertRaises(WidgetNotFoundError):
            self.store.remove_widget('nope')

    def test_remove_widget(self):
        self.store.remove_widget('a')

        self.assertEqual(self.store.widgets, [])

    def test_style_overrides(self):
        widget = self.store.update_style_overrides('a', {'valueSize': '5xl'})
        self.assertEqual(widget.style_overrides, {'valueSize': '5xl'})

        widget = self.store.update_style_overrides('a', None)
        self.assertIsNone(widget.style_overrides)

        with self.assertRaises(WidgetConfigError):
            self.store.update_style_overrides('a', {'valueSize': '9xl'})

    def test_color_rules(self):
        rules = [{'field': 'value', 'operator': 'gte', 'value': 10, 'color': '#000000', 'bgColor': '#FFFFFF'}]

        widget = self.store.update_color_rules('a', rules)
        self.assertEqual(widget.color_rules, rules)

        with self.assertRaises(WidgetConfigError):
            self.store.update_color_rules('a', [{'operator': 'gte'}])

    def test_update_widget_merges_config(self):
        self.store.update_widget('a', config={'metric': 'totalCustomers', 'icon': 'users'})

        widget = self.store.update_widget('a', title='총 고객', config={'icon': None})

        self.assertEqual(widget.title, '총 고객')
        self.assertEqual(widget.config, {'metric': 'totalCustomers'})

    def test_failed_validation_leaves_widget_unchanged(self):
        with self.assertRaises(WidgetConfigError):
            self.store.update_widget('a', config={'chartType': 'radar'})

        self.assertEqual(self.store.get_widget('a').config, {})

    def test_replace_widgets_is_all_or_nothing(self):
        with self.assertRaises(WidgetConfigError):
            self.store.replace_widgets([_widget('b', 0, 0, 3, 2), {'id': 'c', 'type': 'nope'}])

        self.assertEqual([w.id for w in self.store.widgets], ['a'])

    def test_period(self):
        self.store.set_period('custom', '2025-01-01', '2025-01-31')
        self.assertEqual(self.store.custom_date_range, {'from': '2025-01-01', 'to': '2025-01-31'})

        self.store.set_period('week', '2025-01-01', '2025-01-31')
        self.assertEqual(self.store.custom_date_range, {'from': None, 'to': None})

        with self.assertRaises(WidgetConfigError):
            self.store.set_period('decade')


class PersistenceTest(SimpleTestCase):

    def test_round_trip(self):
        """
        Test: Edit, persist, then load into a fresh store

        Expected: identical widgets, period and presets
        """
        backend = MemorySettingsBackend()
        store = DashboardStore(backend).load()
        store.add_widget('gauge', config={'goalType': 'manual'})
        store.set_period('lastMonth')
        store.save_as_preset('월간 보기')
        store.persist()

        reloaded = DashboardStore(backend).load()

        self.assertEqual(reloaded.serialize(), store.serialize())
        self.assertEqual(reloaded.presets, store.presets)

    def test_persist_failure_keeps_state(self):
        store = DashboardStore(FailingBackend()).load()
        widget = store.add_widget('stat')

        with self.assertRaises(LayoutPersistError):
            store.persist()

        self.assertEqual(store.get_widget(widget.id), widget)

    def test_failed_second_write_leaves_backend_untouched(self):
        """
        Test: Layout write succeeds, presets write fails

        Expected: LayoutPersistError and the stored layout is the previous one
        """
        backend = PresetsWriteFailsBackend({LAYOUT_KEY: {'widgets': [_widget('a', 0, 0, 3, 2)]}})
        store = DashboardStore(backend).load()
        store.add_widget('stat')

        with self.assertRaises(LayoutPersistError):
            store.persist()

        self.assertEqual([w['id'] for w in backend.data[LAYOUT_KEY]['widgets']], ['a'])
        self.assertNotIn(PRESETS_KEY, backend.data)
        self.assertEqual(len(store.widgets), 2)

    def test_missing_layout_uses_default(self):
        store = DashboardStore(MemorySettingsBackend()).load()

        self.assertEqual(len(store.widgets), len(DEFAULT_WIDGETS))
        self.assertEqual(store.period, 'month')

    def test_malformed_layout_falls_back_to_default(self):
        backend = MemorySettingsBackend({LAYOUT_KEY: {'widgets': [{'id': 'x', 'type': 'bogus'}]}})

        store = DashboardStore(backend).load()

        self.assertEqual(len(store.widgets), len(DEFAULT_WIDGETS))

    def test_read_failure_falls_back_to_default(self):
        store = DashboardStore(BrokenReadBackend()).load()

        self.assertEqual(len(store.widgets), len(DEFAULT_WIDGETS))

    def test_legacy_bare_list_layout(self):
        backend = MemorySettingsBackend({LAYOUT_KEY: [_widget('a', 0, 0, 3, 2)]})

        store = DashboardStore(backend).load()

        self.assertEqual([w.id for w in store.widgets], ['a'])
        self.assertEqual(store.period, 'month')

    def test_unknown_period_falls_back(self):
        backend = MemorySettingsBackend({LAYOUT_KEY: {'widgets': [], 'period': 'decade'}})

        self.assertEqual(DashboardStore(backend).load().period, 'month')

    def test_malformed_presets_are_skipped(self):
        backend = MemorySettingsBackend({
            PRESETS_KEY: [
                {'id': 'p1', 'name': 'ok', 'widgets': [_widget('a', 0, 0, 3, 2)]},
                {'id': 'p2', 'name': 'bad', 'widgets': 'nope'},
                'junk',
            ],
        })

        store = DashboardStore(backend).load()

        self.assertEqual([p['id'] for p in store.presets], ['p1'])


class LoadTicketTest(SimpleTestCase):

    def test_stale_payload_is_dropped(self):
        """
        Test: Two loads in flight, the newer one resolves first

        Expected: the older payload arriving afterwards is ignored
        """
        store = DashboardStore(MemorySettingsBackend())
        older = store.begin_load()
        newer = store.begin_load()

        self.assertTrue(store.apply_loaded(newer, {'widgets': [_widget('new', 0, 0, 3, 2)]}))
        self.assertFalse(store.apply_loaded(older, {'widgets': [_widget('old', 0, 0, 3, 2)]}))

        self.assertEqual([w.id for w in store.widgets], ['new'])

    def test_in_order_payloads_apply(self):
        store = DashboardStore(MemorySettingsBackend())
        first = store.begin_load()
        self.assertTrue(store.apply_loaded(first, {'widgets': [_widget('one', 0, 0, 3, 2)]}))
        second = store.begin_load()
        self.assertTrue(store.apply_loaded(second, {'widgets': [_widget('two', 0, 0, 3, 2)]}))

        self.assertEqual([w.id for w in store.widgets], ['two'])


class PresetTest(SimpleTestCase):

    def setUp(self):
        self.store = DashboardStore(MemorySettingsBackend({LAYOUT_KEY: {'widgets': [_widget('a', 0, 0, 3, 2)]}}))
        self.store.load()

    def test_save_and_load(self):
        preset = self.store.save_as_preset('  기본 보기 ')
        self.store.add_widget('stat')

        self.store.load_preset(preset['id'])

        self.assertEqual(preset['name'], '기본 보기')
        self.assertEqual([w.id for w in self.store.widgets], ['a'])

    def test_preset_is_a_snapshot(self):
        preset = self.store.save_as_preset('snapshot')

        self.store.update_widget('a', title='renamed')

        self.assertEqual(preset['widgets'][0]['title'], 'a')

    def test_name_is_required(self):
        with self.assertRaises(WidgetConfigError):
            self.store.save_as_preset('   ')

    def test_delete(self):
        preset = self.store.save_as_preset('temp')

        self.store.delete_preset(preset['id'])

        self.assertEqual(self.store.presets, [])
        with self.assertRaises(PresetNotFoundError):
            self.store.delete_preset(preset['id'])

    def test_load_unknown(self):
        with self.assertRaises(PresetNotFoundError):
            self.store.load_preset('preset-missing')
