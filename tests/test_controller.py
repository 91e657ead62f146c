from datetime import date

import pytest

from wildfire_map.config import MapConfig
from wildfire_map.controller import MapController
from wildfire_map.loader import DataLoadError, load_boundary


@pytest.fixture
def controller(dataset, topology_file):
    return MapController(dataset, load_boundary(topology_file), MapConfig(refresh_on_match=False))


def _visible_names(ctl):
    return [f.record.name for f in ctl.update().visible]


def test_initial_state(controller, dataset):
    assert controller.day_index == 0
    assert controller.active_causes == frozenset(dataset.causes)
    assert controller.query == ''
    assert not controller.is_playing


def test_two_fire_walkthrough(controller):
    controller.set_active_causes(['Natural', 'Human'])
    expected = {0: [], 1: ['Creek'], 4: ['Creek', None], 5: [None, 'Late Fire']}
    for day, names in expected.items():
        controller.set_day_index(day)
        assert _visible_names(controller) == names


def test_set_day_index_is_clamped(controller):
    controller.set_day_index(99)
    assert controller.day_index == controller.last_index == 6
    controller.set_day_index(-4)
    assert controller.day_index == 0


def test_set_date_syncs_index_and_ignores_unknown_days(controller):
    assert controller.set_date(date(2020, 7, 4))
    assert controller.day_index == 3
    assert controller.selected_day.strftime('%Y-%m-%d') == '2020-07-04'

    assert not controller.set_date(date(2021, 1, 1))
    assert not controller.set_date(None)
    assert controller.day_index == 3


def test_cause_and_query_accessors(controller):
    controller.set_day_index(4)
    controller.set_cause_active('Natural', False)
    assert not controller.is_cause_active('Natural')
    assert _visible_names(controller) == [None]

    controller.set_cause_active('Natural', True)
    controller.set_query('CREEK')
    assert _visible_names(controller) == ['Creek']


def test_tick_advances_until_last_day(controller):
    controller.set_day_index(4)
    controller.play()
    assert controller.tick()
    assert controller.day_index == 5
    assert controller.tick()
    assert controller.day_index == 6
    assert not controller.tick()
    assert controller.day_index == 6
    assert not controller.is_playing


def test_toggle_play_pauses_without_moving(controller):
    controller.set_day_index(2)
    controller.toggle_play()
    assert controller.is_playing
    controller.toggle_play()
    assert not controller.is_playing
    assert not controller.tick()
    assert controller.day_index == 2


def test_update_is_idempotent(controller):
    controller.set_day_index(4)
    first = controller.update()
    second = controller.update()

    assert [c.key for c in first.result.entered] == [f.key for f in first.visible]
    assert not second.result.changed
    assert second.visible == first.visible
    assert [c.key for c in second.circles] == [c.key for c in first.circles]


def test_update_reports_enter_and_exit(controller):
    controller.set_day_index(4)
    controller.update()
    controller.set_day_index(5)
    frame = controller.update()

    assert [c.record.name for c in frame.result.exited] == ['Creek']
    assert [c.record.name for c in frame.result.entered] == ['Late Fire']
    assert [c.record.name for c in frame.result.kept] == [None]


def test_render_contains_boundary_and_circles(controller):
    controller.set_day_index(4)
    doc = controller.render(controller.update())

    assert doc.count('data-tip=') == 2
    assert 'fill="#f0f0f0"' in doc
    assert controller.boundary_path.startswith('M')


def test_visible_table(controller):
    controller.set_day_index(4)
    table = controller.visible_table()
    assert table['name'].tolist()[0] == 'Creek'
    assert len(table) == 2
    assert 'record_id' not in table.columns


def test_from_config_propagates_load_errors(tmp_path, topology_file):
    config = MapConfig(fires_source=str(tmp_path / 'missing.json'), atlas_source=str(topology_file))
    with pytest.raises(DataLoadError):
        MapController.from_config(config)


def test_from_config_loads_both_sources(fires_file, topology_file):
    ctl = MapController.from_config(MapConfig(fires_source=str(fires_file), atlas_source=str(topology_file)))
    assert len(ctl.dataset) == 4
    assert ctl.boundary.geom_type == 'Polygon'


def test_pause_before_pending_tick_keeps_index(controller):
    controller.set_day_index(2)
    controller.play()
    controller.schedule_tick()
    controller.pause()

    assert not controller.advance_if_due()
    assert controller.day_index == 2


def test_pending_tick_applies_once(controller):
    controller.set_day_index(2)
    controller.play()
    controller.schedule_tick()

    assert controller.advance_if_due()
    assert controller.day_index == 3
    assert not controller.advance_if_due()
    assert controller.day_index == 3
