import json
import math
from datetime import date

import pandas as pd
import pytest
import requests

from wildfire_map import loader
from wildfire_map.loader import DataLoadError, load_boundary, load_fires


def test_load_fires_derives_causes_and_days(fires_file):
    ds = load_fires(fires_file)

    assert len(ds) == 4
    assert ds.causes == ['Human', 'Natural']
    # 2020-07-01 .. 2020-07-06, plus one trailing day
    assert ds.day_count == 7
    assert ds.first_day == pd.Timestamp('2020-07-01')
    assert ds.last_day == pd.Timestamp('2020-07-07')
    assert ds.date_range[1] == pd.Timestamp('2020-07-06')


def test_records_are_normalised(dataset):
    creek, unnamed, ghost, late = dataset.records

    assert creek.name == 'Creek'
    assert creek.discovered.hour == 14
    assert creek.contained.day == 6
    assert unnamed.name is None
    assert unnamed.contained is None
    assert math.isnan(ghost.latitude)
    assert late.duration_days == 45.0
    assert dataset.frame['valid'].tolist() == [True, True, False, True]


def test_day_index_for_matches_formatted_date(dataset):
    assert dataset.day_index_for('2020-07-04') == 3
    assert dataset.day_index_for(date(2020, 7, 7)) == 6
    assert dataset.day_index_for(pd.Timestamp('2020-07-01 18:00')) == 0
    assert dataset.day_index_for(date(2019, 1, 1)) is None


def test_blank_names_and_timezones(fire_rows):
    fire_rows[0]['FIRE_NAME'] = '   '
    fire_rows[0]['DISCOVERY_DATETIME'] = '2020-07-02T14:30:00Z'
    fire_rows[1]['latitude'] = None
    ds = loader.FireDataset(loader.normalize_fires(fire_rows))

    assert ds.records[0].name is None
    assert ds.records[0].discovered.tzinfo is None
    assert ds.records[0].discovered.hour == 14
    assert not ds.frame['valid'][1]


def test_record_ids_become_keys(fire_rows):
    for i, row in enumerate(fire_rows):
        row['FOD_ID'] = 1000 + i
    fire_rows[2]['FOD_ID'] = None
    ds = loader.FireDataset(loader.normalize_fires(fire_rows))

    assert ds.has_record_ids
    assert ds.records[0].identity_key() == '1000'
    assert ds.records[2].record_id is None
    assert ds.records[2].identity_key() == 'Ghostnan-119.0'


def test_missing_required_column_is_an_error(fire_rows):
    for row in fire_rows:
        del row['NWCG_GENERAL_CAUSE']
    with pytest.raises(DataLoadError):
        loader.normalize_fires(fire_rows)


def test_optional_columns_may_be_absent(fire_rows):
    for row in fire_rows:
        del row['FIRE_NAME']
        del row['CONT_DATETIME']
    ds = loader.FireDataset(loader.normalize_fires(fire_rows))

    assert all(r.name is None for r in ds.records)
    assert all(r.contained is None for r in ds.records)


@pytest.mark.parametrize('content', ['{not json', '{"a": 1}', '[]', '[1, 2]'])
def test_bad_payloads_fail(tmp_path, content):
    path = tmp_path / 'bad.json'
    path.write_text(content, encoding='utf-8')
    with pytest.raises(DataLoadError):
        load_fires(path)


def test_missing_file_fails(tmp_path):
    with pytest.raises(DataLoadError):
        load_fires(tmp_path / 'nope.json')


def test_no_valid_discovery_dates_fails(fire_rows):
    for row in fire_rows:
        row['DISCOVERY_DATETIME'] = 'unknown'
    with pytest.raises(DataLoadError):
        loader.FireDataset(loader.normalize_fires(fire_rows))


class _FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


def test_url_source_is_fetched_once_without_retry(monkeypatch, fire_rows):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _FakeResponse(fire_rows)

    monkeypatch.setattr(loader.requests, 'get', fake_get)
    ds = load_fires('https://example.org/fires.json')

    assert len(ds) == 4
    assert calls == [('https://example.org/fires.json', loader.REQUEST_TIMEOUT)]


def test_url_failure_raises_data_load_error(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        raise requests.ConnectionError('offline')

    monkeypatch.setattr(loader.requests, 'get', fake_get)
    with pytest.raises(DataLoadError):
        load_fires('https://example.org/fires.json')
    assert len(calls) == 1

    monkeypatch.setattr(loader.requests, 'get', lambda url, timeout: _FakeResponse({}, status=404))
    with pytest.raises(DataLoadError):
        load_fires('https://example.org/fires.json')


def test_boundary_read_failure_raises_data_load_error(monkeypatch):
    def fail(source, layer):
        raise RuntimeError(f'HTTP 404 for {source}')

    monkeypatch.setattr(loader.gpd, 'read_file', fail)
    with pytest.raises(DataLoadError):
        load_boundary('https://example.org/states.json')


def test_load_boundary_selects_california(topology_file):
    geom = load_boundary(topology_file)

    assert geom.geom_type == 'Polygon'
    assert geom.bounds == pytest.approx((-122.0, 36.0, -120.0, 38.0))


def test_load_boundary_missing_feature(topology_file):
    with pytest.raises(DataLoadError):
        load_boundary(topology_file, feature_id='48')
    with pytest.raises(DataLoadError):
        load_boundary(topology_file, object_name='counties')


def test_fetch_json_reads_local_files(tmp_path):
    path = tmp_path / 'x.json'
    path.write_text(json.dumps({'ok': True}), encoding='utf-8')
    assert loader.fetch_json(path) == {'ok': True}


def test_load_boundary_multipolygon_member(topology_file):
    geom = load_boundary(topology_file, feature_id='32')

    assert geom.geom_type == 'MultiPolygon'
    assert geom.area == pytest.approx(1.0)


def test_missing_boundary_file_fails(tmp_path):
    with pytest.raises(DataLoadError):
        load_boundary(tmp_path / 'states.json')


def test_unnamed_records_stay_none(dataset):
    # holds for whichever pandas is installed, including string-inferring releases
    assert dataset.frame['name'].dtype == object
    assert dataset.frame['name'][1] is None
    assert dataset.frame['record_id'][1] is None

    unnamed = dataset.records[1]
    assert unnamed.name is None
    assert unnamed.record_id is None
    assert unnamed.identity_key() == 'None34.2-118.3'


def test_missing_ids_fall_back_to_natural_key(fire_rows):
    fire_rows[0]['FOD_ID'] = 'abc-1'
    ds = loader.FireDataset(loader.normalize_fires(fire_rows))

    assert ds.records[0].identity_key() == 'abc-1'
    assert ds.records[1].record_id is None
    assert ds.records[1].identity_key() == 'None34.2-118.3'
