"""Tests for squares.enrich — detail fetch, JSON repair and defensive extraction."""

import json
from datetime import datetime

import pytest
import requests
from conftest import make_response

from squares.client import WorkoutApiClient
from squares.enrich import DetailEnricher, extract_detail_fields, parse_detail_payload, repair_json
from squares.errors import (
    FetchFailedError,
    InvalidURLError,
    NoAccountError,
    ParseFailedError,
    StoreCommitFailedError,
    UnknownWorkoutError,
)

DETAIL = {
    "workout_id": 42,
    "athlete_id": 99,
    "name": "Morning Run",
    "type": "Run",
    "sport_type": "Run",
    "average_heartrate": 151.3,
    "max_heartrate": 178,
    "average_speed": 3.1,
    "max_speed": 5.4,
    "elapsed_time": 3700,
    "moving_time": 3600,
    "total_elevation_gain": 85.2,
    "elevation_high": "120.4",
    "elevation_low": "35.0",
    "start_date": "2024-03-01T13:00:00Z",
    "start_date_local": "2024-03-01T08:00:00Z",
    "time_zone": "(GMT-05:00) America/New_York",
    "calories": 712.0,
    "distance": 11200.5,
    "map": {"summary_polyline": "_p~iF~ps|U_ulLnnqC_mqNvxq`@"},
}


@pytest.fixture
def enricher(client, store):
    return DetailEnricher(client, store)


@pytest.fixture
def workout(store):
    return store.create(42, date=datetime(2024, 3, 1, 8, 0), distance=11200.5, activity_type="Run")


class TestRepairJson:
    def test_replaces_spaced_and_unspaced_gaps(self):
        assert repair_json('{"a": ,"b":,"c": 1}') == '{"a": null,"b": null,"c": 1}'

    def test_leaves_valid_json_alone(self):
        text = json.dumps(DETAIL)
        assert repair_json(text) == text


class TestParseDetailPayload:
    def test_repaired_payload_parses(self):
        payload = parse_detail_payload(b'{"max_heartrate": ,"moving_time":120}')
        assert payload == {"max_heartrate": None, "moving_time": 120}

    @pytest.mark.parametrize(
        "raw",
        [
            b"not json",
            b'{"a": }',
            b"[1, 2, 3]",
            b'"just a string"',
            b"\xff\xfe\x00",
        ],
    )
    def test_unparsable_payloads(self, raw):
        with pytest.raises(ParseFailedError):
            parse_detail_payload(raw)


class TestExtractDetailFields:
    def test_full_payload(self):
        fields = extract_detail_fields(DETAIL)

        assert fields["name"] == "Morning Run"
        assert fields["max_heartrate"] == 178
        assert fields["average_heartrate"] == pytest.approx(151.3)
        assert fields["elevation_high"] == "120.4"
        assert fields["start_date"] == datetime(2024, 3, 1, 13, 0)
        assert fields["start_date_local"] == datetime(2024, 3, 1, 8, 0)
        assert fields["time_zone"] == "(GMT-05:00) America/New_York"
        assert fields["polyline"] == "_p~iF~ps|U_ulLnnqC_mqNvxq`@"

    def test_missing_and_mistyped_fields_default(self):
        fields = extract_detail_fields(
            {
                "max_heartrate": None,
                "moving_time": "soon",
                "average_speed": True,
                "name": 12,
                "start_date": "garbage",
                "map": None,
            }
        )

        assert fields["max_heartrate"] == 0
        assert fields["moving_time"] == 0
        assert fields["average_speed"] == 0.0
        assert fields["elapsed_time"] == 0
        assert fields["name"] == ""
        assert fields["sport_type"] == ""
        assert fields["start_date"] is None
        assert fields["polyline"] == ""

    def test_numeric_elevation_kept_as_text(self):
        fields = extract_detail_fields({"elevation_high": 120.5, "elevation_low": 3})
        assert fields["elevation_high"] == "120.5"
        assert fields["elevation_low"] == "3"

    def test_float_counts_truncate_to_int(self):
        assert extract_detail_fields({"moving_time": 120.9})["moving_time"] == 120

    def test_locations_and_alternate_keys(self):
        fields = extract_detail_fields(
            {
                "timezone": "UTC",
                "start_latlng": [37.7, -122.4],
                "end_lnglat": '[{"N": "37.8"}, {"N": "-122.5"}]',
                "polyline": "??",
            }
        )
        assert fields["time_zone"] == "UTC"
        assert json.loads(fields["start_latlng"]) == [37.7, -122.4]
        assert fields["end_latlng"] == '[{"N": "37.8"}, {"N": "-122.5"}]'
        assert fields["polyline"] == "??"


class TestEnrich:
    def test_fetches_and_stores_detail(self, enricher, workout, session, store):
        session.get.return_value = make_response(DETAIL)

        detail = enricher.enrich(workout, "99")

        url = session.get.call_args.args[0]
        assert url == "https://api.example.com/workout?athlete_id=99&workout_id=42"
        assert detail.workout_id == 42
        assert detail.athlete_id == "99"
        assert detail.name == "Morning Run"
        assert detail.fetched_at is not None
        assert store.get_detail(42).moving_time == 3600
        assert len(store.get_detail(42).route) == 3

    def test_existing_detail_returned_without_io(self, enricher, workout, session, store):
        store.replace_detail(42, {"athlete_id": "99", "name": "Cached"})

        detail = enricher.enrich(workout, "99")

        assert detail.name == "Cached"
        session.get.assert_not_called()

    def test_cache_hit_does_not_need_account(self, enricher, workout, session, store):
        store.replace_detail(42, {"athlete_id": "99", "name": "Cached"})

        assert enricher.enrich(workout, None).name == "Cached"
        session.get.assert_not_called()

    def test_malformed_payload_is_repaired(self, enricher, workout, session):
        session.get.return_value = make_response(b'{"name": "Tempo", "max_heartrate": ,"moving_time":120}')

        detail = enricher.enrich(workout, "99")

        assert detail.max_heartrate == 0
        assert detail.moving_time == 120
        assert detail.name == "Tempo"
        assert json.loads(detail.raw_json)["max_heartrate"] is None

    def test_force_refresh_replaces_whole_record(self, enricher, workout, session, store):
        store.replace_detail(42, {"athlete_id": "99", "name": "Old", "calories": 500.0, "polyline": "abc"})
        session.get.return_value = make_response({"name": "New", "moving_time": 60})

        detail = enricher.enrich(workout, "99", force_refresh=True)

        assert detail.name == "New"
        assert detail.calories == 0.0
        assert detail.polyline == ""
        assert store.detail_count() == 1

    def test_no_account(self, enricher, workout, session):
        with pytest.raises(NoAccountError):
            enricher.enrich(workout, "")
        session.get.assert_not_called()

    def test_fetch_failure_keeps_prior_detail(self, enricher, workout, session, store):
        store.replace_detail(42, {"athlete_id": "99", "name": "Keep me"})
        session.get.side_effect = requests.Timeout("slow")

        with pytest.raises(FetchFailedError):
            enricher.enrich(workout, "99", force_refresh=True)

        assert store.get_detail(42).name == "Keep me"

    def test_http_error_status(self, enricher, workout, session):
        session.get.return_value = make_response({"message": "not found"}, status_code=404)

        with pytest.raises(FetchFailedError) as excinfo:
            enricher.enrich(workout, "99")
        assert excinfo.value.status_code == 404

    def test_parse_failure_keeps_prior_detail(self, enricher, workout, session, store):
        store.replace_detail(42, {"athlete_id": "99", "name": "Keep me"})
        session.get.return_value = make_response(b"[]")

        with pytest.raises(ParseFailedError):
            enricher.enrich(workout, "99", force_refresh=True)

        assert store.get_detail(42).name == "Keep me"

    def test_commit_failure_keeps_prior_detail(self, enricher, workout, session, store, monkeypatch):
        from peewee import IntegrityError

        from squares.workout import LocalWorkoutDetail

        store.replace_detail(42, {"athlete_id": "99", "name": "Keep me"})
        session.get.return_value = make_response(DETAIL)

        def broken_create(**kwargs):
            raise IntegrityError("constraint failed")

        with monkeypatch.context() as m:
            m.setattr(LocalWorkoutDetail, "create", broken_create)
            with pytest.raises(StoreCommitFailedError):
                enricher.enrich(workout, "99", force_refresh=True)

        assert store.get_detail(42).name == "Keep me"

    def test_invalid_endpoint(self, store, workout, session):
        enricher = DetailEnricher(WorkoutApiClient("https://api.example.com/workouts", "not a url", session=session), store)

        with pytest.raises(InvalidURLError):
            enricher.enrich(workout, "99")
        session.get.assert_not_called()

    def test_enrich_by_id(self, enricher, workout, session):
        session.get.return_value = make_response(DETAIL)

        assert enricher.enrich_by_id(42, "99").name == "Morning Run"

    def test_enrich_by_id_unknown_workout(self, enricher, session):
        with pytest.raises(UnknownWorkoutError):
            enricher.enrich_by_id(404, "99")
        session.get.assert_not_called()
