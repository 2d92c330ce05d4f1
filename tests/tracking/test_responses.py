"""Tests for chinatrack.tracking.responses: parsing TrackingMore payloads"""

from chinatrack.models import ShipmentStatus
from chinatrack.tracking.responses import (
    ApiMeta,
    EventSource,
    GetResponse,
    RealtimeResponse,
    TrackingRecord,
)

from conftest import checkpoint, envelope


class TestApiMeta:

    def test_reads_code_and_message(self):
        meta = ApiMeta.from_body(envelope(4016, "Tracking already exists"))
        assert meta.code == 4016
        assert meta.message == "Tracking already exists"

    def test_missing_meta(self):
        meta = ApiMeta.from_body({"data": []})
        assert meta.code is None
        assert meta.message == ""

    def test_non_dict_body(self):
        assert ApiMeta.from_body(["not", "a", "dict"]).code is None


class TestRealtimeResponse:

    def test_ok_with_data(self):
        body = envelope(data={
            "delivery_status": "delivered",
            "updated_at": "2025-01-16T08:00:00+08:00",
            "latest_event": "Signed by recipient",
            "items": [checkpoint("2025-01-16T08:00:00+08:00", "Signed", "delivered")],
        })
        parsed = RealtimeResponse.from_body(body)
        assert parsed.ok
        assert parsed.record.event_source == EventSource.ITEMS
        assert parsed.record.events[0].detail == "Signed"

    def test_not_ok_without_data(self):
        assert not RealtimeResponse.from_body(envelope(data=None)).ok

    def test_not_ok_with_error_code(self):
        body = envelope(4101, "Tracking does not exist", data={"delivery_status": "transit"})
        assert not RealtimeResponse.from_body(body).ok


class TestTrackingRecordFromGet:

    def test_prefers_origin_info(self):
        record = TrackingRecord.from_get({
            "delivery_status": "transit",
            "origin_info": {"trackinfo": [checkpoint("2025-01-10T00:00:00Z", "origin")]},
            "destination_info": {"trackinfo": [checkpoint("2025-01-11T00:00:00Z", "destination")]},
        })
        assert record.event_source == EventSource.ORIGIN
        assert [e.detail for e in record.events] == ["origin"]

    def test_falls_back_to_destination_info(self):
        record = TrackingRecord.from_get({
            "delivery_status": "transit",
            "origin_info": {"trackinfo": []},
            "destination_info": {"trackinfo": [checkpoint("2025-01-11T00:00:00Z", "destination")]},
        })
        assert record.event_source == EventSource.DESTINATION
        assert [e.detail for e in record.events] == ["destination"]

    def test_no_events_anywhere(self):
        record = TrackingRecord.from_get({"delivery_status": "notfound", "origin_info": None})
        assert record.event_source == EventSource.NONE
        assert record.events == []

    def test_events_sorted_newest_first(self):
        record = TrackingRecord.from_get({
            "origin_info": {"trackinfo": [
                checkpoint("2025-01-10 09:00:00", "first"),
                checkpoint("2025-01-12 09:00:00", "third"),
                checkpoint("2025-01-11 09:00:00", "second"),
            ]},
        })
        assert [e.detail for e in record.events] == ["third", "second", "first"]

    def test_unparseable_dates_sort_last(self):
        record = TrackingRecord.from_get({
            "origin_info": {"trackinfo": [
                checkpoint("not a date", "junk"),
                checkpoint("2025-01-12T09:00:00Z", "real"),
            ]},
        })
        assert [e.detail for e in record.events] == ["real", "junk"]


class TestToStatusUpdate:

    def test_maps_fields(self):
        record = TrackingRecord(
            delivery_status="transit",
            updated_at="2025-01-12T09:00:00Z",
            latest_event="Arrived at Guangzhou",
        )
        update = record.to_status_update()
        assert update.status == ShipmentStatus.IN_TRANSIT
        assert update.last_update == "2025-01-12T09:00:00Z"
        assert update.description == "Arrived at Guangzhou"

    def test_description_defaults_to_status(self):
        update = TrackingRecord(delivery_status="pickup").to_status_update()
        assert update.description == "Status: pickup"
        assert update.status == ShipmentStatus.OUT_FOR_DELIVERY

    def test_last_update_defaults_to_now(self):
        update = TrackingRecord(delivery_status="transit").to_status_update()
        assert update.last_update


class TestGetResponseSelect:

    def test_selects_matching_carrier(self):
        parsed = GetResponse.from_body(envelope(data=[
            {"carrier_code": "zto", "delivery_status": "delivered"},
            {"carrier_code": "sf-express", "delivery_status": "transit"},
        ]))
        assert parsed.select("sf-express").delivery_status == "transit"

    def test_falls_back_to_first(self):
        parsed = GetResponse.from_body(envelope(data=[
            {"carrier_code": "zto", "delivery_status": "delivered"},
        ]))
        assert parsed.select("sf-express").carrier_code == "zto"

    def test_empty_data(self):
        assert GetResponse.from_body(envelope(data=[])).select("zto") is None

    def test_data_not_a_list(self):
        assert GetResponse.from_body(envelope(data={"oops": True})).select("zto") is None
