"""Unit tests for grouping sensor records into zones."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.services.zone_aggregator import aggregate_records


def make_record(zone=7001, bay="K1", status="Unoccupied", lat=-37.8136, lon=144.9631, **extra):
    record = {
        "zone_number": zone,
        "kerbsideid": bay,
        "status_description": status,
        "location": {"lat": lat, "lon": lon},
        "lastupdated": "2025-08-01T10:00:00+00:00",
    }
    record.update(extra)
    return record


class TestAggregateRecords:
    def test_groups_by_zone_and_counts_spots(self):
        records = [
            make_record(7001, "K1", "Unoccupied"),
            make_record(7001, "K2", "Present"),
            make_record(7001, "K3", "Unoccupied"),
            make_record(7002, "K4", "Present"),
        ]
        zones = aggregate_records(records)

        assert list(zones) == ["7001", "7002"]
        assert zones["7001"].total_spots == 3
        assert zones["7001"].available_spots == 2
        assert zones["7002"].total_spots == 1
        assert zones["7002"].available_spots == 0

    def test_unrecognised_status_is_not_counted(self):
        zones = aggregate_records([
            make_record(status="Unoccupied"),
            make_record(bay="K2", status="Unknown"),
            make_record(bay="K3", status=None),
        ])
        assert zones["7001"].total_spots == 1
        assert zones["7001"].available_spots == 1

    def test_zone_with_only_unknown_statuses_still_exists(self):
        zones = aggregate_records([make_record(status="Faulty")])
        assert zones["7001"].total_spots == 0
        assert zones["7001"].available_spots == 0

    def test_incomplete_records_are_dropped(self):
        zones = aggregate_records([
            make_record(zone=None),
            make_record(bay=None),
            {"zone_number": 1, "kerbsideid": "K", "status_description": "Present"},
            make_record(lat=None),
            {"zone_number": 2, "kerbsideid": "K", "location": "not-a-dict"},
        ])
        assert zones == {}

    def test_bay_id_alias_accepted(self):
        record = make_record()
        del record["kerbsideid"]
        record["bay_id"] = "B-1"
        assert "7001" in aggregate_records([record])

    def test_street_fields_follow_alias_priority(self):
        zones = aggregate_records([
            make_record(street_name="", streetname=None, street="Collins Street", road="Ignored Road",
                        streetnumber="120", suburb_name="Docklands"),
        ])
        zone = zones["7001"]
        assert zone.street_name == "Collins Street"
        assert zone.street_number == "120"
        assert zone.suburb == "Docklands"

    def test_missing_street_uses_zone_marker_and_defaults(self):
        zone = aggregate_records([make_record()])["7001"]
        assert zone.street_name == "Zone 7001"
        assert zone.street_number == ""
        assert zone.suburb == "Melbourne"

    def test_representative_fields_come_from_first_record(self):
        zones = aggregate_records([
            make_record(bay="K1", lat=-37.81, lon=144.96, street_name="Flinders Lane"),
            make_record(bay="K2", lat=-37.82, lon=144.97, street_name="Bourke Street"),
        ])
        zone = zones["7001"]
        assert (zone.lat, zone.lng) == (-37.81, 144.96)
        assert zone.street_name == "Flinders Lane"
        assert zone.zone_number == 7001
        assert zone.sensor_updated_at == "2025-08-01T10:00:00+00:00"

    def test_string_coordinates_are_parsed(self):
        zone = aggregate_records([make_record(lat="-37.8", lon="144.9")])["7001"]
        assert zone.lat == -37.8
        assert zone.lng == 144.9

    def test_available_never_exceeds_total(self):
        statuses = ["Unoccupied", "Present", "Unknown", None, "Unoccupied"] * 5
        records = [make_record(zone=i % 3 + 1, bay=f"K{i}", status=s) for i, s in enumerate(statuses)]
        for zone in aggregate_records(records).values():
            assert 0 <= zone.available_spots <= zone.total_spots

    def test_numeric_zones_sorted_ascending_then_others_in_arrival_order(self):
        records = [
            make_record(zone=7010, bay="K1"),
            make_record(zone="B-2", bay="K2"),
            make_record(zone=955, bay="K3"),
            make_record(zone="A-1", bay="K4"),
            make_record(zone="07", bay="K5"),
            make_record(zone=7002, bay="K6"),
        ]
        assert list(aggregate_records(records)) == ["955", "7002", "7010", "B-2", "A-1", "07"]
