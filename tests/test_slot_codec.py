import json

import pytest

from core.slot_codec import (
    BREAK_SENTINEL,
    SlotBooking,
    is_booked,
    is_valid_cell,
    normalize_cell,
    parse_slot_value,
    serialize_slot_booking,
)


class TestParse:
    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank_is_free(self, raw):
        assert parse_slot_value(raw) == ""

    def test_break_sentinel(self):
        assert parse_slot_value(BREAK_SENTINEL) == BREAK_SENTINEL

    def test_json_booking(self):
        raw = json.dumps({"n": "Budi", "t": "0812", "d": "Konservasi", "pid": "p-1"})
        assert parse_slot_value(raw) == SlotBooking("Budi", "0812", "Konservasi", "p-1")

    def test_json_booking_missing_optional_keys(self):
        assert parse_slot_value('{"n": "Budi"}') == SlotBooking(name="Budi")

    @pytest.mark.parametrize("raw", ['{"x": 1}', "[1, 2]", "42", '"text"', '{"n": ""}', '{"n": null}', '{"n": "  "}'])
    def test_other_json_is_free(self, raw):
        assert parse_slot_value(raw) == ""

    def test_legacy_text_with_separator(self):
        assert parse_slot_value("Jane - 2024-01-01") == SlotBooking(name="Jane", department="2024-01-01")

    def test_legacy_text_without_separator(self):
        assert parse_slot_value("Jane Doe") == SlotBooking(name="Jane Doe")


class TestSerialize:
    def test_round_trip(self):
        booking = SlotBooking("Siti Nurhaliza", "+62 812", "Periodonsia", "p-9")
        assert parse_slot_value(serialize_slot_booking(booking)) == booking

    def test_keeps_non_ascii(self):
        raw = serialize_slot_booking(SlotBooking(name="José"))
        assert "José" in raw

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            serialize_slot_booking(SlotBooking(name="  "))


class TestNormalize:
    def test_legacy_becomes_json(self):
        raw = normalize_cell("Jane - Ortodonsia")
        assert json.loads(raw) == {"n": "Jane", "t": "", "d": "Ortodonsia", "pid": ""}
        assert is_valid_cell(raw)

    @pytest.mark.parametrize("raw", ["", BREAK_SENTINEL])
    def test_canonical_values_unchanged(self, raw):
        assert normalize_cell(raw) == raw

    def test_unknown_json_cleared(self):
        assert normalize_cell('{"foo": "bar"}') == ""

    @pytest.mark.parametrize("raw", ['{"n": ""}', '{"n": null, "t": "0812"}'])
    def test_nameless_booking_cleared(self, raw):
        assert normalize_cell(raw) == ""
        assert not is_valid_cell(raw)

    def test_is_booked(self):
        assert is_booked('{"n": "A"}')
        assert not is_booked(BREAK_SENTINEL)
        assert not is_booked("")
