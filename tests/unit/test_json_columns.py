"""Unit tests for JSON column decoding and timestamp helpers."""

from datetime import datetime, timezone

import pytest

from catalog.utils.date_utils import DateUtils
from catalog.utils.json_columns import (
    dump_json_column,
    parse_image_list,
    parse_json_list,
    parse_json_object,
    primary_image,
)


class TestJsonColumns:
    @pytest.mark.parametrize("raw", [None, "", "   ", "{not json", '{"a": 1}', "42"])
    def test_list_falls_back_to_empty(self, raw):
        assert parse_json_list(raw) == []

    def test_list_decodes_array(self):
        assert parse_json_list('[1, "two"]') == [1, "two"]

    @pytest.mark.parametrize("raw", [None, "[1, 2]", "oops", ""])
    def test_object_falls_back_to_empty(self, raw):
        assert parse_json_object(raw) == {}

    def test_object_decodes(self):
        assert parse_json_object('{"slug": "shirt"}') == {"slug": "shirt"}

    def test_image_list_from_json_array_drops_blanks(self):
        raw = '["https://cdn/a.jpg", "", null, "  ", "https://cdn/b.jpg"]'
        assert parse_image_list(raw) == ["https://cdn/a.jpg", "https://cdn/b.jpg"]

    def test_bare_url_is_a_single_image(self):
        assert parse_image_list("https://cdn/a.jpg") == ["https://cdn/a.jpg"]

    @pytest.mark.parametrize("raw", [None, "", "[]"])
    def test_empty_images(self, raw):
        assert parse_image_list(raw) == []

    def test_primary_image(self):
        assert primary_image('["https://cdn/a.jpg", "https://cdn/b.jpg"]') == "https://cdn/a.jpg"
        assert primary_image("[]") is None

    def test_dump(self):
        assert dump_json_column(None) == "[]"
        assert dump_json_column(None, default="{}") == "{}"
        assert dump_json_column(["a", 1]) == '["a",1]'
        assert dump_json_column('["already"]') == '["already"]'


class TestDateUtils:
    def test_now_iso_is_utc_with_z_suffix(self):
        value = DateUtils.now_iso()
        assert value.endswith("Z")
        assert DateUtils.parse_iso_string(value) is not None

    def test_parse_naive_assumes_utc(self):
        parsed = DateUtils.parse_iso_string("2026-03-01T10:00:00")
        assert parsed == datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday-ish", 17])
    def test_parse_invalid_returns_none(self, value):
        assert DateUtils.parse_iso_string(value) is None

    def test_is_past(self):
        now = datetime(2026, 3, 1, tzinfo=timezone.utc)
        assert DateUtils.is_past("2026-02-01T00:00:00Z", now=now)
        assert not DateUtils.is_past("2026-04-01T00:00:00Z", now=now)
        assert not DateUtils.is_past(None, now=now)

    def test_now_millis(self):
        assert DateUtils.now_millis() > 1_700_000_000_000
