"""Tests for sync settings coercion and query parameter building."""

import logging

import pytest

from tendersync.core.config.models import SyncSettings
from tendersync.core.errors import ConfigurationError
from tendersync.core.normalize.settings import build_query_params, coerce_settings


class TestBuildQueryParams:
    """Test suite for build_query_params."""

    def test_defaults_to_page_size_only(self):
        """No settings yields only the default page size."""
        assert build_query_params(None) == {"PageSize": "50"}
        assert build_query_params(SyncSettings()) == {"PageSize": "50"}

    @pytest.mark.parametrize("page_size", [0, -5])
    def test_non_positive_page_size_falls_back(self, page_size):
        """Zero or negative page sizes use the default."""
        settings = SyncSettings(pageSize=page_size)
        assert build_query_params(settings)["PageSize"] == "50"

    def test_all_filters_in_order(self):
        """Every option is forwarded under its API name, in a fixed order."""
        settings = SyncSettings(
            pageSize=100,
            tenderCategory=2,
            tenderActivityId=9,
            tenderAreasId=1,
            fields=["tenderId", "tenderName"],
        )

        params = build_query_params(settings)

        assert list(params.items()) == [
            ("PageSize", "100"),
            ("TenderCategory", "2"),
            ("TenderActivityId", "9"),
            ("TenderAreasIdString", "1"),
            ("fields", "tenderId,tenderName"),
        ]

    def test_fields_string_passed_through(self):
        """A fields string is forwarded unchanged."""
        params = build_query_params(SyncSettings(fields="tenderId,agencyName"))
        assert params["fields"] == "tenderId,agencyName"

    @pytest.mark.parametrize("fields", [None, "", []])
    def test_empty_fields_omitted(self, fields):
        """Absent or empty projections are not sent."""
        assert "fields" not in build_query_params(SyncSettings(fields=fields))

    def test_unknown_filter_warns_but_forwards(self, caplog):
        """Values outside the catalog are logged and still sent."""
        with caplog.at_level(logging.WARNING, logger="tendersync"):
            params = build_query_params(SyncSettings(tenderCategory=99))

        assert params["TenderCategory"] == "99"
        assert "TenderCategory=99" in caplog.text


class TestCoerceSettings:
    """Test suite for coerce_settings."""

    def test_none_gives_empty_settings(self):
        """None means no constraints."""
        assert coerce_settings(None) == SyncSettings()

    def test_model_returned_as_is(self):
        """A SyncSettings instance is returned unchanged."""
        settings = SyncSettings(pageSize=10)
        assert coerce_settings(settings) is settings

    def test_camel_case_mapping(self):
        """Dashboard-style keys and numeric strings are accepted."""
        settings = coerce_settings(
            {"pageSize": "25", "tenderCategory": "", "tenderAreasIdString": "3"}
        )

        assert settings.page_size == 25
        assert settings.tender_category is None
        assert settings.tender_areas_id == 3

    def test_snake_case_mapping(self):
        """Attribute names are accepted too."""
        settings = coerce_settings({"page_size": 5, "tender_areas_id": 2})

        assert settings.page_size == 5
        assert settings.tender_areas_id == 2

    def test_invalid_mapping_raises_configuration_error(self):
        """Unparseable values raise ConfigurationError naming the field."""
        with pytest.raises(ConfigurationError) as exc_info:
            coerce_settings({"pageSize": "lots"})

        assert "pageSize" in str(exc_info.value)
        assert exc_info.value.details

    def test_unsupported_type(self):
        """Non-mapping values are rejected."""
        with pytest.raises(ConfigurationError):
            coerce_settings(["pageSize", 10])

    def test_settings_are_frozen(self):
        """Settings cannot be mutated after construction."""
        settings = SyncSettings(pageSize=10)
        with pytest.raises(Exception):
            settings.page_size = 20
