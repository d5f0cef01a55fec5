"""
Tests for the configuration-driven CORS policy.
"""

import pytest

from corsmachine import ConfigurationError, Settings, parse_url
from tests.framework import MultiDriverTestBase


class TestSettingsValidation:
    """Test Settings.validate() checks."""

    def test_minimal_settings(self):
        settings = Settings(server_origin="https://api.example.com")

        assert settings.get_server_origin() == parse_url("https://api.example.com")
        assert settings.allowed_origins == []
        assert settings.max_age == 86400

    def test_invalid_server_origin(self):
        with pytest.raises(ConfigurationError, match="invalid server origin"):
            Settings(server_origin="https://")

    def test_server_origin_needs_scheme(self):
        with pytest.raises(ConfigurationError, match="must include a scheme"):
            Settings(server_origin="api.example.com")

    def test_invalid_allowed_origin(self):
        with pytest.raises(ConfigurationError, match="invalid allowed origin"):
            Settings(server_origin="https://api.example.com", allowed_origins=["https://app.example.com:99999"])

    def test_negative_max_age(self):
        with pytest.raises(ConfigurationError, match="max_age"):
            Settings(server_origin="https://api.example.com", max_age=-1)

    def test_wildcard_with_credentials_is_rejected(self):
        """Security requirement: cannot combine wildcard origin with credentials."""
        with pytest.raises(ConfigurationError, match="Cannot use wildcard origin"):
            Settings(server_origin="https://api.example.com", allowed_origins="*", credentials=True)

    def test_wildcard_entry_with_credentials_is_rejected(self):
        with pytest.raises(ConfigurationError, match="Cannot use wildcard origin"):
            Settings(server_origin="https://api.example.com", allowed_origins=["*"], credentials=True)

    def test_reflect_any_origin_allows_wildcard_with_credentials(self, caplog):
        settings = Settings(
            server_origin="https://api.example.com",
            allowed_origins="*",
            credentials=True,
            reflect_any_origin=True,
        )

        assert settings.is_request_origin_allowed(parse_url("https://anything.example.org"))
        assert "reflecting any origin" in caplog.text

    def test_specific_origin_with_credentials(self):
        Settings(
            server_origin="https://api.example.com",
            allowed_origins=["https://app.example.com"],
            credentials=True,
        )  # Should not raise

    def test_bare_origin_string_is_rejected(self):
        with pytest.raises(ConfigurationError, match="must be a list of origins or '\\*'"):
            Settings(server_origin="https://api.example.com", allowed_origins="https://app.example.com")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            Settings(server_origin="")


class TestSettingsPolicy:
    """Test the AnalysisStrategy answers of Settings."""

    @pytest.fixture
    def settings(self):
        return Settings(
            server_origin="https://api.example.com",
            allowed_origins=["https://app.example.com", "http://localhost:3000", "null"],
            allowed_methods=["GET", "POST", "PUT"],
            allowed_headers=["Content-Type", "X-Custom"],
            exposed_headers=["X-Request-ID"],
            credentials=True,
            max_age=600,
        )

    def test_origin_allowed(self, settings):
        assert settings.is_request_origin_allowed(parse_url("https://app.example.com"))
        assert settings.is_request_origin_allowed(parse_url("http://localhost:3000"))
        assert not settings.is_request_origin_allowed(parse_url("https://evil.example.com"))

    def test_origin_compared_as_origin(self, settings):
        assert settings.is_request_origin_allowed(parse_url("https://APP.example.com:443"))
        assert not settings.is_request_origin_allowed(parse_url("http://app.example.com"))
        assert not settings.is_request_origin_allowed(parse_url("https://app.example.com:8443"))

    def test_null_origin_listed(self, settings):
        assert settings.is_request_origin_allowed(parse_url("null"))

    def test_wildcard_allows_any_origin(self):
        settings = Settings(server_origin="https://api.example.com", allowed_origins="*")
        assert settings.is_request_origin_allowed(parse_url("https://whatever.example.net"))

    def test_methods_are_case_sensitive(self, settings):
        assert settings.is_request_method_supported("PUT")
        assert not settings.is_request_method_supported("put")
        assert not settings.is_request_method_supported("DELETE")

    def test_headers_are_case_insensitive(self, settings):
        assert settings.is_request_all_headers_supported(["content-type", "X-CUSTOM"])
        assert settings.is_request_all_headers_supported([])
        assert not settings.is_request_all_headers_supported(["Content-Type", "X-Secret"])

    def test_wildcard_headers(self):
        settings = Settings(server_origin="https://api.example.com", allowed_headers=["*"])

        assert settings.is_request_all_headers_supported(["X-Anything"])
        assert settings.get_request_allowed_headers(None, []) == []

    def test_allowed_headers_echo_request(self, settings):
        assert settings.get_request_allowed_headers(None, ["x-custom"]) == ["x-custom"]
        assert settings.get_request_allowed_headers(None, []) == ["Content-Type", "X-Custom"]

    def test_allowed_methods(self, settings):
        assert settings.get_request_allowed_methods(None, "PUT") == ["GET", "POST", "PUT"]

    def test_credentials_and_exposed_headers(self, settings):
        assert settings.is_request_credentials_supported(None) is True
        assert settings.get_response_exposed_headers(None) == ["X-Request-ID"]

    def test_cache(self, settings):
        assert settings.is_pre_flight_can_be_cached(None)
        assert settings.get_pre_flight_cache_max_age(None) == 600

    def test_no_cache(self):
        settings = Settings(server_origin="https://api.example.com", max_age=None)
        assert not settings.is_pre_flight_can_be_cached(None)

    def test_force_flags_default_off(self, settings):
        assert not settings.is_force_add_allowed_methods_to_pre_flight_response()
        assert not settings.is_force_add_allowed_headers_to_pre_flight_response()

    def test_reassigned_fields_take_effect(self, settings):
        settings.allowed_origins = ["https://other.example.com"]
        settings.allowed_headers = ["X-New"]
        settings.server_origin = "http://localhost:8000"

        assert not settings.is_request_origin_allowed(parse_url("https://app.example.com"))
        assert settings.is_request_origin_allowed(parse_url("https://other.example.com"))
        assert settings.is_request_all_headers_supported(["x-new"])
        assert not settings.is_request_all_headers_supported(["X-Custom"])
        assert settings.get_server_origin() == parse_url("http://localhost:8000")

    def test_validate_after_reassignment(self, settings):
        settings.allowed_origins = "*"

        with pytest.raises(ConfigurationError, match="Cannot use wildcard origin"):
            settings.validate()


class TestSettingsFromMapping:
    """Test loading settings from plain mappings via pydantic validation."""

    def test_lists(self):
        settings = Settings.from_mapping({
            "server_origin": "https://api.example.com",
            "allowed_origins": ["https://app.example.com"],
            "allowed_methods": ["GET", "PUT"],
            "credentials": True,
            "max_age": 60,
        })

        assert settings.allowed_origins == ["https://app.example.com"]
        assert settings.allowed_methods == ["GET", "PUT"]
        assert settings.credentials is True
        assert settings.max_age == 60

    def test_comma_separated_strings(self):
        settings = Settings.from_mapping({
            "server_origin": "https://api.example.com",
            "allowed_origins": "https://a.example.com, https://b.example.com",
            "exposed_headers": "X-Request-ID,ETag",
        })

        assert settings.allowed_origins == ["https://a.example.com", "https://b.example.com"]
        assert settings.exposed_headers == ["X-Request-ID", "ETag"]

    def test_wildcard_origins_string(self):
        settings = Settings.from_mapping({"server_origin": "https://api.example.com", "allowed_origins": "*"})
        assert settings.allowed_origins == "*"

    def test_unset_fields_keep_defaults(self):
        settings = Settings.from_mapping({"server_origin": "https://api.example.com"})

        assert settings.max_age == 86400
        assert "Authorization" in settings.allowed_headers

    def test_explicit_null_max_age_disables_cache(self):
        settings = Settings.from_mapping({"server_origin": "https://api.example.com", "max_age": None})
        assert settings.max_age is None

    def test_missing_server_origin(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_mapping({"allowed_origins": ["https://app.example.com"]})

        assert exc_info.value.errors[0]["loc"] == ("server_origin",)
        assert exc_info.value.errors[0]["type"] == "missing"

    def test_unknown_field(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_mapping({"server_origin": "https://api.example.com", "allow_everything": True})

        assert exc_info.value.errors[0]["type"] == "extra_forbidden"

    def test_negative_max_age(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_mapping({"server_origin": "https://api.example.com", "max_age": -5})

        assert exc_info.value.errors[0]["loc"] == ("max_age",)

    def test_semantic_errors_still_raised(self):
        with pytest.raises(ConfigurationError, match="Cannot use wildcard origin"):
            Settings.from_mapping({
                "server_origin": "https://api.example.com",
                "allowed_origins": "*",
                "credentials": True,
            })


class TestSettingsFromEnviron:
    """Test loading settings from CORS_* environment variables."""

    def test_environ(self):
        settings = Settings.from_environ({
            "CORS_SERVER_ORIGIN": "https://api.example.com",
            "CORS_ALLOWED_ORIGINS": "https://app.example.com,http://localhost:3000",
            "CORS_ALLOWED_METHODS": "GET, POST",
            "CORS_CREDENTIALS": "true",
            "CORS_MAX_AGE": "120",
            "CORS_FORCE_ADD_HEADERS": "1",
            "UNRELATED": "ignored",
        })

        assert settings.allowed_origins == ["https://app.example.com", "http://localhost:3000"]
        assert settings.allowed_methods == ["GET", "POST"]
        assert settings.credentials is True
        assert settings.max_age == 120
        assert settings.force_add_headers is True
        assert settings.force_add_methods is False

    def test_custom_prefix(self):
        settings = Settings.from_environ(
            {"API_CORS_SERVER_ORIGIN": "http://localhost:8000", "API_CORS_MAX_AGE": "none"},
            prefix="API_CORS_",
        )

        assert settings.get_server_origin().port == 8000
        assert settings.max_age is None

    def test_process_environment(self, monkeypatch):
        monkeypatch.setenv("CORS_SERVER_ORIGIN", "https://api.example.com")
        monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "*")

        settings = Settings.from_environ()
        assert settings.allowed_origins == "*"

    def test_invalid_flag(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_environ({"CORS_SERVER_ORIGIN": "https://api.example.com", "CORS_CREDENTIALS": "maybe"})

        assert exc_info.value.errors[0]["loc"] == ("credentials",)


class TestSettingsAnalysis(MultiDriverTestBase):
    """End-to-end analysis with the stock policy."""

    def create_strategy(self):
        return Settings(
            server_origin="https://api.example.com",
            allowed_origins=["https://app.example.com"],
            allowed_methods=["GET", "POST", "PUT"],
            allowed_headers=["Content-Type", "X-Custom"],
            exposed_headers=["X-Request-ID"],
            credentials=True,
            max_age=600,
        )

    def test_actual_request(self, api):
        api_client, driver_name = api

        outcome = api_client.execute(api_client.cross_origin("POST"))

        assert outcome.result.to_response_headers().to_dict() == {
            "Access-Control-Allow-Origin": "https://app.example.com",
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Expose-Headers": "X-Request-ID",
        }

    def test_preflight(self, api):
        api_client, driver_name = api

        outcome = api_client.execute(api_client.preflight("PUT", "x-custom, content-type"))

        assert outcome.result.to_response_headers().to_dict() == {
            "Access-Control-Allow-Origin": "https://app.example.com",
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Max-Age": "600",
            "Access-Control-Allow-Methods": "GET, POST, PUT",
            "Access-Control-Allow-Headers": "x-custom, content-type",
        }

    def test_preflight_with_unlisted_header(self, api):
        api_client, driver_name = api

        outcome = api_client.execute(api_client.preflight("PUT", "X-Custom, Authorization"))
        api_client.expect_pre_flight_refused(outcome)

    def test_preflight_with_unlisted_method(self, api):
        api_client, driver_name = api

        outcome = api_client.execute(api_client.preflight("DELETE"))
        api_client.expect_pre_flight_refused(outcome)

    def test_unlisted_origin(self, api):
        api_client, driver_name = api

        outcome = api_client.execute(api_client.cross_origin(origin="https://evil.example.com"))
        api_client.expect_out_of_scope(outcome)

    def test_changed_settings_apply_to_next_analysis(self, api):
        api_client, driver_name = api

        self.strategy.allowed_origins = ["https://other.example.com"]
        self.strategy.allowed_headers = ["X-New"]

        outcome = api_client.execute(api_client.cross_origin())
        api_client.expect_out_of_scope(outcome)

        outcome = api_client.execute(api_client.preflight("PUT", "X-New", origin="https://other.example.com"))
        api_client.expect_pre_flight_allowed(outcome, origin="https://other.example.com")
        assert outcome.get_header("Access-Control-Allow-Headers") == ("X-New",)
