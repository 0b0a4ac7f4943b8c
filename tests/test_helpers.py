"""Tests for pure helpers"""

from types import SimpleNamespace

import pytest

from components import _helpers
from components._helpers import AppServiceSetting


class TestComponentName:
    def test_joins_prefix_project_and_name(self):
        assert _helpers.component_name("fn-", "praklabnative", "f1") == "fn-praklabnative-f1"

    def test_empty_prefix(self):
        assert _helpers.component_name("", "praklab", "api") == "praklab-api"


class TestNormalizeStorageName:
    def test_strips_every_hyphen(self):
        assert _helpers.normalize_storage_name("a-b-c") == "abc"

    def test_leaves_name_without_hyphens(self):
        assert _helpers.normalize_storage_name("abc123") == "abc123"


class TestDeriveStorageAccountName:
    def test_short_name_is_normalized_only(self):
        assert _helpers.derive_storage_account_name("fn-praklabnative-f1") == "fnpraklabnativef1"

    def test_short_name_ignores_suffix(self):
        assert _helpers.derive_storage_account_name("fn-app", "zz99") == "fnapp"

    def test_24_chars_kept_unchanged(self):
        name = "a" * 24
        assert _helpers.derive_storage_account_name(name, "zz99") == name

    def test_hyphens_do_not_count_towards_length(self):
        name = "-".join(["abcd"] * 6)
        assert _helpers.derive_storage_account_name(name) == "abcd" * 6

    def test_long_name_truncated_with_suffix(self):
        name = "fn-praklabnative-averylongfunctionname"
        result = _helpers.derive_storage_account_name(name, "k3x9")
        assert result == "fnpraklabnativeavery" + "k3x9"
        assert len(result) == 24

    def test_long_name_requires_full_suffix(self):
        with pytest.raises(ValueError):
            _helpers.derive_storage_account_name("c" * 25)
        with pytest.raises(ValueError):
            _helpers.derive_storage_account_name("c" * 25, "ab")

    def test_25_chars_needs_suffix(self):
        assert _helpers.storage_name_needs_suffix("b" * 25)
        assert not _helpers.storage_name_needs_suffix("b" * 24)
        assert not _helpers.storage_name_needs_suffix("-".join(["b"] * 24))

    def test_suffix_length_matches_limit(self):
        assert _helpers.STORAGE_NAME_KEEP_LEN + _helpers.STORAGE_NAME_SUFFIX_LEN == 24


class TestMergeAppSettings:
    def test_override_wins_and_defaults_kept(self):
        settings, dropped = _helpers.merge_app_settings(
            {"A": "1", "B": "2"}, {"B": "9", "C": "3"}
        )
        assert settings == {"A": "1", "B": "9", "C": "3"}
        assert dropped == []

    def test_empty_value_is_dropped(self):
        settings, dropped = _helpers.merge_app_settings({"B": "2"}, {"A": ""})
        assert settings == {"B": "2"}
        assert dropped == ["A"]

    def test_none_value_is_dropped(self):
        settings, dropped = _helpers.merge_app_settings({"A": None, "B": "2"})
        assert "A" not in settings
        assert dropped == ["A"]

    def test_override_can_blank_a_default(self):
        settings, dropped = _helpers.merge_app_settings({"A": "1"}, {"A": ""})
        assert settings == {}
        assert dropped == ["A"]

    def test_keeps_default_order(self):
        settings, _ = _helpers.merge_app_settings({"A": "1", "B": "2"}, {"C": "3", "A": "0"})
        assert list(settings) == ["A", "B", "C"]


class TestDefaultAppSettings:
    def test_required_defaults(self):
        settings = _helpers.default_app_settings("ai", "conn")
        assert settings == {
            AppServiceSetting.INSTRUMENTATION_KEY: "ai",
            AppServiceSetting.WORKER_RUNTIME: "dotnet",
            AppServiceSetting.RUN_FROM_PACKAGE: "1",
            AppServiceSetting.SCM_BUILD_DURING_DEPLOYMENT: "false",
            AppServiceSetting.AZURE_WEB_JOBS_STORAGE: "conn",
            AppServiceSetting.FUNCTIONS_EXTENSION_VERSION: "~3",
        }

    def test_setting_names(self):
        assert AppServiceSetting.RUN_FROM_PACKAGE == "WEBSITE_RUN_FROM_PACKAGE"
        assert AppServiceSetting.AZURE_WEB_JOBS_STORAGE == "AzureWebJobsStorage"
        assert AppServiceSetting.INSTRUMENTATION_KEY == "APPINSIGHTS_INSTRUMENTATIONKEY"

    def test_caller_overrides_required_default(self):
        defaults = _helpers.default_app_settings("ai", "conn", worker_runtime="python")
        settings, _ = _helpers.merge_app_settings(
            defaults, {AppServiceSetting.WORKER_RUNTIME: "node"}
        )
        assert settings[AppServiceSetting.WORKER_RUNTIME] == "node"


class TestConnectionStrings:
    def test_api_connection_string(self):
        assert (
            _helpers.api_connection_string("https://host/api", "key1")
            == "Endpoint=https://host/api;ApiKey=key1"
        )

    def test_storage_connection_string(self):
        assert _helpers.storage_connection_string("acct", "key2") == (
            "DefaultEndpointsProtocol=https;AccountName=acct;"
            "AccountKey=key2;EndpointSuffix=core.windows.net"
        )

    def test_function_api_endpoint(self):
        assert _helpers.function_api_endpoint("app.azurewebsites.net") == (
            "https://app.azurewebsites.net/api"
        )


class TestIdentityOrEmpty:
    def test_missing_identity(self):
        assert _helpers.identity_or_empty(None) == {"principal_id": "", "tenant_id": ""}

    def test_identity_ids(self):
        identity = SimpleNamespace(principal_id="p-1", tenant_id="t-1")
        assert _helpers.identity_or_empty(identity) == {
            "principal_id": "p-1",
            "tenant_id": "t-1",
        }
