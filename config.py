"""
Stack configuration loaded from pulumi.Config().

Provides a typed, immutable view of stack settings. All settings are read from
Pulumi config (e.g. Pulumi.<stack>.yaml or pulumi config set). Every key is
optional and defaults to the values the stack was first deployed with, so an
empty stack config still yields a complete deployment. Used by __main__.main()
to name resource groups, the function app and the key vault.
"""

from dataclasses import dataclass
from typing import Any, Callable

import pulumi

DEFAULT_APP_SETTINGS: dict[str, str] = {
    "test:appsetting:1": "1",
    "test:appsetting:2": "1",
}


def _get_str(default: str | None) -> Callable[[pulumi.Config, str], str | None]:
    def parse(config: pulumi.Config, key: str) -> str | None:
        value = config.get(key)
        return default if value is None else value

    return parse


def _get_optional_str(config: pulumi.Config, key: str) -> str | None:
    # "" means unset, so callers fall back to their own default.
    return config.get(key) or None


def _setting_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _get_settings(config: pulumi.Config, key: str) -> dict[str, str]:
    raw = config.get_object(key)
    if raw is None:
        return dict(DEFAULT_APP_SETTINGS)
    if not isinstance(raw, dict):
        raise pulumi.ConfigTypeError(key, str(raw), "object")
    return {str(k): _setting_value(v) for k, v in raw.items()}


# (key, parser); parser receives (config, key) and returns value.
_CONFIG_SPEC: list[tuple[str, Callable[[pulumi.Config, str], Any]]] = [
    ("project_name", _get_str("praklabnative")),
    ("environment", _get_str("dev")),
    ("resource_group_name", _get_str("rg-praklab-f1")),
    ("storage_group_name", _get_str("sa-praklab-112")),
    ("storage_group_location", _get_str("southeastasia")),
    ("service_name", _get_str("posts")),
    ("app_name", _get_str("f1")),
    ("app_name_prefix", _get_str("fn-")),
    ("app_location", _get_str("eastus")),
    ("app_insights_key", _get_str("test2")),
    ("app_settings", _get_settings),
    ("functions_extension_version", _get_str("~3")),
    ("worker_runtime", _get_str("dotnet")),
    ("vault_name", _get_str("fn-prakvault3-333")),
    ("vault_location", _get_str("westus")),
    ("vault_tenant_id", _get_optional_str),
]


@dataclass(frozen=True)
class StackConfig:
    """
    Stack configuration from Pulumi config.

    Attributes:
        project_name: Project label in the function app's component name.
        environment: Environment label tagged on resources.
        resource_group_name: Resource group for the app and the key vault.
        storage_group_name: Tagged resource group that parents the app.
        storage_group_location: Region of the tagged resource group.
        service_name: Value of the "service" tag on the tagged group.
        app_name: Logical function app name.
        app_name_prefix: Prefix of the function app's component name.
        app_location: Region of the function app and its storage.
        app_insights_key: Application Insights instrumentation key.
        app_settings: Caller app settings; override the defaults.
        functions_extension_version: Azure Functions runtime version.
        worker_runtime: Azure Functions worker runtime.
        vault_name: Globally unique key vault name.
        vault_location: Region of the key vault.
        vault_tenant_id: Tenant of the key vault; None means the current
            client's tenant.
    """

    project_name: str
    environment: str
    resource_group_name: str
    storage_group_name: str
    storage_group_location: str
    service_name: str
    app_name: str
    app_name_prefix: str
    app_location: str
    app_insights_key: str
    app_settings: dict[str, str]
    functions_extension_version: str
    worker_runtime: str
    vault_name: str
    vault_location: str
    vault_tenant_id: str | None

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config) -> "StackConfig":
        """
        Build StackConfig from pulumi.Config(). Missing keys take the defaults
        in _CONFIG_SPEC.
        """
        kwargs = {key: parser(config, key) for key, parser in _CONFIG_SPEC}
        return cls(**kwargs)
