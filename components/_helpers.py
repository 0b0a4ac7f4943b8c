"""
Pure helpers for naming, app settings and connection strings. Testable
without Pulumi runtime.

Used by the serverless component (storage account naming, settings merge,
connection strings) and the root composition (component naming). No Pulumi
types; all functions accept and return plain Python types so they can be
unit-tested without a Pulumi stack.
"""

from typing import Any, Mapping

# Azure storage account names: 3-24 chars, lowercase alphanumeric.
STORAGE_NAME_MAX_LEN = 24
# Kept from the normalized name when a random suffix is needed.
STORAGE_NAME_KEEP_LEN = 20
STORAGE_NAME_SUFFIX_LEN = STORAGE_NAME_MAX_LEN - STORAGE_NAME_KEEP_LEN

STORAGE_ENDPOINT_SUFFIX = "core.windows.net"


class AppServiceSetting:
    """Function app setting names set by default on every app."""

    RUN_FROM_PACKAGE = "WEBSITE_RUN_FROM_PACKAGE"
    WORKER_RUNTIME = "FUNCTIONS_WORKER_RUNTIME"
    SCM_BUILD_DURING_DEPLOYMENT = "SCM_DO_BUILD_DURING_DEPLOYMENT"
    AZURE_WEB_JOBS_STORAGE = "AzureWebJobsStorage"
    FUNCTIONS_EXTENSION_VERSION = "FUNCTIONS_EXTENSION_VERSION"
    INSTRUMENTATION_KEY = "APPINSIGHTS_INSTRUMENTATIONKEY"


def component_name(
    name_prefix: str,
    project_name: str,
    name: str,
) -> str:
    """Build a component name like 'fn-praklabnative-f1'."""
    return f"{name_prefix}{project_name}-{name}"


def normalize_storage_name(
    name: str,
) -> str:
    """Strip every hyphen; Azure disallows them in storage account names."""
    return name.replace("-", "")


def storage_name_needs_suffix(
    name: str,
) -> bool:
    """
    Return True when the normalized name is too long to use as-is.

    Names of 25 characters or more are truncated and get a random suffix.
    """
    return len(normalize_storage_name(name)) > STORAGE_NAME_MAX_LEN


def derive_storage_account_name(
    name: str,
    suffix: str = "",
) -> str:
    """
    Produce an Azure storage account name from a logical name.

    Hyphens are stripped. A normalized name shorter than 25 characters is
    returned unchanged and ``suffix`` is ignored. Longer names keep their
    first 20 characters and get ``suffix`` appended, so the result is exactly
    24 characters.

    Args:
        name: Logical name (e.g. the component name "fn-praklabnative-f1").
        suffix: 4-character lowercase alphanumeric suffix; required when the
            name must be truncated.

    Returns:
        Storage account name of at most 24 characters.

    Raises:
        ValueError: If the name must be truncated and ``suffix`` is not 4
            characters long.
    """
    normalized = normalize_storage_name(name)
    if len(normalized) <= STORAGE_NAME_MAX_LEN:
        return normalized
    if len(suffix) != STORAGE_NAME_SUFFIX_LEN:
        raise ValueError(
            f"storage account name {normalized!r} needs a "
            f"{STORAGE_NAME_SUFFIX_LEN}-character suffix, got {suffix!r}"
        )
    return f"{normalized[:STORAGE_NAME_KEEP_LEN]}{suffix}"


def default_app_settings(
    instrumentation_key: str,
    storage_connection_string: str,
    worker_runtime: str = "dotnet",
    run_from_package: int = 1,
    functions_extension_version: str = "~3",
) -> dict[str, str]:
    """Settings every function app gets before caller overrides apply."""
    return {
        AppServiceSetting.INSTRUMENTATION_KEY: instrumentation_key,
        AppServiceSetting.WORKER_RUNTIME: worker_runtime,
        AppServiceSetting.RUN_FROM_PACKAGE: str(run_from_package),
        AppServiceSetting.SCM_BUILD_DURING_DEPLOYMENT: "false",
        AppServiceSetting.AZURE_WEB_JOBS_STORAGE: storage_connection_string,
        AppServiceSetting.FUNCTIONS_EXTENSION_VERSION: functions_extension_version,
    }


def merge_app_settings(
    defaults: Mapping[str, Any],
    overrides: Mapping[str, Any] | None = None,
) -> tuple[dict[str, str], list[str]]:
    """
    Overlay caller settings on defaults and drop empty values.

    Overrides win on key collision, including for the default keys. Keys
    keep the order of ``defaults`` followed by new override keys.

    Args:
        defaults: Required settings (see default_app_settings).
        overrides: Caller-supplied settings, already resolved.

    Returns:
        (settings, dropped): the flat mapping to emit, and the keys whose
        value was empty or None and were left out of it.
    """
    merged = {**defaults, **(overrides or {})}
    settings = {key: str(value) for key, value in merged.items() if value}
    dropped = [key for key, value in merged.items() if not value]
    return settings, dropped


def api_connection_string(
    endpoint: str,
    api_key: str | None,
) -> str:
    """Format 'Endpoint=<endpoint>;ApiKey=<key>'."""
    return f"Endpoint={endpoint};ApiKey={api_key}"


def storage_connection_string(
    account_name: str,
    account_key: str,
) -> str:
    """Format an HTTPS storage account connection string for the public cloud."""
    return (
        "DefaultEndpointsProtocol=https;"
        f"AccountName={account_name};"
        f"AccountKey={account_key};"
        f"EndpointSuffix={STORAGE_ENDPOINT_SUFFIX}"
    )


def function_api_endpoint(
    host_name: str,
) -> str:
    """Return the HTTPS base URL of a function app's HTTP triggers."""
    return f"https://{host_name}/api"


def identity_or_empty(
    identity: Any,
) -> dict[str, str]:
    """
    Flatten a managed identity into principal_id/tenant_id.

    Web apps without an identity report None; both ids are then "".
    """
    if identity is None:
        return {"principal_id": "", "tenant_id": ""}
    return {
        "principal_id": identity.principal_id or "",
        "tenant_id": identity.tenant_id or "",
    }
