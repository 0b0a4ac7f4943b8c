"""
Azure serverless app: Storage Account + consumption plan + Function App.

This component creates a general-purpose v2 storage account, a consumption
(``Y1``/``Dynamic``) app service plan, and a web app of kind ``functionapp``
with a system-assigned managed identity. The function app's settings are the
required defaults (instrumentation key, worker runtime, run-from-package,
storage connection string, runtime version) overlaid with caller settings.

Outputs are ``Output`` values so other components (e.g. the key vault) can
use the app's ``identity`` to grant access, and stacks can export the
``connection_string`` for API clients.

Storage account names are derived from the component name: hyphens are
stripped and names of 25+ characters are truncated to 20 characters plus a
4-character random suffix kept in Pulumi state.
"""

from dataclasses import dataclass
from typing import Any, Mapping

import pulumi
import pulumi_azure_native as azure_native
import pulumi_random as random

from components._helpers import (
    STORAGE_NAME_SUFFIX_LEN,
    api_connection_string,
    component_name,
    default_app_settings,
    derive_storage_account_name,
    function_api_endpoint,
    identity_or_empty,
    merge_app_settings,
    storage_connection_string,
    storage_name_needs_suffix,
)

ID: str = "praklab:azure:ServerlessApp"

# Consumption plan; billed per execution.
CONSUMPTION_SKU: dict[str, str] = {
    "tier": "Dynamic",
    "name": "Y1",
}

STORAGE_TIER: dict[str, Any] = {
    "access_tier": azure_native.storage.AccessTier.HOT,
    "kind": azure_native.storage.Kind.STORAGE_V2,
    "sku": azure_native.storage.SkuArgs(
        name=azure_native.storage.SkuName.STANDARD_LRS,
    ),
}

# Setting values may be known now (str) or only after another resource is
# created (pulumi.Output[str]).
SettingValue = str | pulumi.Output[str]


@dataclass(frozen=True)
class ServerlessAppImport:
    """Ids of existing resources to adopt instead of creating new ones."""

    storage_account_id: str
    app_service_plan_id: str
    function_app_id: str


def storage_account_name(
    name: str,
    parent: pulumi.Resource,
) -> pulumi.Output[str]:
    """
    Derive the storage account name for ``name``.

    Short names resolve immediately. Long names get a RandomString suffix
    parented to ``parent`` so the suffix survives later updates.
    """
    if not storage_name_needs_suffix(name):
        return pulumi.Output.from_input(derive_storage_account_name(name))

    pulumi.log.info(
        f"storage account name for {name} exceeds 24 characters; "
        "truncating and adding a random suffix",
        resource=parent,
    )
    suffix = random.RandomString(
        resource_name=name,
        length=STORAGE_NAME_SUFFIX_LEN,
        lower=True,
        upper=False,
        numeric=True,
        special=False,
        opts=pulumi.ResourceOptions(parent=parent),
    )
    return suffix.result.apply(lambda r: derive_storage_account_name(name, r))


class ServerlessApp(pulumi.ComponentResource):
    """
    Function App on a consumption plan, with its own storage account.

    Resources: StorageAccount, AppServicePlan, WebApp (kind functionapp),
    and a RandomString when the storage account name must be truncated.
    """

    def __init__(
        self,
        name: str,
        resource_group_name: pulumi.Input[str],
        location: pulumi.Input[str],
        ai_key: pulumi.Input[str],
        name_prefix: str = "",
        project_name: str = "praklabnative",
        app_settings: Mapping[str, SettingValue] | None = None,
        environment: str | None = None,
        worker_runtime: str = "dotnet",
        run_from_package: int = 1,
        functions_extension_version: str = "~3",
        existing: ServerlessAppImport | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the storage account, app service plan, and function app.

        Args:
            name: Logical app name; the component name is
                ``{name_prefix}{project_name}-{name}``.
            resource_group_name: Resource group for every child resource.
            location: Azure region for every child resource.
            ai_key: Application Insights instrumentation key.
            name_prefix: Prefix for the component name (e.g. "fn-").
            project_name: Project label in the component name.
            app_settings: Caller settings; override defaults on collision.
                Empty values are dropped (see dropped_app_settings).
            environment: If given, tagged on child resources.
            worker_runtime: FUNCTIONS_WORKER_RUNTIME default.
            run_from_package: WEBSITE_RUN_FROM_PACKAGE default.
            functions_extension_version: FUNCTIONS_EXTENSION_VERSION default.
            existing: Ids of existing resources to import.
            opts: Options for the component itself (e.g. parent).

        Outputs (set on self, registered for the component):
            identity: {"principal_id", "tenant_id"} of the managed identity.
            connection_string: "Endpoint=https://<host>/api;ApiKey=<master key>".
            storage_account_name: Derived storage account name.
            app_settings: Final flat settings mapping.
            dropped_app_settings: Keys dropped because their value was empty.
        """
        full_name = component_name(name_prefix, project_name, name)
        super().__init__(ID, full_name, None, opts)

        self.name = full_name
        self._resource_group_name = resource_group_name
        self._location = location
        self._tags = {"environment": environment} if environment else None
        self._existing = existing

        self.storage_account_name = storage_account_name(self.name, self)
        storage = azure_native.storage.StorageAccount(
            resource_name=f"{self.name}-storage",
            account_name=self.storage_account_name,
            resource_group_name=resource_group_name,
            location=location,
            tags=self._tags,
            opts=self._child_opts(existing and existing.storage_account_id),
            **STORAGE_TIER,
        )

        storage_keys = azure_native.storage.list_storage_account_keys_output(
            resource_group_name=resource_group_name,
            account_name=storage.name,
        )
        primary_storage_key = storage_keys.apply(lambda r: r.keys[0].value)
        storage_connection = pulumi.Output.all(
            storage.name, primary_storage_key
        ).apply(lambda args: storage_connection_string(*args))

        settings = self._create_app_settings(
            app_settings or {},
            ai_key,
            storage_connection,
            worker_runtime=worker_runtime,
            run_from_package=run_from_package,
            functions_extension_version=functions_extension_version,
        )
        self.app_settings: pulumi.Output[dict[str, str]] = settings.apply(
            lambda s: s[0]
        )
        self.dropped_app_settings: pulumi.Output[list[str]] = settings.apply(
            lambda s: s[1]
        )

        app = azure_native.web.WebApp(
            resource_name=self.name,
            name=self.name,
            kind="functionapp",
            resource_group_name=resource_group_name,
            location=location,
            server_farm_id=self._create_app_service_plan(),
            client_affinity_enabled=False,
            https_only=True,
            identity=azure_native.web.ManagedServiceIdentityArgs(
                type=azure_native.web.ManagedServiceIdentityType.SYSTEM_ASSIGNED,
            ),
            site_config=azure_native.web.SiteConfigArgs(
                app_settings=self.app_settings.apply(_name_value_pairs),
                http20_enabled=True,
                web_sockets_enabled=False,
                cors=azure_native.web.CorsSettingsArgs(
                    allowed_origins=["*"],
                ),
            ),
            tags=self._tags,
            opts=self._child_opts(existing and existing.function_app_id),
        )

        host_keys = azure_native.web.list_web_app_host_keys_output(
            name=app.name,
            resource_group_name=resource_group_name,
        )
        self.connection_string: pulumi.Output[str] = pulumi.Output.all(
            app.default_host_name, host_keys.master_key
        ).apply(
            lambda args: api_connection_string(function_api_endpoint(args[0]), args[1])
        )

        self.identity: pulumi.Output[dict[str, str]] = app.identity.apply(
            identity_or_empty
        )
        self.register_outputs(
            {
                "identity": self.identity,
                "connection_string": self.connection_string,
                "storage_account_name": self.storage_account_name,
                "app_settings": self.app_settings,
                "dropped_app_settings": self.dropped_app_settings,
            }
        )

    def _child_opts(
        self,
        import_id: str | None = None,
    ) -> pulumi.ResourceOptions:
        # Child resources get parent=self so Pulumi builds a proper hierarchy.
        return pulumi.ResourceOptions(parent=self, import_=import_id or None)

    def _create_app_service_plan(self) -> pulumi.Output[str]:
        plan_name = f"{self.name}-plan"
        plan = azure_native.web.AppServicePlan(
            resource_name=plan_name,
            name=plan_name,
            kind="functionapp",
            resource_group_name=self._resource_group_name,
            location=self._location,
            sku=azure_native.web.SkuDescriptionArgs(**CONSUMPTION_SKU),
            tags=self._tags,
            opts=self._child_opts(
                self._existing and self._existing.app_service_plan_id
            ),
        )
        return plan.id

    def _create_app_settings(
        self,
        app_settings: Mapping[str, SettingValue],
        ai_key: pulumi.Input[str],
        storage_connection: pulumi.Input[str],
        worker_runtime: str,
        run_from_package: int,
        functions_extension_version: str,
    ) -> pulumi.Output[tuple[dict[str, str], list[str]]]:
        """
        Merge defaults and caller settings once every value resolves.

        Dropped keys are warned about on this component.
        """

        def merge(args: list[Any]) -> tuple[dict[str, str], list[str]]:
            overrides, key, connection = args
            defaults = default_app_settings(
                key,
                connection,
                worker_runtime=worker_runtime,
                run_from_package=run_from_package,
                functions_extension_version=functions_extension_version,
            )
            settings, dropped = merge_app_settings(defaults, overrides)
            if dropped:
                pulumi.log.warn(
                    f"dropping app settings with empty values: {', '.join(dropped)}",
                    resource=self,
                )
            return settings, dropped

        return pulumi.Output.all(
            pulumi.Output.from_input(dict(app_settings)),
            ai_key,
            storage_connection,
        ).apply(merge)


def _name_value_pairs(
    settings: Mapping[str, str],
) -> list[azure_native.web.NameValuePairArgs]:
    return [
        azure_native.web.NameValuePairArgs(name=key, value=value)
        for key, value in settings.items()
    ]
