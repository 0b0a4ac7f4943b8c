"""
Praklab - Azure serverless app and key vault IaC entrypoint.

Wires two ComponentResources using Pulumi config and output chaining:

- **Resource groups**: one for the app and vault, and a tagged storage group
  that parents the serverless component.
- **ServerlessApp**: storage account, consumption plan and function app with
  a system-assigned identity. Its identity is passed to the key vault.
- **IdentityKeyVault**: key vault granting the app's identity certificate
  read access.

Stack exports: resource_group_name, function_app_name,
function_app_principal_id, storage_account_name,
function_app_connection_string (secret), vault_uri.
"""

import pulumi
import pulumi_azure_native as azure_native

from components import IdentityKeyVault, ServerlessApp
from config import StackConfig


def main():
    """
    Build the resource groups, function app and key vault, and export outputs.

    Reads config, declares the app inside the tagged storage group, chains the
    app's managed identity into the vault's access policy, and exports the
    app's connection string as a secret.
    """
    config = StackConfig.from_pulumi_config(pulumi.Config())

    resource_group = azure_native.resources.ResourceGroup(
        resource_name=config.resource_group_name,
    )

    storage_group = azure_native.resources.ResourceGroup(
        resource_name=config.storage_group_name,
        resource_group_name=config.storage_group_name,
        location=config.storage_group_location,
        tags={
            "service": config.service_name,
            "environment": config.environment,
        },
    )

    app = ServerlessApp(
        name=config.app_name,
        resource_group_name=resource_group.name,
        location=config.app_location,
        ai_key=config.app_insights_key,
        name_prefix=config.app_name_prefix,
        project_name=config.project_name,
        app_settings=config.app_settings,
        environment=config.environment,
        worker_runtime=config.worker_runtime,
        functions_extension_version=config.functions_extension_version,
        opts=pulumi.ResourceOptions(parent=storage_group),
    )

    vault = IdentityKeyVault(
        name="vault",
        resource_group_name=resource_group.name,
        location=config.vault_location,
        vault_name=config.vault_name,
        principal_id=app.identity["principal_id"],
        tenant_id=app.identity["tenant_id"],
        vault_tenant_id=config.vault_tenant_id,
    )

    for output_name, value in [
        ("resource_group_name", resource_group.name),
        ("function_app_name", app.name),
        ("function_app_principal_id", app.identity["principal_id"]),
        ("storage_account_name", app.storage_account_name),
        ("function_app_connection_string", pulumi.Output.secret(app.connection_string)),
        ("vault_uri", vault.vault_uri),
    ]:
        pulumi.export(output_name, value)


if __name__ == "__main__":
    main()
