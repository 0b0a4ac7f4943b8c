"""
Azure Key Vault granting a managed identity read access to certificates.

This component creates a standard-SKU key vault with one access policy: the
given identity (e.g. a function app's system-assigned identity from
``ServerlessApp.identity``) may ``get`` certificates. The vault is enabled
for VM deployment, disk encryption and ARM template deployment.

``vault_tenant_id`` defaults to the tenant of the credentials Pulumi runs
with, so no tenant id needs to be hard-coded.
"""

import pulumi
import pulumi_azure_native as azure_native

ID: str = "praklab:azure:IdentityKeyVault"

CERTIFICATE_PERMISSIONS: list[str] = ["get"]


class IdentityKeyVault(pulumi.ComponentResource):
    """
    Key vault with a certificate-read access policy for one identity.

    Resources: Vault.
    """

    def __init__(
        self,
        name: str,
        resource_group_name: pulumi.Input[str],
        location: pulumi.Input[str],
        vault_name: str,
        principal_id: pulumi.Input[str],
        tenant_id: pulumi.Input[str],
        vault_tenant_id: pulumi.Input[str] | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the vault and its access policy.

        Args:
            name: Pulumi resource name for the vault.
            resource_group_name: Resource group holding the vault.
            location: Azure region.
            vault_name: Globally unique vault name (3-24 chars).
            principal_id: Object id of the identity granted certificate get.
            tenant_id: Tenant of that identity.
            vault_tenant_id: Tenant the vault authenticates against. Defaults
                to the tenant of the current Azure client.
            opts: Options for the component itself.

        Outputs (set on self, registered for the component):
            vault_uri: HTTPS URI of the vault.
        """
        super().__init__(ID, name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        if vault_tenant_id is None:
            vault_tenant_id = azure_native.authorization.get_client_config_output(
                opts=pulumi.InvokeOptions(parent=self),
            ).tenant_id

        access_policy = azure_native.keyvault.AccessPolicyEntryArgs(
            object_id=principal_id,
            tenant_id=tenant_id,
            permissions=azure_native.keyvault.PermissionsArgs(
                certificates=CERTIFICATE_PERMISSIONS,
            ),
        )

        self.vault = azure_native.keyvault.Vault(
            resource_name=name,
            vault_name=vault_name,
            resource_group_name=resource_group_name,
            location=location,
            properties=azure_native.keyvault.VaultPropertiesArgs(
                access_policies=[access_policy],
                enabled_for_deployment=True,
                enabled_for_disk_encryption=True,
                enabled_for_template_deployment=True,
                sku=azure_native.keyvault.SkuArgs(
                    family=azure_native.keyvault.SkuFamily.A,
                    name=azure_native.keyvault.SkuName.STANDARD,
                ),
                tenant_id=vault_tenant_id,
            ),
            opts=child_opts,
        )

        self.vault_uri: pulumi.Output[str] = self.vault.properties.apply(
            lambda p: p.vault_uri or ""
        )
        self.register_outputs({"vault_uri": self.vault_uri})
