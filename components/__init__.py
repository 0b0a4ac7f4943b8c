"""
Azure infrastructure components.

Each concern is encapsulated in its own ComponentResource for clear
ownership, testability, and reuse. Use from the Pulumi entrypoint (e.g.
__main__.py) with config and output chaining:

- **ServerlessApp**: storage account, consumption plan and function app;
  exposes identity (principal_id/tenant_id) and connection_string.
- **IdentityKeyVault**: key vault granting an identity certificate read
  access; accepts principal_id and tenant_id (str or Output[str]) and exposes
  vault_uri.
"""

from components.keyvault import IdentityKeyVault
from components.serverless import ServerlessApp, ServerlessAppImport

__all__ = ["IdentityKeyVault", "ServerlessApp", "ServerlessAppImport"]
