import logging
from typing import Any, List, Optional

from akvazure.errors import SetupError
from akvazure.models import VaultRef
from akvazure.session import AzureSession
from util.sanitization import Sanitization

logger = logging.getLogger(__name__)


class VaultDirectory:
    """
    Looks up Key Vaults in the session's subscription through the management plane.
    """

    def __init__(self, session: AzureSession, client: Any = None):
        self.session = session
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from azure.mgmt.keyvault import KeyVaultManagementClient
            self._client = KeyVaultManagementClient(self.session.credential, self.session.subscription_id)
        return self._client

    def list_vaults(self, region: Optional[str] = None) -> List[VaultRef]:
        """
        Return the vaults in the subscription, sorted by name, optionally filtered by region.

        Raises:
            SetupError: The management API could not be queried.
        """
        try:
            vaults = list(self.client.vaults.list_by_subscription())
        except Exception as ex:
            msg = f"[VaultDirectory] ❌ Could not list vaults in subscription {self.session.subscription_id}: {ex}"
            logger.error(msg)
            raise SetupError(msg) from ex

        refs = [
            VaultRef(
                name=v.name,
                uri=v.properties.vault_uri,
                resource_id=v.id,
                location=v.location or "",
            )
            for v in vaults
        ]
        if region:
            refs = [r for r in refs if r.location.lower() == region.lower()]

        logger.info(f"[VaultDirectory] 🔍 Found {len(refs)} vault(s){f' in region={region}' if region else ''}")
        return sorted(refs, key=lambda r: r.name.lower())

    def resolve_vault(self, name: str) -> VaultRef:
        """
        Resolve a vault name to its URI and resource scope.

        Raises:
            SetupError: Invalid name or no such vault in the subscription.
        """
        try:
            name = Sanitization.vault_name(name)
        except (TypeError, ValueError) as ex:
            raise SetupError(f"[VaultDirectory] ❌ {ex}") from ex

        for ref in self.list_vaults():
            if ref.name.lower() == name.lower():
                logger.info(f"[VaultDirectory] ✅ Vault resolved: {ref.name} ({ref.uri})")
                return ref

        msg = f"[VaultDirectory] ❌ Vault '{name}' not found in subscription {self.session.subscription_id}."
        logger.error(msg)
        raise SetupError(msg)
