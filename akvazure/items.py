import logging
from typing import Any, List, Optional

from azure.core.exceptions import AzureError

from akvazure.errors import ItemError
from akvazure.models import ItemKind, VaultItem, VaultRef

logger = logging.getLogger(__name__)


class VaultItems:
    """
    Data-plane access to a vault's secrets and certificates.

    Export and import use the Key Vault backup blobs: opaque, encrypted bytes
    that can only be restored into a vault in the same geography and tenant.
    """

    def __init__(self, vault: VaultRef, credential: Any = None,
                 secret_client: Any = None, certificate_client: Any = None):
        self.vault = vault
        self._credential = credential
        self._secrets = secret_client
        self._certificates = certificate_client

    @property
    def secrets(self):
        if self._secrets is None:
            from azure.keyvault.secrets import SecretClient
            self._secrets = SecretClient(vault_url=self.vault.uri, credential=self._credential)
        return self._secrets

    @property
    def certificates(self):
        if self._certificates is None:
            from azure.keyvault.certificates import CertificateClient
            self._certificates = CertificateClient(vault_url=self.vault.uri, credential=self._credential)
        return self._certificates

    # ─── Listing ────────────────────────────────────────────────────────────

    def list_secrets(self) -> List[VaultItem]:
        """
        Secrets in listing order. Secrets managed by a certificate are skipped;
        they travel inside the certificate's own backup.

        Raises:
            azure.core.exceptions.AzureError: The listing failed.
        """
        items = []
        for prop in self.secrets.list_properties_of_secrets():
            if getattr(prop, "managed", False):
                logger.debug(f"[VaultItems] Skipping certificate-managed secret '{prop.name}'")
                continue
            items.append(VaultItem(name=prop.name, kind=ItemKind.SECRET, material_ref=prop.id or ""))
        return items

    def list_certificates(self) -> List[VaultItem]:
        return [
            VaultItem(name=prop.name, kind=ItemKind.CERTIFICATE, material_ref=prop.id or "")
            for prop in self.certificates.list_properties_of_certificates()
        ]

    # ─── Export ─────────────────────────────────────────────────────────────

    def export_secret(self, name: str) -> bytes:
        return self._call(name, ItemKind.SECRET, "export", lambda: self.secrets.backup_secret(name))

    def export_certificate(self, name: str) -> bytes:
        return self._call(name, ItemKind.CERTIFICATE, "export",
                          lambda: self.certificates.backup_certificate(name))

    def export(self, item: VaultItem) -> bytes:
        if item.kind is ItemKind.SECRET:
            return self.export_secret(item.name)
        return self.export_certificate(item.name)

    # ─── Import ─────────────────────────────────────────────────────────────

    def import_secret(self, name: str, data: bytes) -> str:
        """
        Restore a secret backup blob. Returns the name the vault restored it under.
        """
        props = self._call(name, ItemKind.SECRET, "import", lambda: self.secrets.restore_secret_backup(data))
        return self._restored_name(name, props)

    def import_certificate(self, name: str, data: bytes) -> str:
        props = self._call(name, ItemKind.CERTIFICATE, "import",
                           lambda: self.certificates.restore_certificate_backup(data))
        return self._restored_name(name, props)

    def import_item(self, name: str, kind: ItemKind, data: bytes) -> str:
        if kind is ItemKind.SECRET:
            return self.import_secret(name, data)
        return self.import_certificate(name, data)

    # ─── Helpers ────────────────────────────────────────────────────────────

    @staticmethod
    def _restored_name(expected: str, props: Optional[Any]) -> str:
        actual = getattr(props, "name", None) or expected
        if actual != expected:
            logger.warning(f"[VaultItems] ⚠️ Backup for '{expected}' was restored as '{actual}'")
        return actual

    def _call(self, name: str, kind: ItemKind, action: str, fn):
        try:
            return fn()
        except AzureError as ex:
            cause = getattr(ex, "message", None) or str(ex)
            raise ItemError(name, f"{kind.label} {action} failed: {cause}", kind=kind) from ex
