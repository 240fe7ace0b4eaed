import logging
from dataclasses import dataclass, field
from typing import Dict, List

from azure.core.exceptions import AzureError

from akvazure.items import VaultItems
from akvazure.models import ItemKind, VaultItem

logger = logging.getLogger(__name__)


@dataclass
class CatalogListing:
    secrets: List[VaultItem] = field(default_factory=list)
    certificates: List[VaultItem] = field(default_factory=list)
    errors: Dict[ItemKind, str] = field(default_factory=dict)

    def items(self) -> List[VaultItem]:
        """Secrets first, then certificates, each in listing order."""
        return self.secrets + self.certificates


class VaultCatalog:
    """
    Enumerates a vault's secrets and certificates. Each partition is listed on
    its own: a failure listing one is recorded and does not stop the other.
    """

    def __init__(self, items: VaultItems):
        self.items = items

    def list_items(self) -> CatalogListing:
        listing = CatalogListing()
        listing.secrets = self._list(ItemKind.SECRET, self.items.list_secrets, listing)
        listing.certificates = self._list(ItemKind.CERTIFICATE, self.items.list_certificates, listing)
        return listing

    @staticmethod
    def _list(kind: ItemKind, fn, listing: CatalogListing) -> List[VaultItem]:
        try:
            found = list(fn())
        except AzureError as ex:
            cause = getattr(ex, "message", None) or str(ex)
            logger.error(f"[VaultCatalog] ❌ Could not list {kind.label}s: {cause}")
            listing.errors[kind] = cause
            return []
        if not found:
            logger.info(f"[VaultCatalog] No {kind.label}s found; skipping.")
        else:
            logger.info(f"[VaultCatalog] 🔍 Found {len(found)} {kind.label}(s)")
        return found
