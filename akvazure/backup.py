import logging
import os
from pathlib import Path

from akvazure import naming
from akvazure.catalog import CatalogListing
from akvazure.errors import ItemError
from akvazure.items import VaultItems
from akvazure.models import BackupReport, VaultItem, VaultRef

logger = logging.getLogger(__name__)


class BackupEngine:
    """
    Writes one backup file per cataloged item into a target directory.

    Items are processed one at a time, secrets before certificates. A failed item
    is recorded and the run moves on. Re-running into the same directory
    overwrites the same file names.
    """

    def __init__(self, items: VaultItems):
        self.items = items

    def backup(self, vault: VaultRef, listing: CatalogListing, target_dir: Path) -> BackupReport:
        target_dir = Path(target_dir)
        report = BackupReport(vault.name, target_dir)
        for kind, cause in listing.errors.items():
            report.record_listing_error(kind, cause)

        for item in listing.items():
            try:
                path = self.backup_item(item, target_dir)
            except (ItemError, OSError, ValueError) as ex:
                cause = ex.cause if isinstance(ex, ItemError) else str(ex)
                logger.error(f"[BackupEngine] ❌ {item.kind.label} '{item.name}': {cause}")
                report.record_failure(item.name, item.kind, cause)
                continue
            report.record_written(item.kind, path)

        logger.info(f"[BackupEngine] Backup of '{vault.name}' finished: "
                    f"{report.succeeded} exported, {report.failed} failed")
        return report

    def backup_item(self, item: VaultItem, target_dir: Path) -> Path:
        """
        Export one item to `<target_dir>/<name>.<kindTag>.backup`.
        The blob is written next to the target first and then moved into place,
        so a failed write never leaves a truncated backup behind.
        """
        path = naming.backup_path(target_dir, item.name, item.kind)
        data = self.items.export(item)
        partial = path.with_name(path.name + ".partial")
        try:
            partial.write_bytes(data)
            os.replace(partial, path)
        except OSError:
            partial.unlink(missing_ok=True)
            raise
        logger.info(f"[BackupEngine] ✅ Exported {item.kind.label} '{item.name}' → {path.name}")
        return path
