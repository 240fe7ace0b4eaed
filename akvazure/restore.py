import logging
from pathlib import Path
from typing import List, Tuple

from akvazure import naming
from akvazure.errors import ItemError, SetupError
from akvazure.items import VaultItems
from akvazure.models import BackupFile, ItemKind, RestoreReport, RestoreResult, VaultRef

logger = logging.getLogger(__name__)


class RestoreEngine:
    """
    Replays backup files into a vault. The item kind comes only from the file
    name suffix; the blob itself is handed to the vault untouched.
    """

    def __init__(self, items: VaultItems):
        self.items = items

    def restore_one(self, vault: VaultRef, path: Path) -> RestoreResult:
        path = Path(path)
        try:
            backup_file = naming.parse(path)
        except ItemError as ex:
            logger.error(f"[RestoreEngine] ❌ Rejected '{path.name}': {ex.cause}")
            return RestoreResult(ok=False, item_name=path.name, kind=ex.kind, source=path, cause=ex.cause)
        return self._restore(vault, backup_file)

    def _restore(self, vault: VaultRef, backup_file: BackupFile) -> RestoreResult:
        name, kind = backup_file.item_name, backup_file.kind
        try:
            data = backup_file.path.read_bytes()
            restored = self.items.import_item(name, kind, data)
        except ItemError as ex:
            logger.error(f"[RestoreEngine] ❌ {kind.label} '{name}': {ex.cause}")
            return RestoreResult(ok=False, item_name=name, kind=kind, source=backup_file.path, cause=ex.cause)
        except OSError as ex:
            cause = f"Could not read {backup_file.path}: {ex}"
            logger.error(f"[RestoreEngine] ❌ {kind.label} '{name}': {cause}")
            return RestoreResult(ok=False, item_name=name, kind=kind, source=backup_file.path, cause=cause)

        logger.info(f"[RestoreEngine] ✅ Restored {kind.label} '{restored}' into '{vault.name}'")
        return RestoreResult(ok=True, item_name=restored, kind=kind, source=backup_file.path)

    @staticmethod
    def scan(source_dir: Path) -> Tuple[List[BackupFile], List[BackupFile]]:
        """
        Find backup files in `source_dir`, secrets and certificates separately,
        each sorted by file name. Files with any other name are ignored.

        Raises:
            SetupError: source_dir is missing or not a directory.
        """
        found = {}
        for kind in ItemKind:
            files = []
            for path in RestoreEngine._matching(source_dir, kind):
                try:
                    files.append(naming.parse(path))
                except ItemError as ex:
                    logger.warning(f"[RestoreEngine] ⚠️ Skipping '{path.name}': {ex.cause}")
            found[kind] = files
        return found[ItemKind.SECRET], found[ItemKind.CERTIFICATE]

    @staticmethod
    def _matching(source_dir: Path, kind: ItemKind) -> List[Path]:
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise SetupError(f"[RestoreEngine] ❌ Restore source is not a directory: {source_dir}")
        return [p for p in sorted(source_dir.glob(f"*{naming.suffix_for(kind)}")) if p.is_file()]

    def restore_all(self, vault: VaultRef, source_dir: Path) -> RestoreReport:
        secrets = self._matching(source_dir, ItemKind.SECRET)
        certificates = self._matching(source_dir, ItemKind.CERTIFICATE)
        report = RestoreReport(vault.name, Path(source_dir))
        logger.info(f"[RestoreEngine] 🔍 Found {len(secrets)} secret and {len(certificates)} "
                    f"certificate backup(s) in {source_dir}")

        for path in secrets + certificates:
            report.record(self.restore_one(vault, path))

        logger.info(f"[RestoreEngine] Restore into '{vault.name}' finished: "
                    f"{report.succeeded} restored, {report.failed} failed")
        return report
