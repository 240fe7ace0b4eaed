import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from akvazure.errors import SetupError
from util.io.pathutil import PathUtil

logger = logging.getLogger(__name__)


class BackupDirectory:
    """
    The directory a backup run writes into, or a restore run reads from.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def __repr__(self) -> str:
        return f"BackupDirectory({str(self.path)!r})"

    @staticmethod
    def default_for(root: str | Path, vault_name: str, now: Optional[datetime] = None) -> "BackupDirectory":
        """<root>/<vault>-<UTC timestamp>"""
        now = now or datetime.now(timezone.utc)
        return BackupDirectory(Path(root) / f"{vault_name}-{now.strftime('%Y%m%d-%H%M%S')}")

    def ensure(self) -> Path:
        """
        Create the directory if missing.

        Raises:
            SetupError: The path is a file or cannot be created.
        """
        if self.path.exists() and not self.path.is_dir():
            raise SetupError(f"[BackupDirectory] ❌ Not a directory: {self.path}")
        path, ok = PathUtil.ensure_path(self.path, create=True)
        if not ok:
            raise SetupError(f"[BackupDirectory] ❌ Could not create directory: {self.path}")
        return path

    def entries(self) -> List[Path]:
        if not self.path.is_dir():
            return []
        return sorted(self.path.iterdir())

    def is_empty(self) -> bool:
        return not self.entries()

    def clear(self) -> int:
        """Delete everything inside the directory. Returns the number of entries removed."""
        removed = 0
        for entry in self.entries():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            removed += 1
        logger.info(f"[BackupDirectory] 🗑️ Removed {removed} entr{'y' if removed == 1 else 'ies'} from {self.path}")
        return removed

    def prepare(self, confirm: Optional[Callable[[str], bool]] = None, auto_approve: bool = False) -> Path:
        """
        Make the directory ready for a backup run.

        A non-empty directory is reported and its contents are deleted only on
        explicit approval. Declining keeps the contents; files with matching names
        are overwritten by the run.
        """
        path = self.ensure()
        existing = self.entries()
        if not existing:
            return path

        logger.warning(f"[BackupDirectory] ⚠️ {path} is not empty ({len(existing)} entries).")
        approved = auto_approve or (confirm is not None and confirm(
            f"{path} contains {len(existing)} item(s). Delete them before the backup?"))
        if approved:
            try:
                self.clear()
            except OSError as ex:
                raise SetupError(f"[BackupDirectory] ❌ Could not clear {path}: {ex}") from ex
        else:
            logger.info("[BackupDirectory] Keeping existing contents; matching files will be overwritten.")
        return path
