import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from akvazure import naming
from akvazure.access import AccessGate
from akvazure.backup import BackupEngine
from akvazure.catalog import VaultCatalog
from akvazure.directory import VaultDirectory
from akvazure.errors import AccessError, ItemError, SetupError
from akvazure.items import VaultItems
from akvazure.models import BackupReport, RestoreReport, VaultRef
from akvazure.restore import RestoreEngine
from akvazure.session import AzureSession
from akvazure.workspace import BackupDirectory

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    ACCESS_CHECKING = "access-checking"
    ACCESS_DENIED = "access-denied"
    CATALOGING = "cataloging"
    SCANNING = "scanning"
    PROCESSING = "processing"
    REPORTING = "reporting"


class VaultPipeline:
    """
    Runs one backup or restore against a vault:

        Idle → AccessChecking → AccessDenied
                              → Cataloging/Scanning → Processing → Reporting

    Setup and access failures raise; item failures end up in the returned report.
    """

    def __init__(
            self,
            session: AzureSession,
            gate: AccessGate,
            directory: Optional[VaultDirectory] = None,
            items_factory: Optional[Callable[[VaultRef], VaultItems]] = None,
            confirm: Optional[Callable[[str], bool]] = None,
            auto_approve: bool = False,
    ):
        self.session = session
        self.gate = gate
        self.directory = directory or VaultDirectory(session)
        self.items_factory = items_factory or (lambda vault: VaultItems(vault, session.credential))
        self.confirm = confirm
        self.auto_approve = auto_approve
        self.state = RunState.IDLE

    def _advance(self, state: RunState) -> None:
        logger.debug(f"[VaultPipeline] {self.state.value} → {state.value}")
        self.state = state

    def _gate(self, vault: VaultRef) -> None:
        self._advance(RunState.ACCESS_CHECKING)
        if not self.gate.ensure_access(self.session.identity, vault):
            self._advance(RunState.ACCESS_DENIED)
            raise AccessError(vault.name, self.gate.missing_roles or self.gate.required_roles)

    def backup(self, vault_name: str, target_dir: str | Path) -> BackupReport:
        self.state = RunState.IDLE
        vault = self.directory.resolve_vault(vault_name)
        workspace = BackupDirectory(target_dir)
        workspace.ensure()
        self._gate(vault)
        target = workspace.prepare(confirm=self.confirm, auto_approve=self.auto_approve)

        items = self.items_factory(vault)
        self._advance(RunState.CATALOGING)
        listing = VaultCatalog(items).list_items()

        self._advance(RunState.PROCESSING)
        report = BackupEngine(items).backup(vault, listing, target)

        self._advance(RunState.REPORTING)
        return report

    def restore_all(self, vault_name: str, source_dir: str | Path) -> RestoreReport:
        self.state = RunState.IDLE
        source_dir = Path(source_dir).expanduser()
        if not source_dir.is_dir():
            raise SetupError(f"[VaultPipeline] ❌ Restore source is not a directory: {source_dir}")
        vault = self.directory.resolve_vault(vault_name)
        self._gate(vault)

        engine = RestoreEngine(self.items_factory(vault))
        self._advance(RunState.SCANNING)
        self._advance(RunState.PROCESSING)
        report = engine.restore_all(vault, source_dir)

        self._advance(RunState.REPORTING)
        return report

    def restore_one(self, vault_name: str, file: str | Path) -> RestoreReport:
        self.state = RunState.IDLE
        file = Path(file).expanduser()
        if not file.is_file():
            raise SetupError(f"[VaultPipeline] ❌ Backup file not found: {file}")
        vault = self.directory.resolve_vault(vault_name)
        report = RestoreReport(vault.name, file.parent)
        try:
            naming.parse(file)
        except ItemError as ex:
            logger.error(f"[VaultPipeline] ❌ Rejected '{file.name}': {ex.cause}")
            report.record_failure(file.name, ex.kind, ex.cause)
            self._advance(RunState.REPORTING)
            return report
        self._gate(vault)

        engine = RestoreEngine(self.items_factory(vault))
        self._advance(RunState.PROCESSING)
        report.record(engine.restore_one(vault, file))

        self._advance(RunState.REPORTING)
        return report
