from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class ItemKind(Enum):
    """
    The two item classes a vault holds that this tool moves to and from disk.
    The value is the kind tag used in backup file names.
    """
    SECRET = "secret"
    CERTIFICATE = "cert"

    @property
    def label(self) -> str:
        return "secret" if self is ItemKind.SECRET else "certificate"


@dataclass(frozen=True)
class IdentityRef:
    object_id: str
    display_name: str = ""
    principal_type: str = "User"


@dataclass(frozen=True)
class VaultRef:
    name: str
    uri: str
    resource_id: str
    location: str = ""

    @property
    def scope(self) -> str:
        return self.resource_id


@dataclass(frozen=True)
class VaultItem:
    """
    One secret or certificate held in a vault.

    material_ref is the versionless item id; the material itself is only
    pulled at export time.
    """
    name: str
    kind: ItemKind
    material_ref: str = ""


@dataclass(frozen=True)
class BackupFile:
    path: Path
    item_name: str
    kind: ItemKind


@dataclass
class RoleGrant:
    role: str
    scope: str
    present: bool = False


@dataclass(frozen=True)
class ItemFailure:
    item_name: str
    kind: Optional[ItemKind]
    cause: str


@dataclass
class KindTally:
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0


@dataclass
class RestoreResult:
    ok: bool
    item_name: str
    kind: Optional[ItemKind]
    source: Path
    cause: str = ""


class _Report:
    """
    Shared accumulation logic for backup and restore reports.
    Failures are kept in the order they were recorded.
    """
    verb = "processed"

    def __init__(self, vault_name: str, directory: Path):
        self.vault_name = vault_name
        self.directory = Path(directory)
        self.tallies: Dict[ItemKind, KindTally] = {kind: KindTally() for kind in ItemKind}
        self.failures: List[ItemFailure] = []
        self.listing_errors: Dict[ItemKind, str] = {}

    def record_success(self, kind: ItemKind) -> None:
        tally = self.tallies[kind]
        tally.attempted += 1
        tally.succeeded += 1

    def record_failure(self, item_name: str, kind: Optional[ItemKind], cause: str) -> None:
        if kind is not None:
            tally = self.tallies[kind]
            tally.attempted += 1
            tally.failed += 1
        self.failures.append(ItemFailure(item_name=item_name, kind=kind, cause=cause))

    def record_listing_error(self, kind: ItemKind, cause: str) -> None:
        self.listing_errors[kind] = cause

    @property
    def attempted(self) -> int:
        return sum(t.attempted for t in self.tallies.values())

    @property
    def succeeded(self) -> int:
        return sum(t.succeeded for t in self.tallies.values())

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.listing_errors

    def failed_names(self) -> List[str]:
        return [f.item_name for f in self.failures]

    def summary(self) -> str:
        lines = [f"Vault: {self.vault_name}", f"Directory: {self.directory}"]
        for kind in ItemKind:
            t = self.tallies[kind]
            line = (f"  {kind.label + 's':<13} attempted={t.attempted} "
                    f"{self.verb}={t.succeeded} failed={t.failed}")
            if kind in self.listing_errors:
                line += f" (listing failed: {self.listing_errors[kind]})"
            lines.append(line)
        if self.failures:
            lines.append("Failures:")
            for f in self.failures:
                kind = f.kind.label if f.kind else "unknown"
                lines.append(f"  - {f.item_name} [{kind}]: {f.cause}")
        return "\n".join(lines)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "vault": self.vault_name,
            "directory": str(self.directory),
            "tallies": {k.label: vars(t).copy() for k, t in self.tallies.items()},
            "failures": [
                {"item": f.item_name, "kind": f.kind.label if f.kind else None, "cause": f.cause}
                for f in self.failures
            ],
            "listing_errors": {k.label: v for k, v in self.listing_errors.items()},
        }


class BackupReport(_Report):
    verb = "exported"

    def __init__(self, vault_name: str, directory: Path):
        super().__init__(vault_name, directory)
        self.written: List[Path] = []

    def record_written(self, kind: ItemKind, path: Path) -> None:
        self.record_success(kind)
        self.written.append(path)


class RestoreReport(_Report):
    verb = "restored"

    def __init__(self, vault_name: str, directory: Path):
        super().__init__(vault_name, directory)
        self.restored: List[str] = []

    def record(self, result: RestoreResult) -> None:
        if result.ok:
            self.record_success(result.kind)
            self.restored.append(result.item_name)
        else:
            self.record_failure(result.item_name, result.kind, result.cause)
