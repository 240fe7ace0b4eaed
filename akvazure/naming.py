"""
On-disk naming contract for backup files.

Every backup file is named ``<itemName>.<kindTag>.backup`` where kindTag is
``secret`` or ``cert``. The suffix is the only type information a backup file
carries, so parsing it is the restore side's sole way to recover the kind.
"""
from pathlib import Path
from typing import Optional

from akvazure.errors import ItemError, UnrecognizedFormatError
from akvazure.models import BackupFile, ItemKind

BACKUP_EXTENSION = ".backup"

SUFFIXES = {
    ItemKind.SECRET: f".{ItemKind.SECRET.value}{BACKUP_EXTENSION}",
    ItemKind.CERTIFICATE: f".{ItemKind.CERTIFICATE.value}{BACKUP_EXTENSION}",
}


def suffix_for(kind: ItemKind) -> str:
    return SUFFIXES[kind]


def file_name(item_name: str, kind: ItemKind) -> str:
    if not item_name:
        raise ValueError("Item name must not be empty")
    return f"{item_name}{SUFFIXES[kind]}"


def backup_path(directory: Path, item_name: str, kind: ItemKind) -> Path:
    return Path(directory) / file_name(item_name, kind)


def kind_of(name: str) -> Optional[ItemKind]:
    """Return the kind encoded in a file name, or None when no known suffix matches."""
    for kind, suffix in SUFFIXES.items():
        if name.endswith(suffix):
            return kind
    return None


def parse(path: Path) -> BackupFile:
    """
    Recover item name and kind from a backup file path.

    Raises:
        UnrecognizedFormatError: the name carries neither kind suffix.
        ItemError: the suffix is present but the item name before it is empty.
    """
    path = Path(path)
    kind = kind_of(path.name)
    if kind is None:
        raise UnrecognizedFormatError(
            path.name,
            f"Unrecognized backup file format (expected '*{SUFFIXES[ItemKind.SECRET]}' "
            f"or '*{SUFFIXES[ItemKind.CERTIFICATE]}')",
        )
    item_name = path.name[: -len(SUFFIXES[kind])]
    if not item_name:
        raise ItemError(path.name, "Could not derive an item name from the file name", kind=kind)
    return BackupFile(path=path, item_name=item_name, kind=kind)
