from typing import List, Optional


class AkvError(RuntimeError):
    """Base class for every error raised by akvtools."""


class SetupError(AkvError):
    """Authentication, vault lookup or path preparation failed before any item was touched."""


class AccessError(AkvError):
    def __init__(self, vault_name: str, missing_roles: List[str]):
        self.vault_name = vault_name
        self.missing_roles = list(missing_roles)
        super().__init__(
            f"Missing required role(s) on vault '{vault_name}': {', '.join(self.missing_roles)}"
        )


class ItemError(AkvError):
    def __init__(self, item_name: str, cause: str, kind=None):
        self.item_name = item_name
        self.kind = kind
        self.cause = cause
        super().__init__(f"{item_name}: {cause}")


class UnrecognizedFormatError(ItemError):
    pass


class RoleAssignmentConflict(AkvError):
    """The role assignment already exists."""


class AzureCLIError(AkvError):
    def __init__(self, cmd: List[str], returncode: int, stderr: Optional[str] = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        super().__init__(
            f"'{' '.join(self.cmd)}' exited with {returncode}: {self.stderr or '<no stderr>'}"
        )
