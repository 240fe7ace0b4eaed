import logging
from typing import Any, Callable

from akvazure.errors import AzureCLIError, RoleAssignmentConflict
from akvazure.models import IdentityRef
from akvazure.run import run_az

logger = logging.getLogger(__name__)

CONFLICT_MARKERS = ["roleassignmentexists", "already exists", "conflict"]


class RoleAssignments:
    """
    Azure RBAC role assignments, queried and created through the Azure CLI.
    """

    def __init__(self, run: Callable[..., Any] = run_az):
        self.run = run

    def has_role(self, identity: IdentityRef, scope: str, role: str) -> bool:
        """
        True when `identity` holds `role` at `scope`, directly or inherited from a parent scope.

        Raises:
            AzureCLIError: The assignment listing failed.
        """
        assignments = self.run([
            "az", "role", "assignment", "list",
            "--assignee", identity.object_id,
            "--role", role,
            "--scope", scope,
            "--include-inherited",
        ])
        present = isinstance(assignments, list) and len(assignments) > 0
        logger.debug(f"[RoleAssignments] '{role}' on '{scope}' for {identity.object_id}: present={present}")
        return present

    def grant_role(self, identity: IdentityRef, scope: str, role: str) -> None:
        """
        Assign `role` at `scope` to `identity`.

        Raises:
            RoleAssignmentConflict: The assignment already exists.
            AzureCLIError: Any other failure.
        """
        logger.info(f"[RoleAssignments] Assigning '{role}' on '{scope}' to {identity.object_id}")
        try:
            self.run([
                "az", "role", "assignment", "create",
                "--assignee-object-id", identity.object_id,
                "--assignee-principal-type", identity.principal_type,
                "--role", role,
                "--scope", scope,
            ])
        except AzureCLIError as ex:
            stderr = ex.stderr.lower()
            if any(marker in stderr for marker in CONFLICT_MARKERS):
                raise RoleAssignmentConflict(f"'{role}' already assigned on '{scope}'") from ex
            logger.error(f"[RoleAssignments] Could not assign '{role}' on '{scope}': {ex}")
            raise
