import logging
import time
from typing import Callable, Dict, List, Optional, Sequence

from akvazure.errors import AzureCLIError, RoleAssignmentConflict
from akvazure.models import IdentityRef, RoleGrant, VaultRef
from akvazure.rbac import RoleAssignments

logger = logging.getLogger(__name__)

REQUIRED_ROLES = ["Key Vault Secrets Officer", "Key Vault Certificates Officer"]


class AccessGate:
    """
    Verifies the acting identity can manage the vault's secrets and certificates,
    granting the missing roles when the operator agrees.

    Role assignments are eventually consistent, so after any grant the gate polls
    until the new assignments are visible or `propagation_timeout` runs out.
    Grants are never revoked here.
    """

    def __init__(
            self,
            roles: RoleAssignments,
            *,
            required_roles: Sequence[str] = tuple(REQUIRED_ROLES),
            confirm: Optional[Callable[[str], bool]] = None,
            auto_approve: bool = False,
            propagation_timeout: float = 15,
            poll_interval: float = 3,
            sleep: Callable[[float], None] = time.sleep,
            clock: Callable[[], float] = time.monotonic,
    ):
        self.roles = roles
        self.required_roles = list(required_roles)
        self.confirm = confirm
        self.auto_approve = auto_approve
        self.propagation_timeout = propagation_timeout
        self.poll_interval = poll_interval
        self.sleep = sleep
        self.clock = clock
        self.missing_roles: List[str] = []

    def check(self, identity: IdentityRef, scope: str) -> List[RoleGrant]:
        grants = []
        for role in self.required_roles:
            try:
                present = self.roles.has_role(identity, scope, role)
            except AzureCLIError as ex:
                logger.warning(f"[AccessGate] ⚠️ Could not query '{role}': {ex}. Treating as missing.")
                present = False
            grants.append(RoleGrant(role=role, scope=scope, present=present))
        return grants

    def ensure_access(self, identity: IdentityRef, vault: VaultRef) -> bool:
        """
        Returns True when every required role is held (or was granted) on the vault.
        The caller must not touch any vault item when this returns False.
        """
        self.missing_roles = []
        grants = self.check(identity, vault.scope)
        missing = [g for g in grants if not g.present]
        if not missing:
            logger.info(f"[AccessGate] ✅ {identity.object_id} holds all required roles on '{vault.name}'")
            return True

        names = ", ".join(g.role for g in missing)
        logger.warning(f"[AccessGate] ⚠️ Missing role(s) on '{vault.name}': {names}")

        if not self._approved(f"Grant {names} on vault '{vault.name}' to {identity.display_name or identity.object_id}?"):
            logger.error("[AccessGate] ❌ Role grant declined by operator.")
            self.missing_roles = [g.role for g in missing]
            return False

        for grant in missing:
            try:
                self.roles.grant_role(identity, vault.scope, grant.role)
                grant.present = True
                logger.info(f"[AccessGate] ✅ Granted '{grant.role}'")
            except RoleAssignmentConflict:
                grant.present = True
                logger.info(f"[AccessGate] ℹ️ '{grant.role}' already assigned; continuing.")
            except AzureCLIError as ex:
                logger.error(f"[AccessGate] ❌ Failed to grant '{grant.role}': {ex}")

        self._await_propagation(identity, vault.scope, [g for g in missing if g.present])

        self.missing_roles = [g.role for g in grants if not g.present]
        if self.missing_roles:
            logger.error(f"[AccessGate] ❌ Still missing: {', '.join(self.missing_roles)}")
            return False
        return True

    def _approved(self, question: str) -> bool:
        if self.auto_approve:
            logger.info(f"[AccessGate] Auto-approved: {question}")
            return True
        if self.confirm is None:
            return False
        return bool(self.confirm(question))

    def _await_propagation(self, identity: IdentityRef, scope: str, grants: List[RoleGrant]) -> None:
        if not grants:
            return
        pending: Dict[str, RoleGrant] = {g.role: g for g in grants}
        deadline = self.clock() + self.propagation_timeout
        logger.info(f"[AccessGate] ⏳ Waiting up to {self.propagation_timeout}s for role propagation...")
        while pending:
            if self.clock() >= deadline:
                logger.warning(f"[AccessGate] ⚠️ Not yet visible after {self.propagation_timeout}s: "
                               f"{', '.join(pending)}. Continuing; early item calls may fail.")
                return
            self.sleep(self.poll_interval)
            for role in list(pending):
                try:
                    if self.roles.has_role(identity, scope, role):
                        pending.pop(role)
                except AzureCLIError as ex:
                    logger.debug(f"[AccessGate] Propagation check for '{role}' failed: {ex}")
        logger.info("[AccessGate] ✅ Role assignments visible.")
