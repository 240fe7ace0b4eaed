import logging
from typing import Any, Callable, Dict, Optional

from akvazure.errors import AzureCLIError, SetupError
from akvazure.models import IdentityRef
from akvazure.run import run_az

logger = logging.getLogger(__name__)


class AzureSession:
    """
    An authenticated Azure context: the credential used for SDK calls, the
    signed-in identity and the active subscription.

    Passed explicitly to every service that needs it; nothing here is read
    from process-wide state after construction.
    """

    def __init__(self, credential: Any, identity: IdentityRef, subscription_id: str, tenant_id: str = ""):
        self.credential = credential
        self.identity = identity
        self.subscription_id = subscription_id
        self.tenant_id = tenant_id

    def __repr__(self) -> str:
        return (f"AzureSession(identity={self.identity.object_id!r}, "
                f"subscription_id={self.subscription_id!r})")

    @staticmethod
    def login(
            subscription_id: Optional[str] = None,
            *,
            run: Callable[..., Any] = run_az,
            credential_factory: Optional[Callable[[], Any]] = None,
    ) -> "AzureSession":
        """
        Build a session from the current Azure CLI login.

        The identity is resolved through the CLI (signed-in user, falling back to the
        service principal when the CLI is logged in as one); SDK calls then use
        DefaultAzureCredential, which picks up the same CLI token.

        Raises:
            SetupError: Not logged in, or the identity/subscription cannot be resolved.
        """
        try:
            account: Dict[str, Any] = run(["az", "account", "show"])
        except AzureCLIError as ex:
            msg = f"[AzureSession] ❌ Not logged in to Azure CLI (run 'az login'): {ex.stderr or ex}"
            logger.error(msg)
            raise SetupError(msg) from ex

        if not isinstance(account, dict) or not account.get("id"):
            raise SetupError("[AzureSession] ❌ 'az account show' returned no subscription.")

        identity = AzureSession.resolve_identity(account, run=run)

        sub_id = subscription_id or account.get("id")
        if subscription_id and subscription_id != account.get("id"):
            logger.info(f"[AzureSession] Using configured subscription {subscription_id} "
                        f"(CLI default is {account.get('id')})")

        if credential_factory is None:
            from azure.identity import DefaultAzureCredential
            credential_factory = DefaultAzureCredential
        try:
            credential = credential_factory()
        except Exception as ex:
            raise SetupError(f"[AzureSession] ❌ Could not build Azure credential: {ex}") from ex

        logger.info(f"[AzureSession] ✅ Signed in as {identity.display_name or identity.object_id} "
                    f"(subscription={sub_id})")
        return AzureSession(credential, identity, sub_id, tenant_id=account.get("tenantId", ""))

    @staticmethod
    def resolve_identity(account: Dict[str, Any], *, run: Callable[..., Any] = run_az) -> IdentityRef:
        user = account.get("user") or {}
        user_type = user.get("type", "user")
        name = user.get("name", "")

        try:
            if user_type == "servicePrincipal":
                sp = run(["az", "ad", "sp", "show", "--id", name])
                object_id = sp.get("id") if isinstance(sp, dict) else None
                principal_type = "ServicePrincipal"
            else:
                me = run(["az", "ad", "signed-in-user", "show"])
                object_id = me.get("id") if isinstance(me, dict) else None
                principal_type = "User"
        except AzureCLIError as ex:
            msg = f"[AzureSession] ❌ Could not resolve object id for '{name}': {ex.stderr or ex}"
            logger.error(msg)
            raise SetupError(msg) from ex

        if not object_id:
            raise SetupError(f"[AzureSession] ❌ No object id returned for '{name}'.")

        return IdentityRef(object_id=object_id, display_name=name, principal_type=principal_type)
