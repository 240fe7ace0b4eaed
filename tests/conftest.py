import pytest
from azure.core.exceptions import HttpResponseError

from akvazure.access import AccessGate
from akvazure.errors import AzureCLIError, ItemError, RoleAssignmentConflict, SetupError
from akvazure.models import IdentityRef, ItemKind, VaultItem, VaultRef
from akvazure.pipeline import VaultPipeline
from akvazure.session import AzureSession
from context.logger import Logger


class FakeVaultItems:
    """
    In-memory stand-in for akvazure.items.VaultItems.

    Export returns the stored material verbatim and import stores the bytes
    under the given name, so a round trip can be compared byte for byte.
    """

    def __init__(self, vault=None, secrets=None, certificates=None):
        self.vault = vault
        self.store = {
            ItemKind.SECRET: dict(secrets or {}),
            ItemKind.CERTIFICATE: dict(certificates or {}),
        }
        self.fail_export = set()
        self.fail_import = set()
        self.fail_list = set()
        self.calls = []

    def _list(self, kind):
        self.calls.append(("list", kind))
        if kind in self.fail_list:
            raise HttpResponseError(message=f"Forbidden: cannot list {kind.label}s")
        return [VaultItem(name=n, kind=kind, material_ref=f"https://v/{kind.value}/{n}") for n in self.store[kind]]

    def list_secrets(self):
        return self._list(ItemKind.SECRET)

    def list_certificates(self):
        return self._list(ItemKind.CERTIFICATE)

    def export(self, item):
        self.calls.append(("export", item.kind, item.name))
        if item.name in self.fail_export:
            raise ItemError(item.name, f"{item.kind.label} export failed: Forbidden", kind=item.kind)
        return self.store[item.kind][item.name]

    def export_secret(self, name):
        return self.export(VaultItem(name, ItemKind.SECRET))

    def export_certificate(self, name):
        return self.export(VaultItem(name, ItemKind.CERTIFICATE))

    def import_item(self, name, kind, data):
        self.calls.append(("import", kind, name))
        if name in self.fail_import:
            raise ItemError(name, f"{kind.label} import failed: Conflict", kind=kind)
        self.store[kind][name] = data
        return name

    def import_secret(self, name, data):
        return self.import_item(name, ItemKind.SECRET, data)

    def import_certificate(self, name, data):
        return self.import_item(name, ItemKind.CERTIFICATE, data)

    def item_calls(self):
        return [c for c in self.calls if c[0] in ("export", "import")]


class FakeRoles:
    """
    In-memory role assignment service. `hidden_polls` makes a fresh grant
    invisible to has_role for that many queries, like a slow RBAC backend.
    """

    def __init__(self, held=(), hidden_polls=0):
        self.held = set(held)
        self.conflict_on = set()
        self.fail_on = set()
        self.query_fail_on = set()
        self.hidden_polls = hidden_polls
        self._hidden = {}
        self.granted = []
        self.queries = 0

    def has_role(self, identity, scope, role):
        self.queries += 1
        if role in self.query_fail_on:
            raise AzureCLIError(["az", "role", "assignment", "list"], 1, "temporary failure")
        key = (identity.object_id, scope, role)
        if self._hidden.get(key, 0) > 0:
            self._hidden[key] -= 1
            return False
        return key in self.held

    def grant_role(self, identity, scope, role):
        key = (identity.object_id, scope, role)
        if role in self.conflict_on:
            self.held.add(key)
            raise RoleAssignmentConflict(f"'{role}' already assigned")
        if role in self.fail_on:
            raise AzureCLIError(["az", "role", "assignment", "create"], 1, "AuthorizationFailed")
        self.granted.append(role)
        self.held.add(key)
        self._hidden[key] = self.hidden_polls


class FakeDirectory:
    def __init__(self, *vaults):
        self.vaults = {v.name: v for v in vaults}

    def list_vaults(self, region=None):
        refs = sorted(self.vaults.values(), key=lambda v: v.name)
        if region:
            refs = [r for r in refs if r.location == region]
        return refs

    def resolve_vault(self, name):
        if name not in self.vaults:
            raise SetupError(f"[FakeDirectory] Vault '{name}' not found.")
        return self.vaults[name]


ROLES = ["Key Vault Secrets Officer", "Key Vault Certificates Officer"]


def make_vault(name, location="westeurope"):
    return VaultRef(
        name=name,
        uri=f"https://{name}.vault.azure.net/",
        resource_id=f"/subscriptions/sub-1/resourceGroups/rg/providers/Microsoft.KeyVault/vaults/{name}",
        location=location,
    )


@pytest.fixture
def identity():
    return IdentityRef(object_id="oid-1", display_name="ops@contoso.com")


@pytest.fixture
def session(identity):
    return AzureSession(credential=None, identity=identity, subscription_id="sub-1", tenant_id="tenant-1")


@pytest.fixture
def source_vault():
    return make_vault("kv-source")


@pytest.fixture
def target_vault():
    return make_vault("kv-target")


@pytest.fixture
def source_items(source_vault):
    """
    Vault with secrets {"db-pass", "api-key"} and certificate {"tls-cert"}.
    """
    return FakeVaultItems(
        source_vault,
        secrets={"db-pass": b"\x01db-pass-blob", "api-key": b"\x02api-key-blob"},
        certificates={"tls-cert": b"\x03tls-cert-blob"},
    )


@pytest.fixture
def target_items(target_vault):
    return FakeVaultItems(target_vault)


@pytest.fixture
def full_roles(identity, source_vault, target_vault):
    held = {(identity.object_id, v.scope, r) for v in (source_vault, target_vault) for r in ROLES}
    return FakeRoles(held=held)


@pytest.fixture
def no_sleep():
    slept = []
    return slept


@pytest.fixture
def make_gate(no_sleep):
    def _make(roles, **kwargs):
        kwargs.setdefault("sleep", no_sleep.append)
        kwargs.setdefault("propagation_timeout", 15)
        kwargs.setdefault("poll_interval", 3)
        return AccessGate(roles, required_roles=ROLES, **kwargs)
    return _make


@pytest.fixture
def make_pipeline(session, source_vault, target_vault, source_items, target_items, make_gate):
    """
    Builds a VaultPipeline wired to in-memory fakes.

    Example:
        def test_backup(make_pipeline, full_roles, tmp_path):
            pipeline = make_pipeline(full_roles)
            pipeline.backup("kv-source", tmp_path)
    """
    items = {source_vault.name: source_items, target_vault.name: target_items}

    def _make(roles, confirm=None, auto_approve=False, **gate_kwargs):
        gate = make_gate(roles, confirm=confirm, auto_approve=auto_approve, **gate_kwargs)
        return VaultPipeline(
            session,
            gate,
            directory=FakeDirectory(source_vault, target_vault),
            items_factory=lambda vault: items[vault.name],
            confirm=confirm,
            auto_approve=auto_approve,
        )
    return _make


@pytest.fixture
def reset_logger():
    Logger.reset()
    yield
    Logger.reset()
