from functools import wraps
from typing import Callable

import click

from akvazure.access import AccessGate
from akvazure.directory import VaultDirectory
from akvazure.errors import AccessError, SetupError
from akvazure.models import VaultRef
from akvazure.pipeline import VaultPipeline
from akvazure.rbac import RoleAssignments
from akvazure.session import AzureSession
from context.config import Settings
from context.logger import log_func


def ask(question: str) -> bool:
    return click.confirm(question, default=False)


def default_pipeline_factory(settings: Settings, auto_approve: bool, confirm: Callable[[str], bool]) -> VaultPipeline:
    session = AzureSession.login(settings.subscription_id or None)
    gate = AccessGate(
        RoleAssignments(),
        required_roles=settings.required_roles,
        confirm=confirm,
        auto_approve=auto_approve,
        propagation_timeout=settings.propagation_timeout,
        poll_interval=settings.propagation_poll_interval,
    )
    return VaultPipeline(session, gate, confirm=confirm, auto_approve=auto_approve)


def get_pipeline(ctx: click.Context) -> VaultPipeline:
    obj = ctx.obj
    if "pipeline" not in obj:
        factory = obj.get("factory", default_pipeline_factory)
        obj["pipeline"] = factory(obj["settings"], obj["auto_approve"], ask)
    return obj["pipeline"]


def choose_vault(directory: VaultDirectory) -> str:
    vaults = directory.list_vaults()
    if not vaults:
        raise SetupError("[CLI] ❌ No Key Vaults found in this subscription.")
    click.echo("Available Key Vaults:")
    for i, v in enumerate(vaults, start=1):
        click.echo(f"  {i}. {v.name} ({v.location})")
    choice = click.prompt("Select a vault", type=click.IntRange(1, len(vaults)))
    return vaults[choice - 1].name


def describe_vault(v: VaultRef) -> str:
    return f"{v.name:<26} {v.location:<16} {v.uri}"


def run_guarded(fn):
    """
    Turns setup/access failures into a clean CLI error (exit code 1, no report).
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        with log_func(fn.__name__):
            try:
                return fn(*args, **kwargs)
            except AccessError as ex:
                raise click.ClickException(f"Access check failed: {ex}") from ex
            except SetupError as ex:
                raise click.ClickException(f"Setup failed: {ex}") from ex
    return wrapper
