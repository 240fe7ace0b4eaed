from pathlib import Path

import click

from akvazure.workspace import BackupDirectory
from cli.common import choose_vault, get_pipeline, run_guarded


@click.command()
@click.option("--vault", "vault_name", default=None, help="Name of the vault to back up.")
@click.option("--dir", "target_dir", default=None, type=click.Path(file_okay=False, path_type=Path),
              help="Directory to write backup files into (default: <backup_root>/<vault>-<timestamp>).")
@click.pass_context
@run_guarded
def run(ctx, vault_name, target_dir):
    """Backs up every secret and certificate of a vault to a directory."""
    pipeline = get_pipeline(ctx)
    settings = ctx.obj["settings"]

    vault_name = vault_name or choose_vault(pipeline.directory)
    if target_dir is None:
        default = BackupDirectory.default_for(settings.backup_root, vault_name).path
        target_dir = Path(click.prompt("Backup directory", default=str(default)))

    report = pipeline.backup(vault_name, target_dir)
    click.echo(report.summary())
