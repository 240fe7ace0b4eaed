from pathlib import Path

import click

from akvazure.errors import SetupError
from akvazure.restore import RestoreEngine
from cli.common import choose_vault, get_pipeline, run_guarded


def choose_file(source_dir: Path) -> Path:
    secrets, certificates = RestoreEngine.scan(source_dir)
    files = secrets + certificates
    if not files:
        raise SetupError(f"[CLI] ❌ No backup files found in {source_dir}")
    click.echo("Backup files:")
    for i, f in enumerate(files, start=1):
        click.echo(f"  {i}. {f.path.name} ({f.kind.label})")
    choice = click.prompt("Select a file", type=click.IntRange(1, len(files)))
    return files[choice - 1].path


@click.command()
@click.option("--vault", "vault_name", default=None, help="Name of the vault to restore into.")
@click.option("--dir", "source_dir", default=None, type=click.Path(file_okay=False, path_type=Path),
              help="Directory holding *.secret.backup / *.cert.backup files.")
@click.option("--file", "file", default=None, type=click.Path(dir_okay=False, path_type=Path),
              help="Restore this single backup file.")
@click.option("--mode", type=click.Choice(["all", "single"]), default=None,
              help="Restore every backup in --dir, or pick a single one.")
@click.pass_context
@run_guarded
def run(ctx, vault_name, source_dir, file, mode):
    """Restores secrets and certificates from backup files into a vault."""
    pipeline = get_pipeline(ctx)
    vault_name = vault_name or choose_vault(pipeline.directory)

    if file is None:
        if source_dir is None:
            source_dir = Path(click.prompt("Backup directory", type=click.Path(file_okay=False)))
        if mode is None:
            mode = click.prompt("Restore all backups or a single file?",
                                type=click.Choice(["all", "single"]), default="all")
        if mode == "single":
            file = choose_file(source_dir)

    if file is not None:
        report = pipeline.restore_one(vault_name, file)
    else:
        report = pipeline.restore_all(vault_name, source_dir)
    click.echo(report.summary())
