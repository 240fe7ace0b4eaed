# akvtools/cli/main.py
from pathlib import Path

import click

from cli.commands import backup, restore, settings, vaults
from context.config import Config, Settings
from context.logger import Logger


@click.group()
@click.option("--settings", "settings_path", default=None, type=click.Path(dir_okay=False, path_type=Path),
              help="Settings file (default: $AKVTOOLS_SETTINGS or ./akvtools_settings.toml).")
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.option("--yes", "-y", "auto_approve", is_flag=True,
              help="Approve role grants and directory clearing without prompting.")
@click.pass_context
def cli(ctx, settings_path, log_level, auto_approve):
    """Azure Key Vault backup and restore."""
    ctx.ensure_object(dict)
    loaded = True
    try:
        cfg = Config.settings(settings_path)
    except RuntimeError as ex:
        # config commands must stay usable to repair a broken file
        if ctx.invoked_subcommand != "config":
            raise click.ClickException(str(ex)) from ex
        click.echo(f"⚠️ {ex}", err=True)
        cfg, loaded = Settings(), False
    if log_level:
        cfg.log_level = log_level.upper()

    Logger.init_logger(log_dir=cfg.log_dir, label="akvtools", level=cfg.log_level, to_file=loaded)
    ctx.obj["settings_path"] = settings_path
    ctx.obj["settings"] = cfg
    ctx.obj["auto_approve"] = auto_approve or cfg.auto_approve


cli.add_command(cmd=backup.run, name="backup")
cli.add_command(cmd=restore.run, name="restore")
cli.add_command(cmd=vaults.run, name="vaults")
cli.add_command(cmd=settings.group, name="config")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
