import json

import click

import context._globals as _globals
from context.config import Config


def _known_key(key: str) -> str:
    if key not in _globals.GLOBAL_CFG_DEFAULT[_globals.SECTION]:
        raise click.BadParameter(f"Unknown setting '{key}'", param_hint="KEY")
    return key


@click.group(name="config")
def group():
    """Shows or edits the akvtools settings file."""


@group.command(name="show")
@click.pass_context
def show(ctx):
    """Prints the settings file as JSON."""
    path = ctx.obj.get("settings_path")
    click.echo(f"# {Config.resolve_path(path)}")
    click.echo(json.dumps(Config.fetch(path), indent=2))


@group.command(name="get")
@click.argument("key")
@click.pass_context
def get_value(ctx, key):
    """Prints one [akvtools] key as JSON."""
    try:
        value = Config.get(_globals.SECTION, _known_key(key), path=ctx.obj.get("settings_path"))
    except RuntimeError as ex:
        raise click.ClickException(str(ex)) from ex
    click.echo(json.dumps(value))


@group.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_value(ctx, key, value):
    """Sets one [akvtools] key. VALUE is parsed as JSON when possible."""
    key = _known_key(key)
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    try:
        Config.write(ctx.obj.get("settings_path"), set={_globals.SECTION: {key: parsed}})
    except RuntimeError as ex:
        raise click.ClickException(str(ex)) from ex
    click.echo(f"{key} = {parsed!r}")


@group.command(name="validate")
@click.pass_context
def validate(ctx):
    """Checks that every setting is present and usable."""
    path = ctx.obj.get("settings_path")
    try:
        Config.validate(path)
    except RuntimeError as ex:
        raise click.ClickException(str(ex)) from ex
    click.echo(f"✅ {Config.resolve_path(path)} is valid.")
