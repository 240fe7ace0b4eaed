import click

from cli.common import describe_vault, get_pipeline, run_guarded


@click.command()
@click.option("--region", default=None, help="Only list vaults in this Azure region.")
@click.pass_context
@run_guarded
def run(ctx, region):
    """Lists the Key Vaults in the active subscription."""
    pipeline = get_pipeline(ctx)
    vaults = pipeline.directory.list_vaults(region=region)
    if not vaults:
        click.echo("No Key Vaults found.")
        return
    for v in vaults:
        click.echo(describe_vault(v))
