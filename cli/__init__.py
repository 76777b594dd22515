import click

from cli.analyze_proxy_cli import analyze_proxy
from cli.analyze_proxies_cli import analyze_proxies


@click.group()
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx):
    pass


# Single contract, human-readable summary
cli.add_command(analyze_proxy, "analyze_proxy")

# Many contracts, JSON lines
cli.add_command(analyze_proxies, "analyze_proxies")
