import asyncio
import json
import sys
from typing import Dict, List, Union

import click

from cli.analyze_proxy_cli import build_rpc_client
from config.configs import configs
from resolver.models.proxy_analysis import ProxyAnalysis
from resolver.service.proxy_resolver_service import ProxyResolverService
from utils.exceptions import ProxyResolverError
from utils.file_utils import read_address_lines, smart_open
from utils.logger_utils import configure_logging, get_logger

logger = get_logger("Analyze Proxies CLI")


def to_json_line(address: str, outcome: Union[ProxyAnalysis, ProxyResolverError]) -> str:
    if isinstance(outcome, ProxyAnalysis):
        record = {"address": address, "result": outcome.model_dump(mode="json", by_alias=True)}
    else:
        record = {"address": address, "error": str(outcome)}
    return json.dumps(record)


async def _analyze_all(
    addresses: List[str], provider_uris: str, max_concurrency: int
) -> Dict[str, Union[ProxyAnalysis, ProxyResolverError]]:
    async with build_rpc_client(provider_uris) as rpc_client:
        return await ProxyResolverService(rpc_client).analyze_many(addresses, max_concurrency)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("-i", "--input", "input_file", required=True, type=str, help="File with one contract address per line, or - for stdin.")
@click.option("-o", "--output", default="-", show_default=True, type=str, help="JSON lines output file, or - for stdout.")
@click.option(
    "-p",
    "--provider-uris",
    default=configs.ethereum.rpc_provider_uris,
    show_default=True,
    type=str,
    help="The URI(s) of the JSON-RPC provider(s). Multiple URIs can be separated by commas for failover.",
)
@click.option(
    "-c",
    "--max-concurrency",
    default=configs.ethereum.batch_max_concurrency,
    show_default=True,
    type=click.IntRange(min=1),
    help="How many contracts are analyzed at the same time.",
)
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
@click.option("--log-level", default=configs.app.log_level, show_default=True, type=str, help="Logging level.")
def analyze_proxies(input_file: str, output: str, provider_uris: str, max_concurrency: int, log_file: str, log_level: str):
    """
    Resolves every address listed in the input file and writes one JSON object per line.
    Exits with status 1 if any address could not be analyzed.
    """
    configure_logging(log_file, log_level)

    with smart_open(input_file, "r") as fh:
        addresses = list(read_address_lines(fh))

    if not addresses:
        raise click.UsageError(f"No addresses found in {input_file}")

    outcomes = asyncio.run(_analyze_all(addresses, provider_uris, max_concurrency))

    with smart_open(output, "w") as fh:
        for address, outcome in outcomes.items():
            fh.write(to_json_line(address, outcome) + "\n")

    failed = sum(1 for outcome in outcomes.values() if not isinstance(outcome, ProxyAnalysis))
    logger.info(f"Analyzed {len(outcomes)} contracts, {failed} failed.")
    if failed:
        click.echo(f"{failed} of {len(outcomes)} contracts could not be analyzed.", err=True)
        sys.exit(1)


if __name__ == "__main__":
    analyze_proxies()
