import asyncio
import sys

import click

from config.configs import configs
from resolver.models.proxy_analysis import ProxyAnalysis
from resolver.rpc_client import RpcClient
from resolver.service.proxy_resolver_service import ProxyResolverService
from utils.exceptions import InvalidAddressError, ProxyResolverError
from utils.logger_utils import configure_logging, get_logger
from utils.validation_utils import validate_address

logger = get_logger("Analyze Proxy CLI")

EMPTY_MARKER = "(empty)"
FAILED_MARKER = "(failed to read)"

TROUBLESHOOTING_HINTS = (
    "\nPlease check:\n"
    "  - Contract address is correct\n"
    "  - Network connection is available\n"
    "  - RPC endpoint is accessible\n"
)


def validate_address_argument(ctx, param, value):
    try:
        return validate_address(value)
    except InvalidAddressError as e:
        raise click.BadParameter(str(e))


def format_analysis(analysis: ProxyAnalysis) -> str:
    lines = [f"Analyzing contract: {analysis.proxy_address}", ""]

    if not analysis.is_proxy:
        lines.append("Not an EIP-1967 Proxy or slots are empty")
    else:
        lines.append(f"Proxy detected: {analysis.proxy_kind.value}")
        lines.append("")
        if analysis.implementation:
            lines.append(f"Implementation: {analysis.implementation}")
        elif analysis.beacon:
            lines.append(f"Beacon: {analysis.beacon}")
            lines.append(f"Beacon Implementation: {analysis.beacon_implementation or FAILED_MARKER}")

    if analysis.beacon_implementation_failed:
        beacon_implementation = FAILED_MARKER
    else:
        beacon_implementation = analysis.beacon_implementation or EMPTY_MARKER

    lines += [
        "",
        "Summary:",
        f"implementation: {analysis.implementation or EMPTY_MARKER}",
        f"admin: {analysis.admin or EMPTY_MARKER}",
        f"beacon: {analysis.beacon or EMPTY_MARKER}",
        f"beaconImplementation: {beacon_implementation}",
    ]
    return "\n".join(lines)


def build_rpc_client(provider_uris: str) -> RpcClient:
    return RpcClient(
        rpc_url=provider_uris,
        max_retries=configs.ethereum.rpc_max_retries,
        timeout=configs.ethereum.rpc_timeout_seconds,
        rpc_min_interval=configs.ethereum.rpc_min_interval,
    )


async def _analyze(address: str, provider_uris: str) -> ProxyAnalysis:
    async with build_rpc_client(provider_uris) as rpc_client:
        return await ProxyResolverService(rpc_client).analyze(address)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("address", callback=validate_address_argument)
@click.option(
    "-p",
    "--provider-uris",
    default=configs.ethereum.rpc_provider_uris,
    show_default=True,
    type=str,
    help="The URI(s) of the JSON-RPC provider(s) e.g. https://ethereum.publicnode.com. "
    "Multiple URIs can be separated by commas for failover.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the analysis as JSON instead of a summary.")
@click.option("--log-file", default=None, show_default=True, type=str, help="Path to the log file.")
@click.option("--log-level", default=configs.app.log_level, show_default=True, type=str, help="Logging level.")
def analyze_proxy(address: str, provider_uris: str, as_json: bool, log_file: str, log_level: str):
    """
    Detects whether ADDRESS is an EIP-1967 proxy and resolves its implementation,
    admin and beacon.

    Example: analyze_proxy 0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eb48
    """
    configure_logging(log_file, log_level)

    try:
        analysis = asyncio.run(_analyze(address, provider_uris))
    except ProxyResolverError as e:
        logger.debug("Analysis failed", exc_info=True)
        click.echo(f"\nError: {e}", err=True)
        click.echo(TROUBLESHOOTING_HINTS, err=True)
        sys.exit(1)

    if as_json:
        click.echo(analysis.model_dump_json(by_alias=True, indent=2))
    else:
        click.echo(f"\n{format_analysis(analysis)}\n\n--- Analysis Complete ---\n")


if __name__ == "__main__":
    analyze_proxy()
