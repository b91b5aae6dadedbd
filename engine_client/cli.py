"""CLI entry point for engine-client."""

import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Optional

import click

from .client import EngineClient
from .config import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT, Config
from .encoding import ADDRESS_LENGTH, HASH_LENGTH, PAYLOAD_ID_LENGTH, UINT64_MAX, decode_data
from .errors import EngineAPIError
from .metrics import start_metrics_server
from .types import ExecutionPayload, ForkchoiceState, PayloadAttributes, PayloadId

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    if level.upper() != "DEBUG":
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def _hex_bytes(length: int) -> Callable[[click.Context, click.Parameter, Optional[str]], Optional[bytes]]:
    def convert(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[bytes]:
        if value is None:
            return None
        try:
            return decode_data(value, length)
        except ValueError as e:
            raise click.BadParameter(str(e)) from e

    return convert


def _run(config: Config, call: Callable[[EngineClient], Awaitable[Any]]) -> None:
    async def main():
        async with EngineClient.from_config(config) as client:
            return await call(client)

    if config.metrics_port:
        start_metrics_server(config.metrics_port)

    try:
        result = asyncio.run(main())
    except EngineAPIError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(result.to_dict() if result is not None else None, indent=2))


@click.group()
@click.version_option(package_name="engine-client")
@click.option(
    "--endpoint",
    default=DEFAULT_ENDPOINT,
    help="Execution client Engine API URL or IPC socket path",
    envvar="ENGINE_CLIENT_ENDPOINT",
)
@click.option(
    "--jwt-secret",
    type=click.Path(exists=True),
    help="Path to JWT secret file for Engine API authentication",
    envvar="ENGINE_CLIENT_JWT_SECRET",
)
@click.option(
    "--timeout",
    default=DEFAULT_TIMEOUT,
    type=float,
    help="Per-call deadline in seconds",
    envvar="ENGINE_CLIENT_TIMEOUT",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
    envvar="ENGINE_CLIENT_LOG_LEVEL",
)
@click.option(
    "--metrics-port",
    default=0,
    type=int,
    help="Port for the Prometheus metrics server (0 disables it)",
    envvar="ENGINE_CLIENT_METRICS_PORT",
)
@click.pass_context
def cli(
    ctx: click.Context,
    endpoint: str,
    jwt_secret: Optional[str],
    timeout: float,
    log_level: str,
    metrics_port: int,
):
    """engine-client - query and drive an execution client over the Engine API."""
    setup_logging(log_level)
    ctx.obj = Config(
        endpoint=endpoint,
        jwt_secret_path=jwt_secret or "",
        timeout=timeout,
        log_level=log_level,
        metrics_port=metrics_port,
    )
    logger.debug(f"Engine API endpoint: {endpoint}")


@cli.command("latest-block")
@click.pass_obj
def latest_block(config: Config):
    """Print the latest execution block."""
    _run(config, lambda client: client.latest_execution_block())


@cli.command("block-by-hash")
@click.argument("block_hash", callback=_hex_bytes(HASH_LENGTH))
@click.pass_obj
def block_by_hash(config: Config, block_hash: bytes):
    """Print the execution block with the given hash."""
    _run(config, lambda client: client.execution_block_by_hash(block_hash))


@cli.command("get-payload")
@click.argument("payload_id", callback=_hex_bytes(PAYLOAD_ID_LENGTH))
@click.pass_obj
def get_payload(config: Config, payload_id: bytes):
    """Print the payload built for PAYLOAD_ID."""
    _run(config, lambda client: client.get_payload(PayloadId(payload_id)))


@cli.command("forkchoice-updated")
@click.option("--head", required=True, callback=_hex_bytes(HASH_LENGTH), help="Head block hash")
@click.option("--safe", required=True, callback=_hex_bytes(HASH_LENGTH), help="Safe block hash")
@click.option(
    "--finalized", required=True, callback=_hex_bytes(HASH_LENGTH), help="Finalized block hash"
)
@click.option(
    "--timestamp",
    type=click.IntRange(0, UINT64_MAX),
    help="Payload timestamp; requests a payload build",
)
@click.option(
    "--prev-randao",
    default="0x" + "00" * HASH_LENGTH,
    callback=_hex_bytes(HASH_LENGTH),
    help="Randomness for the payload build",
)
@click.option(
    "--fee-recipient",
    default="0x" + "00" * ADDRESS_LENGTH,
    callback=_hex_bytes(ADDRESS_LENGTH),
    help="Suggested fee recipient for the payload build",
)
@click.pass_obj
def forkchoice_updated(
    config: Config,
    head: bytes,
    safe: bytes,
    finalized: bytes,
    timestamp: Optional[int],
    prev_randao: bytes,
    fee_recipient: bytes,
):
    """Send a forkchoice update, optionally starting a payload build."""
    state = ForkchoiceState(
        head_block_hash=head,
        safe_block_hash=safe,
        finalized_block_hash=finalized,
    )
    attributes = None
    if timestamp is not None:
        attributes = PayloadAttributes(
            timestamp=timestamp,
            prev_randao=prev_randao,
            suggested_fee_recipient=fee_recipient,
        )
    _run(config, lambda client: client.forkchoice_updated(state, attributes))


@cli.command("new-payload")
@click.argument("payload_file", type=click.File("r"))
@click.pass_obj
def new_payload(config: Config, payload_file):
    """Submit the execution payload in PAYLOAD_FILE (JSON, wire format)."""
    try:
        payload = ExecutionPayload.from_dict(json.load(payload_file))
    except (KeyError, TypeError, ValueError) as e:
        raise click.BadParameter(f"invalid execution payload: {e}", param_hint="PAYLOAD_FILE") from e
    _run(config, lambda client: client.new_payload(payload))


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
