"""CLI package for corerpc."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import BaseModel
from rich.markup import escape

from corerpc.chain import Block, BlockHeader
from corerpc.core import ConfigManager, ConfigurationError
from corerpc.rpc import Hash256, MalformedResponseError, RPCError
from corerpc.rpc.catalog import CATALOG, ArityError, UnknownMethodError
from corerpc.rpc.client import NodeRPCClient

from .console import key_value_table, themed_console

logger = logging.getLogger(__name__)

app = typer.Typer(help="Typed client for Bitcoin Core's JSON-RPC interface", no_args_is_help=True)

CLI_CONSOLE = themed_console()


def styled_echo(message: str = "", *, nl: bool = True) -> None:
    """Print using the corerpc themed console."""
    CLI_CONSOLE.print(message, end="" if not nl else "\n")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"", "0", "false", "no"}


def _configure_logging(verbose: bool, log_dir: Path | None = None) -> None:
    root_logger = logging.getLogger()
    if verbose:
        if not root_logger.handlers:
            logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        root_logger.setLevel(logging.DEBUG)
    else:
        if root_logger.handlers:
            root_logger.setLevel(logging.WARNING)
        else:
            logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if verbose and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / "corerpc.log", encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logging.getLogger().addHandler(handler)


@dataclass
class CLIState:
    config_path: Path | None = None
    rpc_url: str | None = None
    rpc_user: str | None = None
    passphrase: str | None = None


def _build_client(state: CLIState) -> NodeRPCClient:
    manager = ConfigManager(override_config_path=state.config_path)
    context = manager.ensure(
        interactive=False,
        rpc_url=state.rpc_url,
        rpc_user=state.rpc_user,
        passphrase=state.passphrase,
    )
    return NodeRPCClient.from_config(context.config, password=context.rpc_password)


@contextmanager
def _cli_errors() -> Iterator[None]:
    try:
        yield
    except RPCError as exc:
        logger.debug("RPC failure", exc_info=True)
        styled_echo(f"[corerpc.error]❌ {escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc
    except ConfigurationError as exc:
        styled_echo(f"[corerpc.error]❌ {escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc
    except (ValueError, ArityError, UnknownMethodError) as exc:
        message = exc.args[0] if exc.args else str(exc)
        styled_echo(f"[corerpc.error]❌ {escape(str(message))}[/]")
        raise typer.Exit(code=2) from exc


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Hash256):
        return value.to_wire()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {field.name: _to_jsonable(getattr(value, field.name)) for field in dataclasses.fields(value)}
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(_to_jsonable(key)): _to_jsonable(item) for key, item in value.items()}
    return value


def _parse_param(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _parse_hash(raw: str) -> Hash256:
    try:
        return Hash256.from_wire(raw)
    except MalformedResponseError as exc:
        raise typer.BadParameter(exc.detail) from exc


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Merge this TOML file over the stored config"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),  # noqa: B008
    rpc_url: Optional[str] = typer.Option(None, "--url", help="Override the node RPC URL"),  # noqa: B008
    rpc_user: Optional[str] = typer.Option(None, "--user", help="Override the RPC user name"),  # noqa: B008
    passphrase: Optional[str] = typer.Option(None, "--passphrase", help="Passphrase for the stored RPC password"),  # noqa: B008
) -> None:
    """Connect to a node and call its RPC methods."""
    verbose = verbose or _env_flag("CORERPC_DEBUG")
    log_dir = os.environ.get("CORERPC_LOG_DIR")
    _configure_logging(verbose, Path(log_dir) if log_dir else None)
    ctx.obj = CLIState(
        config_path=config.expanduser() if config else None,
        rpc_url=rpc_url,
        rpc_user=rpc_user,
        passphrase=passphrase,
    )


@app.command()
def version() -> None:
    """Show CLI version."""
    try:
        pkg_version = metadata.version("corerpc")
    except metadata.PackageNotFoundError:
        pkg_version = "0.0.0"
    styled_echo(f"corerpc version {pkg_version}")


@app.command()
def methods() -> None:
    """List the RPC methods the client knows how to decode."""
    for spec in CATALOG.values():
        params = " ".join(param.name if param.required else f"[{param.name}]" for param in spec.params)
        styled_echo(escape(f"{spec.name} {params}".rstrip()))


@app.command()
def call(
    ctx: typer.Context,
    method: str = typer.Argument(..., help="RPC method name, e.g. getblockcount"),  # noqa: B008
    params: Optional[list[str]] = typer.Argument(None, help="Positional parameters; parsed as JSON when possible"),  # noqa: B008
) -> None:
    """Call a catalogued RPC method and print the decoded result as JSON."""
    parsed = [_parse_param(raw) for raw in params or []]
    with _cli_errors():
        with _build_client(ctx.obj) as client:
            result = client.call(method, *parsed)
    CLI_CONSOLE.print_json(json.dumps(_to_jsonable(result)))


@app.command()
def info(ctx: typer.Context) -> None:
    """Summarise the node's view of the chain."""
    with _cli_errors():
        with _build_client(ctx.obj) as client:
            chain = client.get_blockchain_info()
    rows = [
        ("chain", chain.chain),
        ("blocks", chain.blocks),
        ("headers", chain.headers),
        ("best block", chain.bestblockhash),
        ("difficulty", chain.difficulty),
        ("verification", f"{chain.verificationprogress:.4%}"),
        ("pruned", chain.pruned),
    ]
    CLI_CONSOLE.print(key_value_table("Blockchain", rows))


@app.command()
def header(
    ctx: typer.Context,
    block_hash: str = typer.Argument(..., help="Block hash (64 hex characters)"),  # noqa: B008
) -> None:
    """Fetch a block header in raw form and decode it locally."""
    target = _parse_hash(block_hash)
    with _cli_errors():
        with _build_client(ctx.obj) as client:
            block_header = client.resolve(BlockHeader, target)
    rows = [
        ("hash", block_header.hash),
        ("version", f"0x{block_header.version & 0xFFFFFFFF:08x}"),
        ("previous", block_header.prev_blockhash),
        ("merkle root", block_header.merkle_root),
        ("time", block_header.time),
        ("bits", f"0x{block_header.bits:08x}"),
        ("nonce", block_header.nonce),
    ]
    CLI_CONSOLE.print(key_value_table("Block header", rows))


@app.command()
def selftest(ctx: typer.Context) -> None:
    """Check the client against a live node."""
    with _cli_errors():
        with _build_client(ctx.obj) as client:
            best_hash = client.get_best_block_hash()
            styled_echo(f"best block hash: [corerpc.hash]{best_hash}[/]")
            height = client.get_block_count()
            styled_echo(f"best block height: {height}")
            hash_by_height = client.get_block_hash(height)
            styled_echo(f"best block hash by height: [corerpc.hash]{hash_by_height}[/]")
            if hash_by_height != best_hash:
                styled_echo("[corerpc.warning]⚠️ Tip moved between calls; hashes differ.[/]")
                raise typer.Exit(code=1)
            block = client.resolve(Block, best_hash)
            styled_echo(f"previous block hash by resolve: [corerpc.hash]{block.header.prev_blockhash}[/]")
            if block.hash != best_hash:
                styled_echo("[corerpc.error]❌ Decoded block hash does not match the requested hash.[/]")
                raise typer.Exit(code=1)
            coinbase = block.txdata[0]
            styled_echo(f"coinbase txid: [corerpc.hash]{coinbase.txid}[/]")
    styled_echo("[corerpc.success]✅ Self-test passed[/]")


@app.command()
def configure(
    rpc_url: Optional[str] = typer.Option(None, "--url", help="Node RPC URL"),  # noqa: B008
    rpc_user: Optional[str] = typer.Option(None, "--user", help="RPC user name"),  # noqa: B008
    network: Optional[str] = typer.Option(None, "--network", help="main, test, signet or regtest"),  # noqa: B008
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP timeout in seconds"),  # noqa: B008
    node_version: Optional[int] = typer.Option(None, "--node-version", help="Node version, e.g. 250000"),  # noqa: B008
    password: Optional[str] = typer.Option(None, "--password", help="RPC password to store encrypted"),  # noqa: B008
    passphrase: Optional[str] = typer.Option(None, "--passphrase", help="Passphrase protecting the stored password"),  # noqa: B008
) -> None:
    """Write connection settings to the config directory."""
    manager = ConfigManager(echo_fn=styled_echo)
    with _cli_errors():
        manager.configure(
            rpc_url=rpc_url,
            rpc_user=rpc_user,
            network=network,
            timeout_seconds=timeout,
            node_version=node_version,
            rpc_password=password,
            passphrase=passphrase,
        )


def main() -> None:
    """Console script entrypoint."""
    app()


__all__ = ["app", "main"]
