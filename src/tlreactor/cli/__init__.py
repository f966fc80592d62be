from __future__ import annotations

from functools import partial
from pathlib import Path

import anyio
import typer

from .. import __version__
from ..config import (
    ConfigError,
    ConfigMissingError,
    ReactorConfig,
    load_config,
    parse_config,
)
from ..logging import get_logger, setup_logging
from ..router import CommandRouter
from ..telegram.server import Server

logger = get_logger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _resolve_config(
    config_path: Path | None, token: str | None, proxy: str | None, debug: bool
) -> ReactorConfig:
    raw: dict = {}
    path = config_path
    try:
        raw, path = load_config(config_path)
    except ConfigMissingError:
        if token is None:
            raise
    if token is not None:
        raw["bot_token"] = token
    if proxy is not None:
        raw["proxy"] = proxy
    if debug:
        raw["debug"] = True
    return parse_config(raw, path or Path("<command line>"))


async def _serve(config: ReactorConfig) -> None:
    server = Server(
        config.bot_token,
        CommandRouter(),
        config.proxy,
        verify_tls=config.verify_tls,
    )
    try:
        await server.start()
    finally:
        await server.aclose()


def run(
    config_path: Path | None = typer.Option(
        None, "--config", help="Path to tlreactor.toml."
    ),
    token: str | None = typer.Option(None, "--token", help="Bot token override."),
    proxy: str | None = typer.Option(None, "--proxy", help="HTTP proxy URI."),
    debug: bool = typer.Option(False, "--debug", help="Verbose console logging."),
) -> None:
    """Poll the Bot API and answer commands until interrupted."""
    try:
        config = _resolve_config(config_path, token, proxy, debug)
    except ConfigError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e
    setup_logging(debug=config.debug)
    if not config.verify_tls:
        logger.warning("cli.tls_verification_disabled")
    try:
        anyio.run(partial(_serve, config))
    except KeyboardInterrupt:
        logger.info("cli.interrupted")
        raise typer.Exit(code=130) from None
    except Exception as e:  # noqa: BLE001
        logger.exception("cli.fatal", error=str(e), error_type=e.__class__.__name__)
        raise typer.Exit(code=1) from e


def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Long-polling Telegram bot gateway."""


def create_app() -> typer.Typer:
    app = typer.Typer(add_completion=False, no_args_is_help=True)
    app.callback()(app_main)
    app.command(name="run")(run)
    return app


app = create_app()


def main() -> None:
    app()
