"""The `prometheus-term` terminal application."""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
import typer
from loguru import logger
from rich.console import Console

from prometheus_term.config import Settings
from prometheus_term.errors import ConfigError
from prometheus_term.logging_utils import configure_logging
from prometheus_term.shell import Shell
from server.config import ServerSettings
from server.serve import build_endpoint
from server.transport import EndpointTransport

from .display import ConsoleDisplay
from .input_handler import KeyReader
from .screen import ConsoleScreen


class TerminalApp:
    """Runs a Shell on the real terminal until Ctrl+C / Ctrl+D.

    Args:
        settings: Session settings.
        transport: httpx transport for the chat client (None = network).
        console: Console to draw on.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        console: Console | None = None,
    ) -> None:
        self.settings = settings
        self.screen = ConsoleScreen(console)
        self.shell = Shell(
            self.screen,
            settings,
            display=ConsoleDisplay(self.screen),
            transport=transport,
        )
        self.reader = KeyReader(
            on_key=self.shell.feed,
            on_paste=self.shell.paste,
            on_scroll=self.shell.scroll,
            on_exit=self.stop,
            release_delay=settings.key_release_delay,
            mouse=settings.mouse_wheel,
        )
        self._stopped: asyncio.Event | None = None

    def stop(self) -> None:
        if self._stopped is not None:
            self._stopped.set()

    async def run(self) -> bool:
        """Run until stopped.

        Returns:
            False if the terminal could not be attached (not a TTY).
        """
        self._stopped = asyncio.Event()
        if not await self.reader.start():
            return False
        try:
            self.screen.clear()
            self.shell.boot()
            await self._stopped.wait()
        finally:
            await self.reader.stop()
            self.screen.set_cursor_visible(True)
            self.screen.console.file.write("\r\n")
            logger.info("Session ended")
        return True


def _local_transport() -> httpx.AsyncBaseTransport:
    return EndpointTransport(build_endpoint(ServerSettings.from_env()))


app = typer.Typer(
    name="prometheus-term",
    help="A retro terminal with something living inside it.",
    add_completion=False,
)


@app.command()
def run(
    endpoint: Optional[str] = None,
    local: bool = False,
    mouse: Optional[bool] = None,
) -> None:
    """Open the terminal."""
    try:
        settings = Settings.from_env()
        if endpoint:
            settings.endpoint_url = endpoint
        if mouse is not None:
            settings.mouse_wheel = mouse
        configure_logging(settings.log_level, settings.log_file)
        transport = _local_transport() if local else None
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from e

    if not asyncio.run(TerminalApp(settings, transport).run()):
        typer.echo("prometheus-term needs an interactive terminal.", err=True)
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
