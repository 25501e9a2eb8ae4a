#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Entry point for the sbxlite Command Line Interface (CLI)."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core import SbxError
from .core.config import DEFAULT_RICH_THEME, STATUS_STYLES
from .core.config.exceptions import EngineError
from .core.models.version import VersionStatus
from .manager import SingBox

app = typer.Typer(
    name="sbxlite",
    help="Safely inspects client info and validates configuration for a sing-box Reality server.",
    add_completion=False,
    rich_markup_mode="markdown",
)

console = Console(theme=DEFAULT_RICH_THEME)

_EXPORT_FORMATS = ("uri", "singbox")


def _fail(error: Exception) -> typer.Exit:
    console.print(f"[danger]Error: {escape(str(error))}[/danger]")
    return typer.Exit(code=1)


def _engine_version_or_none(manager: SingBox) -> Optional[str]:
    """Detects the installed engine, treating a missing or broken binary as unknown."""
    try:
        return manager.resolve_engine_version()
    except EngineError as e:
        console.print(f"[warning]{escape(str(e))}[/warning]")
        return None


@app.callback()
def callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging.",
    ),
):
    """
    **sbxlite**: client info and configuration checks for sing-box.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command(help="Loads the client info file and shows the connection details.")
def info(
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Client info file (defaults to the configured path).",
    ),
    no_perm_check: bool = typer.Option(
        False,
        "--no-perm-check",
        help="Do not require mode 600 on the client info file.",
    ),
):
    """Shows the parsed client info and the resulting share link."""
    console.print(
        Panel(
            "[accent]sbxlite[/] - Client info",
            expand=False,
            border_style="accent",
        )
    )
    try:
        manager = SingBox(client_info_path=file)
        record = manager.load_client_info(enforce_permissions=not no_perm_check)
        share_link = manager.build_reality_uri(record)
        values = record.with_defaults()

        table = Table(show_header=True, header_style="accent", border_style="muted")
        table.add_column("Key", style="accent.secondary", no_wrap=True)
        table.add_column("Value", style="info", overflow="fold")
        for key, value in values.items():
            table.add_row(key, escape(value))
        console.print(table)

        endpoint = manager._format_destination(values.get("DOMAIN"), manager._parse_port(values["REALITY_PORT"]))
        console.print(f"[accent]Endpoint:[/] {escape(endpoint)}")
        console.print(f"[accent]Share link:[/] {escape(share_link)}", soft_wrap=True)
    except SbxError as e:
        raise _fail(e)


@app.command(help="Prints the client share link or a sing-box client outbound.")
def export(
    file: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Client info file (defaults to the configured path).",
    ),
    output_format: str = typer.Option(
        "uri",
        "--format",
        help="Output format: 'uri' or 'singbox'.",
    ),
    no_perm_check: bool = typer.Option(
        False,
        "--no-perm-check",
        help="Do not require mode 600 on the client info file.",
    ),
):
    """Writes the export to stdout so it can be piped."""
    fmt = output_format.strip().lower()
    if fmt not in _EXPORT_FORMATS:
        console.print(f"[danger]Error: Unknown export format '{escape(output_format)}' (use uri or singbox).[/danger]")
        raise typer.Exit(code=1)

    try:
        manager = SingBox(client_info_path=file)
        record = manager.load_client_info(enforce_permissions=not no_perm_check)
        if fmt == "uri":
            print(manager.build_reality_uri(record))
        else:
            outbound = manager.build_client_outbound(record)
            print(json.dumps({"outbounds": [outbound]}, indent=2, ensure_ascii=False))
    except SbxError as e:
        raise _fail(e)


@app.command(help="Validates a sing-box configuration file before it is used.")
def validate(
    config: Optional[Path] = typer.Argument(
        None,
        help="Configuration file (defaults to the configured path).",
    ),
    engine_version: Optional[str] = typer.Option(
        None,
        "--engine-version",
        "-e",
        help="Validate for this sing-box version instead of detecting the installed one.",
    ),
):
    """Runs the whole-document checks and reports the first problem found."""
    try:
        manager = SingBox(config_path=config, engine_version=engine_version)
        version = engine_version or _engine_version_or_none(manager)
        manager.validate_config_file(installed_version=version)
    except SbxError as e:
        raise _fail(e)

    target = f"sing-box {version}" if version else "an unknown sing-box version"
    console.print(f"[success]Configuration is valid for {escape(target)}.[/success]")


@app.command(help="Shows the installed sing-box version and whether it is supported.")
def version(
    engine_version: Optional[str] = typer.Option(
        None,
        "--engine-version",
        "-e",
        help="Assess this version instead of the installed binary.",
    ),
):
    """Exits with code 1 when the engine is older than the minimum supported release."""
    manager = SingBox(engine_version=engine_version)
    current = engine_version or _engine_version_or_none(manager)
    report = manager.version_report(current)
    status: VersionStatus = report["status"]

    table = Table(show_header=False, border_style="muted")
    table.add_column("Field", style="accent.secondary", no_wrap=True)
    table.add_column("Value", style="info")
    table.add_row("Installed", escape(report["current"]))
    table.add_row("Minimum", report["minimum"])
    table.add_row("Recommended", report["recommended"])
    table.add_row("Status", f"[{STATUS_STYLES[status.value]}]{status.value}[/]")
    console.print(table)

    if status is VersionStatus.UNSUPPORTED:
        raise typer.Exit(code=1)


@app.command("check-update", help="Checks GitHub for a newer sing-box release.")
def check_update(
    channel: str = typer.Option(
        "stable",
        "--channel",
        "-c",
        help="'stable', 'latest' (including pre-releases) or an explicit version.",
    ),
    engine_version: Optional[str] = typer.Option(
        None,
        "--engine-version",
        "-e",
        help="Compare against this version instead of the installed binary.",
    ),
):
    """Resolves the release channel and compares it with the installed engine."""

    async def main():
        try:
            manager = SingBox(engine_version=engine_version)
            current = engine_version or manager.resolve_engine_version()
            with console.status("[info]Querying sing-box releases...[/info]", spinner="dots"):
                result = await manager.check_for_update(current, channel)
        except SbxError as e:
            raise _fail(e)

        if result["update_available"]:
            console.print(
                f"[warning]Update available:[/warning] {escape(result['current'])} -> "
                f"[success]{escape(result['available'])}[/success]"
            )
        else:
            console.print(
                f"[success]sing-box {escape(result['current'])} is up to date "
                f"(channel '{escape(channel)}' resolves to {escape(result['available'])}).[/success]"
            )

    asyncio.run(main())


if __name__ == "__main__":
    app()
