"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.requests import CodeFormat

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get("/")
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="pipeline-client Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "MISSING", str(env_file))
    table.add_row("API URL", "OK", settings.api_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("Code format", "OK", settings.default_format.value)

    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("API connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        _console.print("\n[yellow]Note:[/yellow] run `pipeline-client doctor setup` to point at another API.")


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    current = AppSettings()
    api_url = typer.prompt("API URL", default=current.api_url, show_default=True).strip()
    code_format = typer.prompt(
        "Default pipeline code format",
        default=current.default_format.value,
        show_default=True,
    ).strip().lower()

    if not api_url:
        raise typer.BadParameter("API URL is required")
    try:
        CodeFormat(code_format)
    except ValueError:
        raise typer.BadParameter(f"unknown format {code_format!r} (yaml or json)") from None

    env_path = write_user_env_vars(
        {
            "PIPELINE_CLIENT_API_URL": api_url,
            "PIPELINE_CLIENT_DEFAULT_FORMAT": code_format,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
