"""CLI entry point for the authgate tool.

This module is the composition root of the application.  It is the only
place that picks concrete implementations (FileCredentialStore,
RequestsTransport, the browser as logout navigator).  All other layers
depend solely on abstractions.
"""

import json
import logging
import sys
import webbrowser
from enum import Enum

# Ensure UTF-8 output on Windows where stdout may default to cp1252.
# reconfigure() is a no-op when encoding is already utf-8.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import typer
from rich.console import Console
from rich.table import Table

from authgate.auth.credentials import FileCredentialStore
from authgate.auth.tokens import TokenService
from authgate.config import GatewayConfig
from authgate.core.exceptions import (
    AuthgateError,
    RequestError,
    SessionTerminatedError,
)
from authgate.core.models import Response
from authgate.gateway.dispatcher import RequestDispatcher
from authgate.gateway.factory import build_gateway
from authgate.gateway.terminator import SessionTerminator

app = typer.Typer(help="Send authenticated requests through authgate.")
auth_app = typer.Typer(help="Manage stored credentials.")

app.add_typer(auth_app, name="auth")

console = Console(legacy_windows=False)


# ---------------------------------------------------------------------------
# Output format
# ---------------------------------------------------------------------------


class OutputFormat(str, Enum):
    """Supported output formats for request commands."""

    table = "table"
    json = "json"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_config() -> GatewayConfig:
    return GatewayConfig.from_env()


def _get_store() -> FileCredentialStore:
    return FileCredentialStore()


def _navigate(url: str) -> None:
    """Send the user to the logout page after the session ends."""
    console.print(f"[yellow]Session ended.[/yellow] Logging out at {url}")
    webbrowser.open(url)


def _get_gateway() -> RequestDispatcher:
    """Build a gateway backed by the credentials file.

    Returns:
        A :class:`~authgate.gateway.dispatcher.RequestDispatcher` instance.
    """
    return build_gateway(_get_config(), _get_store(), navigate=_navigate)


def _parse_pairs(values: list[str] | None, sep: str, what: str) -> dict:
    """Split ``key<sep>value`` strings into a dictionary.

    Args:
        values: Raw option values.
        sep: Separator between key and value.
        what: Option name used in error messages.

    Returns:
        A dictionary of stripped keys and values.

    Raises:
        typer.BadParameter: If a value has no separator or an empty key.
    """
    pairs: dict[str, str] = {}
    for raw in values or []:
        key, found, value = raw.partition(sep)
        if not found or not key.strip():
            raise typer.BadParameter(
                f"expected KEY{sep}VALUE, got {raw!r}", param_hint=what
            )
        pairs[key.strip()] = value.strip()
    return pairs


def _parse_body(body: str | None):
    if body is None:
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"not valid JSON: {e}", param_hint="--body")


def _presence(value: str | None) -> str:
    return "[green]stored[/green]" if value else "[red]missing[/red]"


def _render(response: Response, output: OutputFormat) -> None:
    """Print a response body in the requested format."""
    if output == OutputFormat.json:
        print(json.dumps(response.data, indent=2))
        return

    data = response.data
    if isinstance(data, dict):
        table = Table(title=f"HTTP {response.status_code}")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value)
            table.add_row(str(key), str(value))
        console.print(table)
    elif (
        isinstance(data, list)
        and data
        and all(isinstance(row, dict) for row in data)
    ):
        columns = list(data[0].keys())
        table = Table(title=f"HTTP {response.status_code}")
        for column in columns:
            table.add_column(str(column))
        for row in data:
            table.add_row(*(str(row.get(column, "—")) for column in columns))
        console.print(table)
    else:
        console.print(f"[bold]HTTP {response.status_code}[/bold]")
        if data is not None:
            console.print(data)


def _send(
    method: str,
    path: str,
    param: list[str] | None,
    header: list[str] | None,
    body: str | None,
    no_auth: bool,
    output: OutputFormat,
) -> None:
    params = _parse_pairs(param, "=", "--param")
    headers = _parse_pairs(header, ":", "--header")
    payload = _parse_body(body)

    gateway = _get_gateway()
    try:
        response = gateway.request(
            method,
            path,
            params=params,
            body=payload,
            headers=headers,
            access_token=not no_auth,
        )
    except SessionTerminatedError as e:
        console.print(f"[red]✗ Session terminated:[/red] {e}")
        console.print(
            "Run [bold]authgate auth login[/bold] to store new credentials."
        )
        raise typer.Exit(1)
    except RequestError as e:
        status = f" (HTTP {e.status_code})" if e.status_code else ""
        console.print(f"[red]Request failed{status}:[/red] {e}")
        raise typer.Exit(1)
    except AuthgateError as e:
        console.print(f"[red]Request failed:[/red] {e}")
        raise typer.Exit(1)

    _render(response, output)


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log gateway activity to stderr."
    ),
):
    """Send authenticated requests through authgate."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# auth commands
# ---------------------------------------------------------------------------


@auth_app.command()
def login(
    access_token: str = typer.Option(
        ..., prompt="Access token", hide_input=True, help="Bearer access token."
    ),
    refresh_token: str = typer.Option(
        "",
        prompt="Refresh token (empty for none)",
        hide_input=True,
        help="Refresh token used to renew the access token.",
    ),
):
    """Store a credential pair obtained from the authorization server."""
    store = _get_store()
    TokenService(store).persist(access_token, refresh_token or None)
    console.print(f"[green]✓ Credentials saved to:[/green] {store.path}")
    if not refresh_token:
        console.print(
            "[dim]No refresh token stored: the session ends when the "
            "access token expires.[/dim]"
        )


@auth_app.command()
def status():
    """Show which credentials are stored."""
    store = _get_store()
    pair = TokenService(store).credential_pair()

    if not pair.access_token and not pair.refresh_token:
        console.print("[yellow]No credentials configured.[/yellow]")
        console.print("Run [bold]authgate auth login[/bold].")
        raise typer.Exit(1)

    console.print(f"[green]✓ Credentials file[/green]  {store.path}")
    console.print(f"  Access token  : {_presence(pair.access_token)}")
    console.print(f"  Refresh token : {_presence(pair.refresh_token)}")


@auth_app.command()
def logout(
    browser: bool = typer.Option(
        True, "--browser/--no-browser", help="Open the logout page."
    ),
):
    """Clear stored credentials and open the logout page."""
    config = _get_config()

    def navigate(url: str) -> None:
        if browser:
            webbrowser.open(url)
        else:
            console.print(f"Log out at: {url}")

    SessionTerminator(
        TokenService(_get_store()), config.logout_url, navigate
    ).terminate()
    console.print("[green]✓ Credentials removed.[/green]")


# ---------------------------------------------------------------------------
# request commands
# ---------------------------------------------------------------------------

_PARAM_OPTION = typer.Option(
    None, "--param", "-p", help="Query parameter as KEY=VALUE (repeatable)."
)
_HEADER_OPTION = typer.Option(
    None, "--header", "-H", help="Extra header as NAME:VALUE (repeatable)."
)
_BODY_OPTION = typer.Option(None, "--body", "-d", help="JSON request body.")
_NO_AUTH_OPTION = typer.Option(
    False, "--no-auth", help="Do not attach the stored access token."
)
_OUTPUT_OPTION = typer.Option(
    OutputFormat.table, "--output", "-o", help="Output format."
)


@app.command()
def get(
    path: str,
    param: list[str] = _PARAM_OPTION,
    header: list[str] = _HEADER_OPTION,
    body: str = _BODY_OPTION,
    no_auth: bool = _NO_AUTH_OPTION,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Send a GET request."""
    _send("get", path, param, header, body, no_auth, output)


@app.command()
def post(
    path: str,
    param: list[str] = _PARAM_OPTION,
    header: list[str] = _HEADER_OPTION,
    body: str = _BODY_OPTION,
    no_auth: bool = _NO_AUTH_OPTION,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Send a POST request."""
    _send("post", path, param, header, body, no_auth, output)


@app.command()
def put(
    path: str,
    param: list[str] = _PARAM_OPTION,
    header: list[str] = _HEADER_OPTION,
    body: str = _BODY_OPTION,
    no_auth: bool = _NO_AUTH_OPTION,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Send a PUT request."""
    _send("put", path, param, header, body, no_auth, output)


@app.command()
def delete(
    path: str,
    param: list[str] = _PARAM_OPTION,
    header: list[str] = _HEADER_OPTION,
    body: str = _BODY_OPTION,
    no_auth: bool = _NO_AUTH_OPTION,
    output: OutputFormat = _OUTPUT_OPTION,
):
    """Send a DELETE request."""
    _send("delete", path, param, header, body, no_auth, output)


if __name__ == "__main__":
    app()
