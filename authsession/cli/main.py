"""authsession CLI - login, logout and authenticated requests."""
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..client import SessionManager
from ..core.api import APIConfig, LoginCredentials, RegisterCredentials
from ..core.exceptions import (
    AuthSessionError,
    BootstrapError,
    InvalidCredentials,
    SessionExpired,
)

STORE_ENV = 'AUTHSESSION_STORE'

app = typer.Typer(
    name="authsession",
    help="Authenticated session CLI",
    add_completion=False
)
console = Console()


# Token store: ~/.config/authsession/tokens.session
def get_store_path() -> Path:
    override = os.environ.get(STORE_ENV)
    if override:
        return Path(override)
    config_dir = Path.home() / ".config" / "authsession"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / "tokens.session"


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def make_session(api_url: Optional[str] = None) -> SessionManager:
    config = APIConfig.from_env()
    if api_url:
        config.api_url = api_url
    return SessionManager(get_store_path(), config=config)


def print_auth_error(prefix: str, error: AuthSessionError) -> None:
    console.print(f"[red]{prefix}: {error.message}[/red]")
    if isinstance(error, InvalidCredentials):
        for field_name, message in error.field_errors.items():
            console.print(f"  [red]{field_name}: {message}[/red]")


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Authenticated session CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@app.command()
def login(
    email: str = typer.Option(None, "--email", "-e", help="Account email"),
    password: str = typer.Option(None, "--password", "-p", help="Account password"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Backend URL"),
):
    """Login and save the token pair."""
    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True)
    
    async def do_login():
        async with make_session(api_url) as session:
            try:
                result = await session.login(LoginCredentials(email, password))
            except AuthSessionError as e:
                print_auth_error("Login failed", e)
                raise typer.Exit(1)
            console.print(f"[green]Logged in as {result.user.username}[/green]")
            console.print(f"Tokens saved to: {get_store_path()}")
    
    run_async(do_login())


@app.command()
def register(
    username: str = typer.Option(None, "--username", "-u", help="Username"),
    email: str = typer.Option(None, "--email", "-e", help="Account email"),
    password: str = typer.Option(None, "--password", "-p", help="Account password"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Backend URL"),
):
    """Create an account and save the token pair."""
    if not username:
        username = typer.prompt("Username")
    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True, confirmation_prompt=True)
    
    async def do_register():
        async with make_session(api_url) as session:
            try:
                result = await session.register(RegisterCredentials(username, email, password))
            except AuthSessionError as e:
                print_auth_error("Registration failed", e)
                raise typer.Exit(1)
            console.print(f"[green]Registered and logged in as {result.user.username}[/green]")
    
    run_async(do_register())


@app.command()
def logout(
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Backend URL"),
):
    """Logout and delete the stored tokens."""
    async def do_logout():
        async with make_session(api_url) as session:
            if not session.store.exists():
                console.print("[yellow]No active session[/yellow]")
                return
            await session.logout()
            console.print("[green]Logged out successfully[/green]")
    
    run_async(do_logout())


@app.command()
def whoami(
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Backend URL"),
):
    """Show the current logged in user."""
    async def do_whoami():
        async with make_session(api_url) as session:
            if not session.store.exists():
                console.print("[red]Not logged in. Run 'authsession login' first.[/red]")
                raise typer.Exit(1)
            try:
                snapshot = await session.bootstrap()
            except BootstrapError as e:
                print_auth_error("Could not reach backend", e)
                raise typer.Exit(1)
            
            if not snapshot.is_authenticated:
                console.print("[red]Session expired. Run 'authsession login' again.[/red]")
                raise typer.Exit(1)
            
            user = snapshot.user
            table = Table(show_header=False)
            table.add_row("Username", user.username)
            table.add_row("Email", user.email or "-")
            table.add_row("Role", user.role or "-")
            table.add_row("ID", str(user.id))
            console.print(table)
    
    run_async(do_whoami())


@app.command()
def get(
    path: str = typer.Argument(..., help="Path relative to the API base URL"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Backend URL"),
):
    """Make an authenticated GET request and print the response."""
    async def do_get():
        async with make_session(api_url) as session:
            if session.store.exists():
                try:
                    await session.bootstrap()
                except BootstrapError as e:
                    print_auth_error("Could not reach backend", e)
                    raise typer.Exit(1)
            try:
                response = await session.request("GET", path)
            except SessionExpired as e:
                print_auth_error("Session expired", e)
                raise typer.Exit(1)
            except AuthSessionError as e:
                print_auth_error("Request failed", e)
                raise typer.Exit(1)
            
            color = "green" if response.ok else "red"
            console.print(f"[{color}]HTTP {response.status}[/{color}]")
            if isinstance(response.data, (dict, list)):
                console.print_json(json.dumps(response.data))
            elif response.data:
                console.print(response.data)
            if not response.ok:
                raise typer.Exit(1)
    
    run_async(do_get())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
