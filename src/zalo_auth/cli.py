import logging

import typer
import uvicorn

from zalo_auth.auth_strategies.oauth.factory import get_oauth_strategy
from zalo_auth.core.config import settings
from zalo_auth.core.exceptions import AuthenticationError

app = typer.Typer(help="ZaloAuth CLI")

logger = logging.getLogger(__name__)


@app.command()
def run(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """
    Run the FastAPI server
    """
    uvicorn.run(
        "zalo_auth.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def check(provider: str = "zalo") -> None:
    """
    Validate the OAuth configuration for a provider and print its endpoints
    """
    try:
        strategy = get_oauth_strategy(provider, verify=lambda *_: None)
    except AuthenticationError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e

    options = strategy.options
    typer.echo(f"provider:          {strategy.name}")
    typer.echo(f"authorization_url: {options.authorization_url}")
    typer.echo(f"token_url:         {options.token_url}")
    typer.echo(f"profile_url:       {options.profile_url}")
    typer.echo(f"callback_url:      {options.callback_url or settings.ZALO_CALLBACK_URL}")
    if options.profile_fields:
        typer.echo(f"fields:            {strategy.convert_profile_fields(options.profile_fields)}")
    if options.enable_proof:
        typer.echo("enable_proof:      computed only, not sent with profile requests")


if __name__ == "__main__":
    app()
