"""Command-line interface for the Bookshare API client."""

import json
import logging
import sys

import click

from .config import get_settings
from .constants import AuthType, GrantType
from .errors import ApiError, ParameterError
from .models import ApiRecord
from .service import BookshareService, api_methods

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logging(level: str):
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def _require_valid_config(service: BookshareService):
    """Exit if required settings are missing."""
    missing = service.check()
    if missing:
        logger.error("Edit data/config.yaml or set the BOOKSHARE_* environment variables")
        sys.exit(1)


def parse_assignments(assignments: tuple[str, ...]) -> dict:
    """
    Turn ("key=value", ...) into a dict; a key given more than once
    collects its values into a list.
    """
    params = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}")
        if key in params:
            previous = params[key]
            params[key] = [*previous, value] if isinstance(previous, list) else [previous, value]
        else:
            params[key] = value
    return params


def _echo_result(result):
    if isinstance(result, ApiRecord):
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
        if result.error is not None:
            click.echo(f"Error: {result.error}", err=True)
    else:
        click.echo(json.dumps(result, indent=2, default=str))


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default=None,
    help="Logging level (default: from config)",
)
@click.pass_context
def main(ctx: click.Context, log_level: str):
    """Bookshare API client."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)
    ctx.obj = settings


@main.command()
@click.option("--all", "show_all", is_flag=True, help="Include derived (non-API) methods")
@click.option("--topic", default=None, help="Only methods of this topic (e.g. title)")
def endpoints(show_all: bool, topic: str):
    """List the available API methods."""
    for name, spec in sorted(api_methods(synthetic=show_all).items()):
        if topic and spec.topic != topic:
            continue
        required = ", ".join(spec.required) or "-"
        click.echo(f"{name:32} {spec.endpoint():60} required: {required}")


@main.command()
@click.argument("method")
@click.argument("params", nargs=-1)
@click.option("--user", default=None, help="User on whose behalf the request is made")
@click.option("--token", "access_token", default=None, help="OAuth access token to use")
@click.pass_obj
def call(settings, method: str, params: tuple[str, ...], user: str, access_token: str):
    """Invoke API METHOD with key=value PARAMS."""
    service = BookshareService(settings.service, user=user)
    _require_valid_config(service)
    if access_token:
        service.session.token.replace(access_token)
    try:
        result = service.call(method, **parse_assignments(params))
    except (ParameterError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    except ApiError as e:
        logger.error(f"{service.latest_endpoint()}: {e}")
        sys.exit(1)
    _echo_result(result)
    if service.exception is not None:
        sys.exit(1)


@main.command()
@click.option(
    "--grant",
    type=click.Choice([g.value for g in GrantType]),
    default=None,
    help="OAuth grant type (default: from config)",
)
@click.option(
    "--auth",
    "auth_type",
    type=click.Choice([a.value for a in AuthType]),
    default=None,
    help="Authorization response type (default: from config)",
)
@click.option("--test-user", default=None, help="Use the pre-generated token of this test user")
@click.pass_obj
def token(settings, grant: str, auth_type: str, test_user: str):
    """Obtain an OAuth access token."""
    service = BookshareService(settings.service)
    _require_valid_config(service)

    if test_user:
        result = service.oauth.authorize_test_user(test_user)
        if result is None:
            click.echo(f"No pre-generated token for {test_user} (or production mode)", err=True)
            sys.exit(1)
    else:
        result = service.oauth.generate_token(auth_type, grant)

    if result is None:
        click.echo("No token received", err=True)
        sys.exit(1)
    _echo_result(result)
    if not service.oauth.authorized:
        sys.exit(1)


@main.command()
@click.pass_obj
def check(settings):
    """Verify that the required settings are present."""
    missing = settings.service.check()
    if missing:
        click.echo(f"Missing settings: {', '.join(missing)}", err=True)
        sys.exit(1)
    click.echo(f"Configuration OK ({settings.service.base_url})")


if __name__ == "__main__":
    main()
