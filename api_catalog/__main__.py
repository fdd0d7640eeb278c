"""
Main Entry Point for API Catalog

Example Usage:
    $ python -m api_catalog query all "send message"
    $ python -m api_catalog ingest sls/openapi.json --package aws-ses --stage STAGING \
        --serverless-output deploy.log
    $ python -m api_catalog remove aws-ses --stage STAGING
"""

import logging
import sys
from typing import Optional, Sequence

import click

from . import __version__
from .cli import cli
from .config import config

logger = logging.getLogger(__name__)


def main(args: Optional[Sequence[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments.
            Defaults to sys.argv[1:].

    Returns:
        Exit code.
    """
    logger.debug(f"API Catalog {__version__} in {config.environment} environment")
    try:
        cli(args=args, standalone_mode=False)
        return 0

    except click.exceptions.Exit as e:
        return e.exit_code

    except click.ClickException as e:
        e.show()
        return 1

    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1

    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
