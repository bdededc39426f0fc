"""Build-time check that every locale catalog has the default locale's keys.

Usage::

    retaildesk-i18n-check
    retaildesk-i18n-check --messages-dir path/to/messages

Exits non-zero and prints one line per missing or extra key on mismatch.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from .catalog import CatalogError, validate_catalogs
from .locales import DEFAULT_LOCALE, LOCALES

DEFAULT_MESSAGES_DIR = Path(__file__).resolve().parent / "messages"


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--messages-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=DEFAULT_MESSAGES_DIR,
    show_default=True,
    help="Directory holding <locale>.json message files.",
)
@click.option(
    "--locale",
    "locales",
    multiple=True,
    help="Locale to check (repeatable). Defaults to every supported locale.",
)
@click.option("--base-locale", default=DEFAULT_LOCALE, show_default=True, help="Locale whose keys are authoritative.")
def cli(messages_dir: Path, locales: tuple[str, ...], base_locale: str) -> None:
    checked = tuple(locales) or LOCALES
    if base_locale not in checked:
        checked = (base_locale, *checked)
    try:
        errors = validate_catalogs(messages_dir, checked, base_locale)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc
    if errors:
        for message in errors:
            click.echo(message, err=True)
        sys.exit(1)
    click.echo("All locale message files are in sync")


if __name__ == "__main__":  # pragma: no cover
    cli()
