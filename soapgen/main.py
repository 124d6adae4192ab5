"""
SOAP generator — CLI entrypoint.

Usage:
    soapgen --help
    soapgen soap --config-file soap.json
    soapgen discover http://example.com/weather?wsdl
"""

from __future__ import annotations

import click

from soapgen.core.observability.logging_config import LogSettings, setup_logging

from soapgen import __version__


@click.group()
@click.version_option(version=__version__, prog_name="soapgen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--project",
    "project_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="LoopBack project directory (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    project_dir: str | None,
) -> None:
    """SOAP generator — scaffold LoopBack models from a WSDL."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    from soapgen.core.context import resolve_project_root, set_project_root

    root = resolve_project_root(project_dir)
    ctx.obj["project_root"] = root
    set_project_root(root)

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        LogSettings.from_env(debug=debug, verbose=verbose, quiet=quiet),
        quiet_third_party=not debug,
    )


# ── Register commands from soapgen/ui/cli/ ──────────────────────

from soapgen.ui.cli.soap import discover, soap

cli.add_command(soap)
cli.add_command(discover)


if __name__ == "__main__":
    cli()
