"""
CLI commands for SOAP discovery and model generation.

Thin wrappers over ``soapgen.core.use_cases.soap_generate`` and
``soapgen.core.services.wsdl_loader``.
"""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path

import click

from soapgen.core.services.soap_selection import Validator

ALL = "all"


class ClickPrompter:
    """Numbered-list prompts on the terminal."""

    def select_one(self, message: str, choices: list[str]) -> str:
        click.secho(f"\n? {message}", fg="cyan", bold=True)
        for i, choice in enumerate(choices, start=1):
            click.echo(f"   {i}) {choice}")
        index = click.prompt(
            "   Choice",
            type=click.IntRange(1, len(choices)),
            default=1,
        )
        return choices[index - 1]

    def select_many(self, message: str, choices: list[str], validate: Validator) -> list[str]:
        click.secho(f"\n? {message}", fg="cyan", bold=True)
        for i, choice in enumerate(choices, start=1):
            click.echo(f"   {i}) {choice}")

        while True:
            raw = click.prompt("   Choices (numbers, or 'all')", default=ALL)
            selected = _parse_selection(raw, choices)
            if selected is None:
                click.secho(f"   Enter numbers between 1 and {len(choices)}, or 'all'.", fg="yellow")
                continue
            problem = validate(selected)
            if problem:
                click.secho(f"   {problem}", fg="yellow")
                continue
            return selected


def _parse_selection(raw: str, choices: list[str]) -> list[str] | None:
    """'1 3', '1,3' or 'all' → chosen items in list order; None if invalid."""
    raw = raw.strip()
    if raw.lower() == ALL:
        return list(choices)

    picked: set[int] = set()
    for token in re.split(r"[\s,]+", raw):
        if not token:
            continue
        if not token.isdigit() or not 1 <= int(token) <= len(choices):
            return None
        picked.add(int(token) - 1)
    return [choice for i, choice in enumerate(choices) if i in picked]


# ── Commands ────────────────────────────────────────────────────


@click.command()
@click.argument("url", required=False)
@click.option(
    "--config-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Build based on config file.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def soap(ctx: click.Context, url: str | None, config_file: str | None, as_json: bool) -> None:
    """Generate models from a SOAP datasource's WSDL.

    URL is the WSDL URL or file path; when given it replaces the
    datasource's own WSDL location.

    Examples:

        soapgen soap

        soapgen soap --config-file soap.json
    """
    from soapgen.core.use_cases.soap_generate import run_soap_generate

    project_root: Path = ctx.obj["project_root"]
    if config_file and not as_json:
        click.secho(
            "Configuration file found. Config file will be used to supply init properties.",
            fg="green",
        )

    result = run_soap_generate(
        project_root=project_root,
        prompter=ClickPrompter(),
        config_file=Path(config_file) if config_file else None,
        url=url,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ Error: {result.error}", fg="red")
        sys.exit(1)

    quiet = ctx.obj.get("quiet", False)
    if not quiet:
        click.secho(f"\n🧼 SOAP — {result.service} / {result.binding}", fg="cyan", bold=True)
        click.echo(f"   Datasource: {result.datasource}")
        click.echo(f"   WSDL:       {result.wsdl}")
        click.echo(f"   Operations: {', '.join(result.operations)}")
        click.echo()

    report = result.report
    for name in report.definitions_created:
        click.secho(f"   ✓ Model definition created for {name}.", fg="green")
    for name in report.definitions_updated:
        click.secho(f"   ✓ Model definition updated for {name}.", fg="green")
    for name in report.configs_created:
        click.secho(f"   ✓ Model config created for {name}.", fg="green")
    for name in report.configs_updated:
        click.secho(f"   ✓ Model config updated for {name}.", fg="green")
    for path in result.files_written:
        click.secho(f"   📄 Generated {path}", fg="green")
    for path in result.files_saved:
        click.secho(f"   💾 Saved {path}", fg="green")

    click.echo()
    click.secho("✅ Models are successfully generated from WSDL.", fg="green", bold=True)


@click.command()
@click.argument("url")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def discover(url: str, as_json: bool) -> None:
    """List the services, bindings and operations of a WSDL."""
    from soapgen.core.services.wsdl_loader import WsdlError, WsdlLoader

    loader = WsdlLoader()
    try:
        loader.get_services(url)
        tree = loader.describe()
    except WsdlError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ Error: {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"wsdl": url, "services": tree}, indent=2))
        return

    click.secho(f"\n🔍 {url}", fg="cyan", bold=True)
    if not tree:
        click.secho("   No services found.", fg="yellow")
    for service in tree:
        click.secho(f"   • {service['name']}", bold=True)
        for binding in service["bindings"]:
            click.echo(f"     ↳ {binding['name']}")
            for operation in binding["operations"]:
                click.echo(f"         - {operation}")
    click.echo()
