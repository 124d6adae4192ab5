"""
SOAP generate use case — discover a WSDL and scaffold models from it.

Ties together the config file, the project workspace, the WSDL facade,
the selection prompts and the model materializer.  The run is a fixed
sequence of steps over one GenerationContext; the first step that
raises stops the run and the error lands in the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from soapgen.core.config.loader import ConfigError, SoapOptions, load_generator_config
from soapgen.core.models.soap import GeneratedApi, SoapService
from soapgen.core.models.workspace import DataSource, ModelConfig, ModelDefinition
from soapgen.core.persistence.workspace_store import Workspace, WorkspaceError
from soapgen.core.services.model_materializer import (
    MaterializeReport,
    build_models,
    materialize,
    write_remote_methods,
)
from soapgen.core.services.soap_selection import (
    Prompter,
    resolve_binding,
    resolve_datasource,
    resolve_operations,
    resolve_service,
)
from soapgen.core.services.wsdl_loader import WsdlError, WsdlLoader

logger = logging.getLogger(__name__)

NO_SOAP_DATASOURCE = (
    "Found no SOAP WebServices data sources for SOAP discovery. "
    "Create SOAP Web Service datasource first and try this command again."
)


class GenerationError(Exception):
    """Raised when the project cannot be used for SOAP generation."""


@dataclass
class GenerationContext:
    """Everything one run knows, filled in step by step."""

    project_root: Path
    prompter: Prompter
    loader: WsdlLoader
    config_file: Path | None = None
    url_override: str | None = None

    options: SoapOptions = field(default_factory=SoapOptions)
    workspace: Workspace | None = None
    existing_models: list[str] = field(default_factory=list)
    soap_datasources: list[DataSource] = field(default_factory=list)
    datasource: DataSource | None = None
    wsdl_url: str | None = None
    services: list[SoapService] = field(default_factory=list)
    service_name: str | None = None
    binding_names: list[str] = field(default_factory=list)
    binding_name: str | None = None
    operation_candidates: list[str] = field(default_factory=list)
    operations: list[str] = field(default_factory=list)
    apis: list[GeneratedApi] = field(default_factory=list)
    definitions: list[ModelDefinition] = field(default_factory=list)
    configs: list[ModelConfig] = field(default_factory=list)
    report: MaterializeReport = field(default_factory=MaterializeReport)
    files_written: list[Path] = field(default_factory=list)
    workspace_files: list[Path] = field(default_factory=list)


@dataclass
class SoapGenerateResult:
    """Result of the soap generate use case."""

    project_root: Path | None = None
    datasource: str | None = None
    wsdl: str | None = None
    service: str | None = None
    binding: str | None = None
    operations: list[str] = field(default_factory=list)
    report: MaterializeReport = field(default_factory=MaterializeReport)
    files_written: list[str] = field(default_factory=list)
    files_saved: list[str] = field(default_factory=list)
    saved: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {
            "project_root": str(self.project_root) if self.project_root else None,
            "datasource": self.datasource,
            "wsdl": self.wsdl,
            "service": self.service,
            "binding": self.binding,
            "operations": list(self.operations),
            "models": self.report.to_dict(),
            "files_written": list(self.files_written),
            "files_saved": list(self.files_saved),
            "saved": self.saved,
        }
        if self.error:
            result["error"] = self.error
        return result


# ── Steps ───────────────────────────────────────────────────────


def _load_config(ctx: GenerationContext) -> None:
    if ctx.config_file is None:
        return
    ctx.options = load_generator_config(ctx.config_file)
    if ctx.options.is_empty:
        logger.info("Config file %s answers no questions; every choice will be prompted", ctx.config_file)


def _load_workspace(ctx: GenerationContext) -> None:
    ctx.workspace = Workspace.load(ctx.project_root)
    ctx.existing_models = ctx.workspace.model_names()


def _check_for_datasource(ctx: GenerationContext) -> None:
    assert ctx.workspace is not None
    ctx.soap_datasources = ctx.workspace.soap_datasources()
    if not ctx.soap_datasources:
        raise GenerationError(NO_SOAP_DATASOURCE)


def _select_datasource(ctx: GenerationContext) -> None:
    ctx.datasource = resolve_datasource(ctx.soap_datasources, ctx.options.datasource, ctx.prompter)
    ctx.wsdl_url = ctx.url_override or ctx.datasource.wsdl_location
    if not ctx.wsdl_url:
        raise GenerationError(f"Datasource {ctx.datasource.name} has no WSDL or url configured.")
    logger.info("WSDL for datasource %s: %s", ctx.datasource.name, ctx.wsdl_url)


def _load_services(ctx: GenerationContext) -> None:
    assert ctx.wsdl_url is not None
    ctx.services = ctx.loader.get_services(ctx.wsdl_url)


def _select_service(ctx: GenerationContext) -> None:
    names = [s.name for s in ctx.services]
    ctx.service_name = resolve_service(names, ctx.options.service, ctx.prompter)
    ctx.binding_names = ctx.loader.get_bindings(ctx.service_name)


def _select_binding(ctx: GenerationContext) -> None:
    ctx.binding_name = resolve_binding(ctx.binding_names, ctx.options.binding, ctx.prompter)
    ctx.operation_candidates = ctx.loader.get_operations(ctx.binding_name)


def _select_operations(ctx: GenerationContext) -> None:
    ctx.operations = resolve_operations(ctx.operation_candidates, ctx.options.operations, ctx.prompter)


def _generate(ctx: GenerationContext) -> None:
    assert ctx.datasource is not None and ctx.binding_name is not None
    ctx.apis = ctx.loader.generate_api_code(
        ctx.datasource.name, ctx.operations, binding_name=ctx.binding_name
    )
    ctx.definitions, ctx.configs = build_models(ctx.apis, ctx.binding_name)


def _materialize(ctx: GenerationContext) -> None:
    assert ctx.workspace is not None
    ctx.report = materialize(ctx.workspace, ctx.definitions, ctx.configs, ctx.existing_models)


def _write_remote_methods(ctx: GenerationContext) -> None:
    ctx.files_written = write_remote_methods(ctx.apis)


def _save_workspace(ctx: GenerationContext) -> None:
    assert ctx.workspace is not None
    ctx.workspace_files = ctx.workspace.save()
    logger.info("Models are successfully generated from WSDL.")


STEPS: tuple[Callable[[GenerationContext], None], ...] = (
    _load_config,
    _load_workspace,
    _check_for_datasource,
    _select_datasource,
    _load_services,
    _select_service,
    _select_binding,
    _select_operations,
    _generate,
    _materialize,
    _write_remote_methods,
    _save_workspace,
)

_EXPECTED_ERRORS = (ConfigError, GenerationError, WsdlError, WorkspaceError)


def run_soap_generate(
    project_root: Path,
    prompter: Prompter,
    config_file: Path | None = None,
    url: str | None = None,
    loader: WsdlLoader | None = None,
) -> SoapGenerateResult:
    """Run the SOAP generator against a LoopBack project.

    Args:
        project_root: Project directory (contains ``server/``).
        prompter: Asks the questions the config file does not answer.
        config_file: Optional generator config file.
        url: Optional WSDL location overriding the datasource's.
        loader: WSDL facade (default: zeep-backed WsdlLoader).

    Returns:
        SoapGenerateResult; ``error`` is set if a step failed.
    """
    ctx = GenerationContext(
        project_root=project_root,
        prompter=prompter,
        loader=loader or WsdlLoader(),
        config_file=config_file,
        url_override=url,
    )

    error: str | None = None
    for step in STEPS:
        logger.debug("Step %s", step.__name__.lstrip("_"))
        try:
            step(ctx)
        except _EXPECTED_ERRORS as e:
            logger.debug("Step %s failed: %s", step.__name__.lstrip("_"), e)
            error = str(e)
            break

    return SoapGenerateResult(
        project_root=project_root,
        datasource=ctx.datasource.name if ctx.datasource else None,
        wsdl=ctx.wsdl_url,
        service=ctx.service_name,
        binding=ctx.binding_name,
        operations=list(ctx.operations),
        report=ctx.report,
        files_written=[str(p) for p in ctx.files_written],
        files_saved=[str(p) for p in ctx.workspace_files],
        saved=error is None,
        error=error,
    )
