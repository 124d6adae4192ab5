"""
Model materializer — turn generated APIs into workspace model records.

For every generated API:
    - one container model (``soap_<binding>``, facet ``server``) that
      carries the binding's operations as remote methods;
    - one model per referenced WSDL object type (facet ``common``).

Every model definition gets a model config in the ``server`` facet.
Both are written with a single upsert keyed by ``<facet>.<name>``, so
running the generator twice converges on the same records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from soapgen.core.models.soap import GeneratedApi, container_model_name, sanitize_binding_name
from soapgen.core.models.generated import GeneratedScript
from soapgen.core.models.workspace import ModelConfig, ModelDefinition, ModelProperty
from soapgen.core.persistence.workspace_store import Workspace, WorkspaceError

logger = logging.getLogger(__name__)

API_FACET = "server"
TYPE_FACET = "common"
CONFIG_FACET = "server"
DEFAULT_BASE = "Model"
# Generated models based on 'Model' must not get an implicit id
EXCLUDED_BASE_PROPERTIES = ["id"]


@dataclass
class MaterializeReport:
    """What materialize() did, in the order it did it."""

    definitions_created: list[str] = field(default_factory=list)
    definitions_updated: list[str] = field(default_factory=list)
    configs_created: list[str] = field(default_factory=list)
    configs_updated: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "definitions_created": list(self.definitions_created),
            "definitions_updated": list(self.definitions_updated),
            "configs_created": list(self.configs_created),
            "configs_updated": list(self.configs_updated),
        }


def build_models(
    apis: list[GeneratedApi],
    binding_name: str,
) -> tuple[list[ModelDefinition], list[ModelConfig]]:
    """Build model definitions and configs for generated APIs.

    The container definition is attached to its API as
    ``api.model_definition``.  WSDL types that are not objects (arrays,
    simple types) are skipped.
    """
    definitions: list[ModelDefinition] = []
    configs: list[ModelConfig] = []

    base_path = sanitize_binding_name(binding_name)
    name = container_model_name(binding_name)
    for api in apis:
        definition = ModelDefinition(
            name=name,
            facet_name=API_FACET,
            base=DEFAULT_BASE,
            http={"path": base_path},
            id_injection=False,
            force_id=False,
            exclude_base_properties=list(EXCLUDED_BASE_PROPERTIES),
        )
        api.model_definition = definition
        definitions.append(definition)
        configs.append(_config_for(name))

    for api in apis:
        for model in api.models.values():
            if model.type and model.type != "object":
                continue
            definitions.append(
                ModelDefinition(
                    name=model.name,
                    facet_name=TYPE_FACET,
                    plural=model.plural,
                    base=model.base or DEFAULT_BASE,
                    id_injection=False,
                    force_id=False,
                    exclude_base_properties=list(EXCLUDED_BASE_PROPERTIES),
                    properties={
                        prop_name: ModelProperty(
                            name=prop_name,
                            facet_name=TYPE_FACET,
                            descriptor=dict(descriptor),
                        )
                        for prop_name, descriptor in model.properties.items()
                    },
                )
            )
            configs.append(_config_for(model.name))

    return definitions, configs


def _config_for(name: str) -> ModelConfig:
    return ModelConfig(name=name, facet_name=CONFIG_FACET, data_source=None, public=True)


def materialize(
    workspace: Workspace,
    definitions: list[ModelDefinition],
    configs: list[ModelConfig],
    existing_names: list[str],
) -> MaterializeReport:
    """Upsert definitions, then configs, one at a time.

    ``existing_names`` is the snapshot of model names taken when the
    workspace was loaded; it only decides what gets reported as created
    vs updated.  A failure stops at the failing record; earlier upserts
    stay applied.

    Raises:
        WorkspaceError: If the workspace rejects a record.
    """
    report = MaterializeReport()
    existing = set(existing_names)

    for definition in definitions:
        if definition.name in existing:
            logger.info("Updating model definition for %s...", definition.name)
        else:
            logger.info("Creating model definition for %s...", definition.name)

        stored, _created = workspace.upsert_model_definition(definition)
        workspace.replace_properties(
            stored.id,
            {name: prop.descriptor for name, prop in definition.properties.items()},
        )
        definition.script_path = stored.script_path
        logger.info("Model definition created/updated for %s.", definition.name)

        if definition.name in existing:
            report.definitions_updated.append(definition.name)
        else:
            report.definitions_created.append(definition.name)

    for config in configs:
        if config.name in existing:
            logger.info("Updating model config for %s...", config.name)
        else:
            logger.info("Creating model config for %s...", config.name)

        workspace.upsert_model_config(config)

        if config.name in existing:
            report.configs_updated.append(config.name)
        else:
            report.configs_created.append(config.name)

    return report


def remote_method_files(apis: list[GeneratedApi]) -> list[GeneratedScript]:
    """One script file per API whose container model has a script path."""
    files = []
    for api in apis:
        definition = api.model_definition
        if definition is None or not definition.script_path:
            continue
        files.append(
            GeneratedScript(
                path=definition.script_path,
                content=api.code,
                model_name=definition.name,
                binding_name=api.binding_name,
            )
        )
    return files


def write_remote_methods(apis: list[GeneratedApi]) -> list[Path]:
    """Write each API's code to its container model's script path, in order.

    Raises:
        WorkspaceError: On the first file that cannot be written.
    """
    written: list[Path] = []
    for script in remote_method_files(apis):
        path = script.file
        logger.info("Generating %s for %s", path, script.model_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(script.content, encoding="utf-8")
        except OSError as e:
            raise WorkspaceError(f"Cannot write {path}: {e}") from e
        written.append(path)
    return written
