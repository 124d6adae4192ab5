"""
Workspace store — the LoopBack project files the generator reads and writes.

Layout (relative to the project root):

    server/datasources.json        datasources (read-only here)
    <facet>/model-config.json      model configs, keyed by model name
    <facet>/models/<file>.json     model definitions
    <facet>/models/<file>.js       model scripts (remote methods)

Mutations happen in memory; ``save()`` flushes every touched file.
Writes are atomic (write to temp file, then rename) so a crash never
leaves a half-written JSON file behind.
"""

from __future__ import annotations

import json
import logging
import re
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from soapgen.core.models.workspace import (
    DataSource,
    ModelConfig,
    ModelDefinition,
    ModelProperty,
    unique_id,
)

logger = logging.getLogger(__name__)

FACETS = ("server", "common")
DATASOURCES_FILE = "server/datasources.json"
MODEL_CONFIG_FILE = "model-config.json"
MODELS_DIR = "models"


class WorkspaceError(Exception):
    """Raised when project files cannot be read or written."""


def get_unique_id(facet_name: str, name: str) -> str:
    return unique_id(facet_name, name)


def model_file_name(name: str) -> str:
    """Model name → file stem (``soap_WeatherSoap`` → ``soap-weather-soap``)."""
    stem = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", name)
    stem = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", stem)
    stem = re.sub(r"[\s_.]+", "-", stem)
    return stem.strip("-").lower()


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise WorkspaceError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise WorkspaceError(f"Cannot read {path}: {e}") from e


def _write_json(path: Path, data: Any) -> None:
    """Atomic JSON write: temp file in the same directory, then rename."""
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".soapgen_", suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        raise WorkspaceError(f"Failed to write {path}: {e}") from e
    logger.debug("Wrote %s", path)


class Workspace:
    """In-memory view of a LoopBack project's models and datasources."""

    def __init__(self, root: Path):
        self.root = root
        self.datasources: list[DataSource] = []
        self._definitions: dict[str, ModelDefinition] = {}
        self._configs: dict[str, ModelConfig] = {}
        # Files existing definitions were loaded from, by id
        self._paths: dict[str, Path] = {}
        self._config_meta: dict[str, dict[str, Any]] = {}
        self._dirty_definitions: set[str] = set()
        self._dirty_facets: set[str] = set()

    # ── Loading ─────────────────────────────────────────────────

    @classmethod
    def load(cls, root: Path) -> Workspace:
        """Read datasources, model configs and model definitions.

        Raises:
            WorkspaceError: If a project file exists but cannot be parsed.
        """
        ws = cls(root)
        ws._load_datasources()
        for facet in FACETS:
            ws._load_model_configs(facet)
            ws._load_model_definitions(facet)
        logger.info(
            "Loaded workspace %s: %d datasources, %d models",
            root, len(ws.datasources), len(ws._definitions),
        )
        return ws

    def _load_datasources(self) -> None:
        path = self.root / DATASOURCES_FILE
        if not path.is_file():
            logger.debug("No datasources file at %s", path)
            return
        data = _read_json(path)
        if not isinstance(data, dict):
            raise WorkspaceError(f"Expected an object in {path}")
        try:
            self.datasources = [
                DataSource.from_entry(key, entry)
                for key, entry in data.items()
                if isinstance(entry, dict)
            ]
        except ValidationError as e:
            raise WorkspaceError(f"Invalid datasource in {path}: {e}") from e

    def _load_model_configs(self, facet: str) -> None:
        path = self.root / facet / MODEL_CONFIG_FILE
        if not path.is_file():
            return
        data = _read_json(path)
        if not isinstance(data, dict):
            raise WorkspaceError(f"Expected an object in {path}")
        for name, entry in data.items():
            if name.startswith("_"):
                self._config_meta.setdefault(facet, {})[name] = entry
                continue
            if not isinstance(entry, dict):
                continue
            try:
                config = ModelConfig.from_file_entry(name, entry, facet)
            except ValidationError as e:
                raise WorkspaceError(f"Invalid model config {name} in {path}: {e}") from e
            self._configs[config.id] = config

    def _load_model_definitions(self, facet: str) -> None:
        models_dir = self.root / facet / MODELS_DIR
        if not models_dir.is_dir():
            return
        for path in sorted(models_dir.glob("*.json")):
            data = _read_json(path)
            if not isinstance(data, dict) or "name" not in data:
                logger.warning("Skipping %s: not a model definition", path)
                continue
            try:
                definition = ModelDefinition.from_file_dict(data, facet)
            except ValueError as e:
                raise WorkspaceError(f"Invalid model definition in {path}: {e}") from e
            definition.script_path = str(path.with_suffix(".js"))
            self._definitions[definition.id] = definition
            self._paths[definition.id] = path

    # ── Queries ─────────────────────────────────────────────────

    def model_names(self) -> list[str]:
        """Names of every model definition, across facets."""
        return sorted({d.name for d in self._definitions.values()})

    def soap_datasources(self) -> list[DataSource]:
        return [ds for ds in self.datasources if ds.is_soap]

    def get_model_definition(self, model_id: str) -> ModelDefinition | None:
        return self._definitions.get(model_id)

    def get_model_config(self, config_id: str) -> ModelConfig | None:
        return self._configs.get(config_id)

    def definition_path(self, definition: ModelDefinition) -> Path:
        """The file a definition was loaded from, else its kebab-case file."""
        loaded = self._paths.get(definition.id)
        if loaded is not None:
            return loaded
        return self.root / definition.facet_name / MODELS_DIR / f"{model_file_name(definition.name)}.json"

    def script_path(self, definition: ModelDefinition) -> Path:
        return self.definition_path(definition).with_suffix(".js")

    # ── Mutations ───────────────────────────────────────────────

    def upsert_model_definition(self, definition: ModelDefinition) -> tuple[ModelDefinition, bool]:
        """Create or update a model definition by id.

        Fields set on ``definition`` win; keys only present on the stored
        record (relations, ACLs...) are kept.  Properties are left alone:
        use ``replace_properties`` for those.

        Returns:
            (stored definition, True if it was created).
        """
        existing = self._definitions.get(definition.id)
        created = existing is None
        stored = definition.model_copy(deep=True)
        if existing is not None:
            extra = dict(existing.extra)
            extra.update(definition.extra)
            stored.extra = extra
            stored.properties = existing.properties
        else:
            stored.properties = {}
        stored.script_path = str(self.script_path(stored))
        self._definitions[stored.id] = stored
        self._dirty_definitions.add(stored.id)
        return stored, created

    def destroy_all_properties(self, model_id: str) -> None:
        definition = self._require_definition(model_id)
        definition.properties = {}
        self._dirty_definitions.add(model_id)

    def create_property(self, model_id: str, prop: ModelProperty) -> ModelProperty:
        definition = self._require_definition(model_id)
        if prop.name in definition.properties:
            raise WorkspaceError(f"Property {prop.name} already exists on {definition.name}")
        definition.properties[prop.name] = prop
        self._dirty_definitions.add(model_id)
        return prop

    def replace_properties(self, model_id: str, properties: dict[str, dict[str, Any]]) -> None:
        """Destroy every property of a model, then create the new set one by one."""
        definition = self._require_definition(model_id)
        self.destroy_all_properties(model_id)
        for prop_name, descriptor in properties.items():
            self.create_property(
                model_id,
                ModelProperty(
                    name=prop_name,
                    facet_name=definition.facet_name,
                    descriptor=dict(descriptor),
                ),
            )

    def upsert_model_config(self, config: ModelConfig) -> tuple[ModelConfig, bool]:
        """Create or update a model config by id.

        Returns:
            (stored config, True if it was created).
        """
        existing = self._configs.get(config.id)
        created = existing is None
        stored = config.model_copy(deep=True)
        if existing is not None:
            extra = dict(existing.extra)
            extra.update(config.extra)
            stored.extra = extra
        self._configs[stored.id] = stored
        self._dirty_facets.add(stored.facet_name)
        return stored, created

    def _require_definition(self, model_id: str) -> ModelDefinition:
        definition = self._definitions.get(model_id)
        if definition is None:
            raise WorkspaceError(f"Unknown model definition: {model_id}")
        return definition

    # ── Saving ──────────────────────────────────────────────────

    def save(self) -> list[Path]:
        """Flush touched model definitions and model-config files.

        Returns:
            Paths written.

        Raises:
            WorkspaceError: If any file cannot be written.
        """
        written: list[Path] = []

        for model_id in sorted(self._dirty_definitions):
            definition = self._definitions[model_id]
            path = self.definition_path(definition)
            _write_json(path, definition.to_file_dict())
            written.append(path)

        for facet in sorted(self._dirty_facets):
            path = self.root / facet / MODEL_CONFIG_FILE
            data: dict[str, Any] = dict(self._config_meta.get(facet, {}))
            for config in self._configs.values():
                if config.facet_name == facet:
                    data[config.name] = config.to_file_entry()
            _write_json(path, data)
            written.append(path)

        self._dirty_definitions.clear()
        self._dirty_facets.clear()
        logger.info("Workspace saved (%d files)", len(written))
        return written
