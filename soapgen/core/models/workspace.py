"""
Workspace models — the records a LoopBack project keeps on disk.

Datasources live in ``server/datasources.json``, model configs in
``<facet>/model-config.json`` and model definitions in
``<facet>/models/<file>.json``.  Keys this tool does not manage are
carried in ``extra`` so an update never drops a user's relations,
ACLs or connector settings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

SOAP_CONNECTORS = ("soap", "loopback-connector-soap")


def unique_id(facet_name: str, name: str) -> str:
    """Deterministic workspace id for a model definition or config."""
    return f"{facet_name}.{name}"


class DataSource(BaseModel):
    """A datasource declared in ``server/datasources.json``."""

    name: str
    connector: str = ""
    url: str | None = None
    wsdl: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_soap(self) -> bool:
        return self.connector in SOAP_CONNECTORS

    @property
    def wsdl_location(self) -> str | None:
        """WSDL URL or path; the SOAP connector defaults to ``<url>?wsdl``."""
        if self.wsdl:
            return self.wsdl
        if self.url:
            return f"{self.url}?wsdl"
        return None

    @classmethod
    def from_entry(cls, key: str, data: dict[str, Any]) -> DataSource:
        data = dict(data)
        name = data.pop("name", None) or key
        connector = data.pop("connector", "") or ""
        url = data.pop("url", None)
        wsdl = data.pop("wsdl", None)
        return cls(name=name, connector=connector, url=url, wsdl=wsdl, extra=data)


class ModelProperty(BaseModel):
    """A single property of a model definition.

    ``descriptor`` is the JSON value written under the property name,
    e.g. ``{"type": "string", "required": true}``.
    """

    name: str
    facet_name: str = "common"
    descriptor: dict[str, Any] = Field(default_factory=dict)


class ModelDefinition(BaseModel):
    """A model definition file (``<facet>/models/<file>.json``)."""

    name: str
    facet_name: str = "common"
    plural: str | None = None
    base: str = "Model"
    http: dict[str, Any] = Field(default_factory=dict)
    id_injection: bool = False
    force_id: bool = False
    exclude_base_properties: list[str] = Field(default_factory=list)
    properties: dict[str, ModelProperty] = Field(default_factory=dict)
    script_path: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def id(self) -> str:
        return unique_id(self.facet_name, self.name)

    def to_file_dict(self) -> dict[str, Any]:
        """Serialize in the key order LoopBack writes model files."""
        data: dict[str, Any] = {"name": self.name}
        if self.plural:
            data["plural"] = self.plural
        data["base"] = self.base
        data["idInjection"] = self.id_injection
        data["forceId"] = self.force_id
        if self.exclude_base_properties:
            data["excludeBaseProperties"] = list(self.exclude_base_properties)
        if self.http:
            data["http"] = dict(self.http)
        data["properties"] = {
            name: dict(prop.descriptor) for name, prop in self.properties.items()
        }

        extra = dict(self.extra)
        for key, default in (
            ("validations", []),
            ("relations", {}),
            ("acls", []),
            ("methods", {}),
        ):
            data[key] = extra.pop(key, default)
        data.update(extra)
        return data

    @classmethod
    def from_file_dict(cls, data: dict[str, Any], facet_name: str) -> ModelDefinition:
        data = dict(data)
        name = data.pop("name")
        raw_props = data.pop("properties", None) or {}
        if not isinstance(raw_props, dict):
            raise ValueError(f"'properties' must be an object, got {type(raw_props).__name__}")
        properties = {
            prop_name: ModelProperty(
                name=prop_name,
                facet_name=facet_name,
                descriptor=desc if isinstance(desc, dict) else {"type": desc},
            )
            for prop_name, desc in raw_props.items()
        }
        return cls(
            name=name,
            facet_name=facet_name,
            plural=data.pop("plural", None),
            base=data.pop("base", "Model") or "Model",
            http=data.pop("http", None) or {},
            id_injection=data.pop("idInjection", False),
            force_id=data.pop("forceId", False),
            exclude_base_properties=data.pop("excludeBaseProperties", None) or [],
            properties=properties,
            extra=data,
        )


class ModelConfig(BaseModel):
    """An entry in ``<facet>/model-config.json``."""

    name: str
    facet_name: str = "server"
    data_source: str | None = None
    public: bool = True
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def id(self) -> str:
        return unique_id(self.facet_name, self.name)

    def to_file_entry(self) -> dict[str, Any]:
        entry: dict[str, Any] = {"dataSource": self.data_source, "public": self.public}
        entry.update(self.extra)
        return entry

    @classmethod
    def from_file_entry(cls, name: str, entry: dict[str, Any], facet_name: str) -> ModelConfig:
        entry = dict(entry)
        return cls(
            name=name,
            facet_name=facet_name,
            data_source=entry.pop("dataSource", None),
            public=entry.pop("public", True),
            extra=entry,
        )
