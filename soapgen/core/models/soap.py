"""
SOAP discovery models — what the WSDL facade hands to the generator.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field

from soapgen.core.models.workspace import ModelDefinition

# Characters that may not appear in a generated file or model name
_SPECIAL_CHARS = re.compile(r"[-./`~!@#%^&*()+={}'\";:<>,?]")


def sanitize_binding_name(binding_name: str) -> str:
    """Replace characters that are not allowed in file names with ``_``."""
    return _SPECIAL_CHARS.sub("_", binding_name)


def container_model_name(binding_name: str) -> str:
    """Name of the model that exposes a binding's operations."""
    return f"soap_{sanitize_binding_name(binding_name)}"


class SoapService(BaseModel):
    """A ``wsdl:service`` and the bindings reachable through its ports."""

    name: str
    bindings: list[str] = Field(default_factory=list)


class SoapTypeModel(BaseModel):
    """A WSDL type the generated operations reference.

    ``type`` is ``"object"`` for complex types; named simple types keep
    their base type (``"string"``, ``"number"``...) and are not turned
    into model definitions.
    """

    name: str
    type: str = "object"
    plural: str | None = None
    base: str | None = None
    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)


class GeneratedApi(BaseModel):
    """Generated remote-method code for one binding.

    ``model_definition`` is attached once the container model has been
    built, and tells the writer where the code goes.
    """

    binding_name: str
    datasource_name: str
    operations: list[str] = Field(default_factory=list)
    models: dict[str, SoapTypeModel] = Field(default_factory=dict)
    code: str = ""
    model_definition: ModelDefinition | None = None
