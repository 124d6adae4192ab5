"""
Domain models — Pydantic types for the SOAP generator.

All models are re-exported here for convenient access:

    from soapgen.core.models import DataSource, ModelDefinition, GeneratedApi
"""

from soapgen.core.models.generated import GeneratedScript
from soapgen.core.models.soap import (
    GeneratedApi,
    SoapService,
    SoapTypeModel,
    container_model_name,
    sanitize_binding_name,
)
from soapgen.core.models.workspace import (
    DataSource,
    ModelConfig,
    ModelDefinition,
    ModelProperty,
    unique_id,
)

__all__ = [
    # workspace.py
    "DataSource",
    # soap.py
    "GeneratedApi",
    # generated.py
    "GeneratedScript",
    "ModelConfig",
    "ModelDefinition",
    "ModelProperty",
    "SoapService",
    "SoapTypeModel",
    "container_model_name",
    "sanitize_binding_name",
    "unique_id",
]
