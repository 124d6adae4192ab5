"""
WSDL facade — service, binding and operation discovery on top of zeep.

The loader is stateful in the same way the prompts are: services are
loaded once, a service selection narrows the bindings, a binding
selection narrows the operations, and code is generated for the
binding last asked about.

    loader = WsdlLoader()
    services = loader.get_services("http://example.com/weather?wsdl")
    bindings = loader.get_bindings("Weather")
    operations = loader.get_operations("WeatherSoap")
    apis = loader.generate_api_code("weatherDS", operations)
"""

from __future__ import annotations

import logging
import os
from typing import Any

from zeep import Client
from zeep.transports import Transport
from zeep.xsd.types import builtins as xsd_builtins
from zeep.xsd.types.complex import ComplexType
from zeep.xsd.types.simple import AnySimpleType

from soapgen.core.models.soap import GeneratedApi, SoapService, SoapTypeModel, container_model_name
from soapgen.core.services.generators.remote_methods import OperationSignature, render_remote_methods

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class WsdlError(Exception):
    """Raised when a WSDL cannot be loaded or does not contain a requested item."""


def _wsdl_timeout() -> int:
    try:
        return int(os.environ.get("SOAPGEN_WSDL_TIMEOUT", DEFAULT_TIMEOUT))
    except ValueError:
        return DEFAULT_TIMEOUT


# ── XSD → model property types ──────────────────────────────────

# Checked in order; subclasses (Integer < Decimal, Token < String) land
# on their base entry.
_SIMPLE_TYPE_MAP: tuple[tuple[type, str], ...] = (
    (xsd_builtins.Boolean, "boolean"),
    (xsd_builtins.Decimal, "number"),
    (xsd_builtins.Float, "number"),
    (xsd_builtins.Double, "number"),
    (xsd_builtins.DateTime, "date"),
    (xsd_builtins.Date, "date"),
    (xsd_builtins.Time, "date"),
    (xsd_builtins.String, "string"),
)

_XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema"


def simple_type_name(xsd_type: Any) -> str:
    """Map a zeep simple type to a model property type."""
    for cls, name in _SIMPLE_TYPE_MAP:
        if isinstance(xsd_type, cls):
            return name
    if isinstance(xsd_type, AnySimpleType):
        return "string"
    return "any"


def _is_repeating(element: Any) -> bool:
    max_occurs = getattr(element, "max_occurs", 1)
    return max_occurs == "unbounded" or (isinstance(max_occurs, int) and max_occurs > 1)


def _is_user_type(xsd_type: Any) -> bool:
    """True for named types declared in the WSDL rather than XML Schema itself."""
    qname = getattr(xsd_type, "qname", None)
    return qname is not None and qname.namespace != _XSD_NAMESPACE


class _TypeCollector:
    """Walks element types and records one SoapTypeModel per referenced type."""

    def __init__(self) -> None:
        self.models: dict[str, SoapTypeModel] = {}

    def visit_element(self, element: Any) -> str:
        """Register the element's type; return the model/type name to reference."""
        xsd_type = element.type
        if isinstance(xsd_type, ComplexType):
            name = getattr(xsd_type, "name", None) or element.name
            self._visit_complex(name, xsd_type)
            return name

        type_name = simple_type_name(xsd_type)
        if _is_user_type(xsd_type) and xsd_type.name not in self.models:
            self.models[xsd_type.name] = SoapTypeModel(name=xsd_type.name, type=type_name)
        return type_name

    def _visit_complex(self, name: str, xsd_type: Any) -> None:
        if name in self.models:
            return
        model = SoapTypeModel(name=name, type="object")
        # Register before recursing so cyclic types terminate
        self.models[name] = model

        for child_name, child in xsd_type.elements:
            if getattr(child, "type", None) is None:
                continue  # xsd:any
            ref = self.visit_element(child)
            descriptor: dict[str, Any] = {"type": [ref] if _is_repeating(child) else ref}
            if getattr(child, "min_occurs", 0) and not getattr(child, "nillable", False):
                descriptor["required"] = True
            model.properties[child_name] = descriptor


class WsdlLoader:
    """Load a WSDL with zeep and answer discovery questions about it."""

    def __init__(self, client_factory=None, timeout: int | None = None):
        self._client_factory = client_factory or self._default_client
        self._timeout = timeout if timeout is not None else _wsdl_timeout()
        self._client: Client | None = None
        self._url: str | None = None
        self._binding_name: str | None = None

    def _default_client(self, url: str) -> Client:
        return Client(url, transport=Transport(timeout=self._timeout))

    # ── Discovery ───────────────────────────────────────────────

    def get_services(self, url: str) -> list[SoapService]:
        """Fetch and parse the WSDL; return its services.

        Raises:
            WsdlError: On any fetch or parse failure.
        """
        logger.info("Loading WSDL from %s", url)
        try:
            self._client = self._client_factory(url)
        except Exception as e:
            raise WsdlError(f"Cannot load WSDL {url}: {e}") from e
        self._url = url
        self._binding_name = None

        services = [
            SoapService(name=name, bindings=self._service_bindings(service))
            for name, service in self._document.services.items()
        ]
        logger.debug("WSDL %s: %d services", url, len(services))
        return services

    def get_bindings(self, service_name: str) -> list[str]:
        service = self._document.services.get(service_name)
        if service is None:
            raise WsdlError(f"Service {service_name} not found in {self._url}")
        return self._service_bindings(service)

    def get_operations(self, binding_name: str) -> list[str]:
        binding = self._find_binding(binding_name)
        self._binding_name = binding_name
        return sorted(binding.all().keys())

    def describe(self) -> list[dict[str, Any]]:
        """Full service → binding → operations tree of the loaded WSDL."""
        tree = []
        for name, service in self._document.services.items():
            bindings = [
                {
                    "name": binding_name,
                    "operations": sorted(self._find_binding(binding_name).all().keys()),
                }
                for binding_name in self._service_bindings(service)
            ]
            tree.append({"name": name, "bindings": bindings})
        return tree

    # ── Code generation ─────────────────────────────────────────

    def generate_api_code(
        self,
        datasource_name: str,
        operations: list[str],
        binding_name: str | None = None,
    ) -> list[GeneratedApi]:
        """Generate remote-method code and type models for selected operations.

        Args:
            datasource_name: Datasource the generated code talks through.
            operations: Operation names on the binding.
            binding_name: Defaults to the binding last passed to get_operations().
        """
        binding_name = binding_name or self._binding_name
        if binding_name is None:
            raise WsdlError("No binding selected")
        binding = self._find_binding(binding_name)
        available = binding.all()

        collector = _TypeCollector()
        signatures = []
        for op_name in operations:
            operation = available.get(op_name)
            if operation is None:
                raise WsdlError(f"Operation {op_name} not found in binding {binding_name}")
            signatures.append(
                OperationSignature(
                    name=op_name,
                    input_type=self._message_type(collector, operation.input),
                    output_type=self._message_type(collector, operation.output),
                )
            )

        code = render_remote_methods(
            model_name=container_model_name(binding_name),
            binding_name=binding_name,
            datasource_name=datasource_name,
            operations=signatures,
            wsdl=self._url or "",
        )
        api = GeneratedApi(
            binding_name=binding_name,
            datasource_name=datasource_name,
            operations=list(operations),
            models=collector.models,
            code=code,
        )
        return [api]

    # ── Internals ───────────────────────────────────────────────

    @property
    def _document(self) -> Any:
        if self._client is None:
            raise WsdlError("No WSDL loaded")
        return self._client.wsdl

    @staticmethod
    def _service_bindings(service: Any) -> list[str]:
        names: list[str] = []
        for port in service.ports.values():
            name = port.binding.name.localname
            if name not in names:
                names.append(name)
        return names

    def _find_binding(self, binding_name: str) -> Any:
        for service in self._document.services.values():
            for port in service.ports.values():
                if port.binding.name.localname == binding_name:
                    return port.binding
        raise WsdlError(f"Binding {binding_name} not found in {self._url}")

    @staticmethod
    def _message_type(collector: _TypeCollector, message: Any) -> str:
        body = getattr(message, "body", None) if message is not None else None
        if body is None or getattr(body, "type", None) is None:
            return "object"
        return collector.visit_element(body)
