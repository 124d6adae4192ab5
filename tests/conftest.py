"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from soapgen.core.models.soap import GeneratedApi, SoapService, SoapTypeModel, container_model_name
from soapgen.core.services.generators.remote_methods import OperationSignature, render_remote_methods
from soapgen.core.services.wsdl_loader import WsdlError


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def weather_wsdl(fixtures_dir: Path) -> Path:
    return fixtures_dir / "weather.wsdl"


def write_project(root: Path, datasources: dict | None = None, model_config: dict | None = None) -> Path:
    """Create a minimal LoopBack project layout under ``root``."""
    server = root / "server"
    server.mkdir(parents=True, exist_ok=True)
    if datasources is None:
        datasources = {
            "db": {"name": "db", "connector": "memory"},
            "weatherDS": {
                "name": "weatherDS",
                "connector": "soap",
                "wsdl": "http://example.com/weather?wsdl",
            },
        }
    (server / "datasources.json").write_text(json.dumps(datasources, indent=2))
    if model_config is None:
        model_config = {
            "_meta": {"sources": ["loopback/common/models", "../common/models", "./models"]},
            "User": {"dataSource": "db"},
        }
    (server / "model-config.json").write_text(json.dumps(model_config, indent=2))
    return root


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A LoopBack project with one memory and one SOAP datasource."""
    return write_project(tmp_path / "app")


class ScriptedPrompter:
    """Answers prompts from a queue and records what was asked."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked: list[tuple[str, list[str]]] = []

    def select_one(self, message, choices):
        self.asked.append((message, list(choices)))
        answer = self.answers.pop(0)
        assert answer in choices, f"{answer!r} not offered in {choices!r}"
        return answer

    def select_many(self, message, choices, validate):
        self.asked.append((message, list(choices)))
        answer = self.answers.pop(0)
        assert validate(answer) is None
        return answer


@pytest.fixture
def prompter() -> ScriptedPrompter:
    """A prompter that fails the test if anything is asked."""
    return ScriptedPrompter()


# Service → binding → operation → (request type, response type)
WEATHER_TREE = {
    "Weather": {
        "WeatherSoap": {
            "GetWeather": ("GetWeather", "GetWeatherResponse"),
            "GetCities": ("GetCities", "GetCitiesResponse"),
        },
        "WeatherSoap12": {
            "GetWeather": ("GetWeather", "GetWeatherResponse"),
        },
    },
    "Stations": {
        "StationSoap": {
            "ListStations": ("ListStations", "ListStationsResponse"),
        },
    },
}

WEATHER_MODELS = {
    "GetWeather": SoapTypeModel(
        name="GetWeather",
        properties={"City": {"type": "string", "required": True}, "Units": {"type": "string"}},
    ),
    "Units": SoapTypeModel(name="Units", type="string"),
    "GetWeatherResponse": SoapTypeModel(
        name="GetWeatherResponse",
        properties={
            "Temperature": {"type": "number", "required": True},
            "Forecasts": {"type": ["Forecast"]},
        },
    ),
    "Forecast": SoapTypeModel(
        name="Forecast",
        properties={"Day": {"type": "date", "required": True}, "High": {"type": "number"}},
    ),
    "GetCities": SoapTypeModel(name="GetCities", properties={"Country": {"type": "string"}}),
    "GetCitiesResponse": SoapTypeModel(
        name="GetCitiesResponse", properties={"City": {"type": ["string"]}}
    ),
    "ListStations": SoapTypeModel(name="ListStations"),
    "ListStationsResponse": SoapTypeModel(name="ListStationsResponse"),
}

WEATHER_REFERENCES = {
    "GetWeather": ["Units"],
    "GetWeatherResponse": ["Forecast"],
}


class FakeWsdlLoader:
    """In-memory stand-in for WsdlLoader with the same discovery contract."""

    def __init__(self, tree=None, models=None, fail_with: str | None = None):
        self.tree = WEATHER_TREE if tree is None else tree
        self.models = WEATHER_MODELS if models is None else models
        self.fail_with = fail_with
        self.urls: list[str] = []
        self._binding: str | None = None

    def get_services(self, url):
        self.urls.append(url)
        if self.fail_with:
            raise WsdlError(self.fail_with)
        return [SoapService(name=name, bindings=list(b)) for name, b in self.tree.items()]

    def get_bindings(self, service_name):
        return list(self.tree[service_name])

    def _operations(self, binding_name):
        for bindings in self.tree.values():
            if binding_name in bindings:
                return bindings[binding_name]
        raise WsdlError(f"Binding {binding_name} not found")

    def get_operations(self, binding_name):
        self._binding = binding_name
        return sorted(self._operations(binding_name))

    def generate_api_code(self, datasource_name, operations, binding_name=None):
        binding_name = binding_name or self._binding
        ops = self._operations(binding_name)
        models: dict[str, SoapTypeModel] = {}
        signatures = []
        for op in operations:
            request, response = ops[op]
            signatures.append(OperationSignature(name=op, input_type=request, output_type=response))
            for type_name in (request, response):
                models[type_name] = self.models[type_name].model_copy(deep=True)
                for ref in WEATHER_REFERENCES.get(type_name, []):
                    models[ref] = self.models[ref].model_copy(deep=True)
        code = render_remote_methods(
            model_name=container_model_name(binding_name),
            binding_name=binding_name,
            datasource_name=datasource_name,
            operations=signatures,
        )
        return [
            GeneratedApi(
                binding_name=binding_name,
                datasource_name=datasource_name,
                operations=list(operations),
                models=models,
                code=code,
            )
        ]


@pytest.fixture
def fake_loader() -> FakeWsdlLoader:
    return FakeWsdlLoader()


@pytest.fixture
def make_prompter():
    """Factory: ``make_prompter("weatherDS", "Weather", ...)``."""
    return ScriptedPrompter


@pytest.fixture
def make_loader():
    """Factory for FakeWsdlLoader with custom tree/models/failure."""
    return FakeWsdlLoader


@pytest.fixture
def make_project():
    """Factory: ``make_project(root, datasources=..., model_config=...)``."""
    return write_project
