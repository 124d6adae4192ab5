"""
Tests for the model materializer — building, upserting and script writing.
"""

import json
from pathlib import Path

import pytest

from soapgen.core.models.soap import GeneratedApi, SoapTypeModel
from soapgen.core.models.workspace import ModelDefinition
from soapgen.core.persistence.workspace_store import Workspace, WorkspaceError
from soapgen.core.services.model_materializer import (
    build_models,
    materialize,
    remote_method_files,
    write_remote_methods,
)


def _api(binding: str = "WeatherSoap", models: dict | None = None) -> GeneratedApi:
    if models is None:
        models = {
            "GetWeather": SoapTypeModel(name="GetWeather", properties={"City": {"type": "string"}}),
            "Units": SoapTypeModel(name="Units", type="string"),
            "Forecasts": SoapTypeModel(name="Forecasts", type="array"),
            "Forecast": SoapTypeModel(name="Forecast", base="PersistedModel", plural="Forecasts"),
        }
    return GeneratedApi(
        binding_name=binding,
        datasource_name="weatherDS",
        operations=["GetWeather"],
        models=models,
        code="module.exports = function(soap_WeatherSoap) {};\n",
    )


class TestBuildModels:
    def test_container_model(self):
        api = _api()
        definitions, configs = build_models([api], "WeatherSoap")
        container = definitions[0]
        assert container.name == "soap_WeatherSoap"
        assert container.facet_name == "server"
        assert container.http == {"path": "WeatherSoap"}
        assert container.base == "Model"
        assert container.exclude_base_properties == ["id"]
        assert container.properties == {}
        assert api.model_definition is container
        assert configs[0].name == "soap_WeatherSoap"
        assert configs[0].data_source is None
        assert configs[0].public is True

    def test_special_characters_in_binding(self):
        definitions, _ = build_models([_api("Weather.Soap-v2")], "Weather.Soap-v2")
        assert definitions[0].name == "soap_Weather_Soap_v2"
        assert definitions[0].http == {"path": "Weather_Soap_v2"}

    def test_only_object_types(self):
        definitions, configs = build_models([_api()], "WeatherSoap")
        names = [d.name for d in definitions]
        assert names == ["soap_WeatherSoap", "GetWeather", "Forecast"]
        assert [c.name for c in configs] == names
        assert all(c.facet_name == "server" for c in configs)

    def test_type_model_fields(self):
        definitions, _ = build_models([_api()], "WeatherSoap")
        get_weather, forecast = definitions[1], definitions[2]
        assert get_weather.facet_name == "common"
        assert get_weather.base == "Model"
        assert get_weather.properties["City"].descriptor == {"type": "string"}
        assert forecast.base == "PersistedModel"
        assert forecast.plural == "Forecasts"


class TestMaterialize:
    def test_creates_on_empty_project(self, project: Path):
        ws = Workspace.load(project)
        definitions, configs = build_models([_api()], "WeatherSoap")
        report = materialize(ws, definitions, configs, ws.model_names())

        assert report.definitions_created == ["soap_WeatherSoap", "GetWeather", "Forecast"]
        assert report.definitions_updated == []
        assert report.configs_created == ["soap_WeatherSoap", "GetWeather", "Forecast"]
        stored = ws.get_model_definition("common.GetWeather")
        assert list(stored.properties) == ["City"]
        assert definitions[0].script_path == str(project / "server" / "models" / "soap-weather-soap.js")

    def test_updates_existing_and_replaces_properties(self, project: Path):
        models_dir = project / "common" / "models"
        models_dir.mkdir(parents=True)
        (models_dir / "get-weather.json").write_text(json.dumps({
            "name": "GetWeather",
            "properties": {"Stale": {"type": "string"}, "City": {"type": "number"}},
        }))
        ws = Workspace.load(project)
        definitions, configs = build_models([_api()], "WeatherSoap")
        report = materialize(ws, definitions, configs, ws.model_names())

        assert report.definitions_updated == ["GetWeather"]
        assert report.configs_updated == ["GetWeather"]
        stored = ws.get_model_definition("common.GetWeather")
        assert {n: p.descriptor for n, p in stored.properties.items()} == {"City": {"type": "string"}}

    def test_rerun_converges(self, project: Path):
        for _ in range(2):
            ws = Workspace.load(project)
            definitions, configs = build_models([_api()], "WeatherSoap")
            materialize(ws, definitions, configs, ws.model_names())
            ws.save()

        ws = Workspace.load(project)
        assert ws.model_names() == ["Forecast", "GetWeather", "soap_WeatherSoap"]
        assert len(list((project / "common" / "models").glob("*.json"))) == 2
        config = json.loads((project / "server" / "model-config.json").read_text())
        assert [k for k in config if k != "_meta"] == ["User", "soap_WeatherSoap", "GetWeather", "Forecast"]

    def test_failure_keeps_earlier_upserts(self, project: Path, monkeypatch: pytest.MonkeyPatch):
        ws = Workspace.load(project)
        definitions, configs = build_models([_api()], "WeatherSoap")
        original = ws.upsert_model_definition

        def fail_on_forecast(definition):
            if definition.name == "Forecast":
                raise WorkspaceError("disk full")
            return original(definition)

        monkeypatch.setattr(ws, "upsert_model_definition", fail_on_forecast)
        with pytest.raises(WorkspaceError, match="disk full"):
            materialize(ws, definitions, configs, [])
        assert ws.get_model_definition("common.GetWeather") is not None
        assert ws.get_model_config("server.GetWeather") is None


class TestRemoteMethodFiles:
    def test_skips_api_without_definition(self):
        assert remote_method_files([_api()]) == []

    def test_script_record(self, tmp_path: Path):
        api = _api()
        api.model_definition = ModelDefinition(
            name="soap_WeatherSoap",
            facet_name="server",
            script_path=str(tmp_path / "soap-weather-soap.js"),
        )
        [script] = remote_method_files([api])
        assert script.model_name == "soap_WeatherSoap"
        assert script.binding_name == "WeatherSoap"
        assert script.file == tmp_path / "soap-weather-soap.js"
        assert script.content == api.code

    def test_writes_script(self, tmp_path: Path):
        api = _api()
        api.model_definition = ModelDefinition(
            name="soap_WeatherSoap",
            script_path=str(tmp_path / "server" / "models" / "soap-weather-soap.js"),
        )
        [path] = write_remote_methods([api])
        assert path.read_text() == api.code

    def test_write_failure(self, tmp_path: Path):
        (tmp_path / "server").write_text("")
        api = _api()
        api.model_definition = ModelDefinition(
            name="soap_WeatherSoap",
            script_path=str(tmp_path / "server" / "models" / "soap-weather-soap.js"),
        )
        with pytest.raises(WorkspaceError, match="Cannot write"):
            write_remote_methods([api])
