"""
Tests for configuration loading — generator config file and project lookup.
"""

import json
import textwrap
from pathlib import Path

import pytest

from soapgen.core.config.loader import (
    ConfigError,
    SoapOptions,
    find_project_root,
    load_generator_config,
)


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data))
    return path


class TestLoadGeneratorConfig:
    """Tests for load_generator_config()."""

    def test_full_soap_section(self, tmp_path: Path):
        path = _write(tmp_path / "soap.json", {
            "soap": {
                "datasource": "weatherDS",
                "service": "Weather",
                "binding": "WeatherSoap",
                "operations": "all",
            }
        })
        options = load_generator_config(path)
        assert options.datasource == "weatherDS"
        assert options.service == "Weather"
        assert options.binding == "WeatherSoap"
        assert options.operations == "all"
        assert not options.is_empty

    def test_operations_list(self, tmp_path: Path):
        path = _write(tmp_path / "soap.json", {"soap": {"operations": ["GetWeather"]}})
        options = load_generator_config(path)
        assert options.operations == ["GetWeather"]
        assert options.datasource is None

    def test_missing_soap_section_is_empty(self, tmp_path: Path):
        path = _write(tmp_path / "soap.json", {"rest": {}})
        options = load_generator_config(path)
        assert options == SoapOptions()
        assert options.is_empty

    def test_relative_path_resolves_against_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        _write(tmp_path / "soap.json", {"soap": {"service": "Weather"}})
        monkeypatch.chdir(tmp_path)
        assert load_generator_config("soap.json").service == "Weather"

    def test_yaml_config(self, tmp_path: Path):
        path = tmp_path / "soap.yml"
        path.write_text(textwrap.dedent("""\
            soap:
              datasource: weatherDS
              operations:
                - GetWeather
                - GetCities
        """))
        options = load_generator_config(path)
        assert options.datasource == "weatherDS"
        assert options.operations == ["GetWeather", "GetCities"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_generator_config(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "soap.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_generator_config(path)

    def test_not_an_object(self, tmp_path: Path):
        path = _write(tmp_path / "soap.json", ["soap"])
        with pytest.raises(ConfigError, match="Expected an object"):
            load_generator_config(path)

    def test_soap_section_not_an_object(self, tmp_path: Path):
        path = _write(tmp_path / "soap.json", {"soap": "weatherDS"})
        with pytest.raises(ConfigError):
            load_generator_config(path)

    def test_wrong_value_type(self, tmp_path: Path):
        path = _write(tmp_path / "soap.json", {"soap": {"service": ["a", "b"]}})
        with pytest.raises(ConfigError, match="Invalid soap configuration"):
            load_generator_config(path)

    def test_operations_value_kept_as_given(self, tmp_path: Path):
        path = _write(tmp_path / "soap.json", {"soap": {"operations": 5}})
        assert load_generator_config(path).operations == 5


class TestFindProjectRoot:
    """Tests for find_project_root()."""

    def test_finds_in_current_dir(self, project: Path):
        assert find_project_root(project) == project.resolve()

    def test_walks_up_from_subdirectory(self, project: Path):
        nested = project / "common" / "models"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == project.resolve()

    def test_datasources_only_marks_root(self, tmp_path: Path):
        (tmp_path / "server").mkdir()
        (tmp_path / "server" / "datasources.json").write_text("{}")
        assert find_project_root(tmp_path) == tmp_path.resolve()

    def test_returns_none_outside_project(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        isolated = tmp_path / "isolated"
        isolated.mkdir()
        monkeypatch.chdir(isolated)
        assert find_project_root() is None
