"""
Tests for the imagesmith CLI commands.

Tests cover:
- kinds / kind-of with the bundled table and with overrides
- launch through each resolution stage
- version
"""

import json
import zipfile
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from imagesmith_cli import __version__
from imagesmith_cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IMAGESMITH_MAPPING", raising=False)
    monkeypatch.delenv("IMAGESMITH_LOG_LEVEL", raising=False)


@pytest.fixture
def overrides(tmp_path):
    path = tmp_path / "kinds.properties"
    path.write_text("# custom kinds\nWidget=wdg, widget\nConfigMap=cfg\n")
    return path


@pytest.fixture
def project(tmp_path):
    base = tmp_path / "service"
    (base / "target" / "classes").mkdir(parents=True)
    return base


def write_jar(path: Path, main_class: str) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("META-INF/MANIFEST.MF", f"Manifest-Version: 1.0\r\nMain-Class: {main_class}\r\n\r\n")
        zf.writestr("org/example/App.class", b"\xca\xfe\xba\xbe")
    return path


class TestKinds:
    """Test kinds command."""

    def test_properties_output_of_bundled_table(self):
        result = runner.invoke(app, ["kinds", "--format", "properties"])

        assert result.exit_code == 0
        assert "ConfigMap=cm, configmap" in result.output
        assert "Service=svc, service" in result.output

    def test_single_kind(self):
        result = runner.invoke(app, ["kinds", "--kind", "CronJob", "--format", "properties"])

        assert result.exit_code == 0
        assert result.output.strip() == "CronJob=cj, cronjob"

    def test_table_output(self):
        result = runner.invoke(app, ["kinds", "--kind", "Pod"])

        assert result.exit_code == 0
        assert "Pod" in result.output
        assert "pd, pod" in result.output

    def test_unknown_kind(self):
        result = runner.invoke(app, ["kinds", "--kind", "Gadget"])

        assert result.exit_code == 1
        assert "Unknown Kind" in result.output

    def test_invalid_format(self):
        result = runner.invoke(app, ["kinds", "--format", "xml"])

        assert result.exit_code == 1
        assert "Invalid format" in result.output

    def test_overrides_are_merged(self, overrides):
        result = runner.invoke(
            app, ["kinds", "--mapping", str(overrides), "--format", "properties"]
        )

        assert result.exit_code == 0
        assert "Widget=wdg, widget" in result.output
        assert "ConfigMap=cm, configmap, cfg" in result.output

    def test_overrides_from_environment(self, overrides):
        result = runner.invoke(
            app,
            ["kinds", "--kind", "Widget", "--format", "properties"],
            env={"IMAGESMITH_MAPPING": str(overrides)},
        )

        assert result.exit_code == 0
        assert "Widget=wdg, widget" in result.output

    def test_missing_overrides_fail(self, tmp_path):
        missing = tmp_path / "nope.properties"
        result = runner.invoke(app, ["kinds", "--mapping", str(missing)])

        assert result.exit_code == 1
        assert "MISSING_RESOURCE" in result.output

    def test_missing_optional_overrides_fall_back(self, tmp_path):
        missing = tmp_path / "nope.properties"
        result = runner.invoke(
            app,
            ["kinds", "--mapping", str(missing), "--optional", "--kind", "Secret", "--format", "properties"],
        )

        assert result.exit_code == 0
        assert "Secret=secret" in result.output

    def test_logs_stay_off_stdout(self, tmp_path):
        missing = tmp_path / "nope.properties"
        result = runner.invoke(
            app, ["kinds", "--mapping", str(missing), "--optional", "--format", "properties"]
        )

        assert result.exit_code == 0
        assert result.stdout.startswith("BuildConfig=")
        assert "timestamp" not in result.stdout

    def test_mapping_from_config_file(self, tmp_path):
        (tmp_path / "kinds.properties").write_text("Widget=wdg, widget\n")
        (tmp_path / "imagesmith.yaml").write_text(
            yaml.dump({"mapping": {"location": "kinds.properties"}})
        )
        result = runner.invoke(app, ["kinds", "--kind", "Widget", "--format", "properties"])

        assert result.exit_code == 0
        assert result.stdout == "Widget=wdg, widget\n"

    def test_config_location_relative_to_config_file(self, tmp_path):
        service = tmp_path / "service"
        (service / "config").mkdir(parents=True)
        (service / "config" / "kinds.properties").write_text("Widget=wdg\n")
        config = service / "imagesmith.yaml"
        config.write_text(yaml.dump({"mapping": {"location": "config/kinds.properties"}}))
        result = runner.invoke(
            app, ["kinds", "--config", str(config), "--kind", "Widget", "--format", "properties"]
        )

        assert result.exit_code == 0
        assert result.stdout == "Widget=wdg\n"

    def test_mapping_option_wins_over_config_file(self, tmp_path, overrides):
        other = tmp_path / "other.properties"
        other.write_text("Gadget=gdg\n")
        (tmp_path / "imagesmith.yaml").write_text(yaml.dump({"mapping": {"location": "other.properties"}}))
        result = runner.invoke(
            app, ["kinds", "--mapping", str(overrides), "--kind", "Gadget"]
        )

        assert result.exit_code == 1
        assert "Unknown Kind" in result.output

    def test_config_file_wins_over_environment(self, tmp_path, overrides):
        other = tmp_path / "other.properties"
        other.write_text("Gadget=gdg\n")
        (tmp_path / "imagesmith.yaml").write_text(yaml.dump({"mapping": {"location": "other.properties"}}))
        result = runner.invoke(
            app,
            ["kinds", "--kind", "Gadget", "--format", "properties"],
            env={"IMAGESMITH_MAPPING": str(overrides)},
        )

        assert result.exit_code == 0
        assert result.stdout == "Gadget=gdg\n"

    def test_malformed_overrides_fail(self, tmp_path):
        bad = tmp_path / "bad.properties"
        bad.write_text("Widget\n")
        result = runner.invoke(app, ["kinds", "--mapping", str(bad)])

        assert result.exit_code == 1
        assert "MALFORMED_INPUT" in result.output


class TestKindOf:
    """Test kind-of command."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("frontend-svc.yml", "Service"),
            ("app-cm.yaml", "ConfigMap"),
            ("deployment.yml", "Deployment"),
        ],
    )
    def test_known_fragments(self, filename, expected):
        result = runner.invoke(app, ["kind-of", filename])

        assert result.exit_code == 0
        assert result.output.strip() == expected

    def test_unknown_fragment(self):
        result = runner.invoke(app, ["kind-of", "app-nothing.yml"])

        assert result.exit_code == 1
        assert "No Kind matches" in result.output

    def test_override_alias(self, overrides):
        result = runner.invoke(app, ["kind-of", "thing-wdg.json", "--mapping", str(overrides)])

        assert result.exit_code == 0
        assert result.output.strip() == "Widget"

    def test_mapping_from_config_file(self, tmp_path, overrides):
        (tmp_path / "imagesmith.yaml").write_text(yaml.dump({"mapping": {"location": overrides.name}}))
        result = runner.invoke(app, ["kind-of", "thing-wdg.yml"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "Widget"


class TestLaunch:
    """Test launch command."""

    def test_main_class_option(self, project):
        result = runner.invoke(
            app, ["launch", str(project), "--main-class", "org.example.Cli", "--json"]
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["resolved"] is True
        assert payload["source"] == "config"
        assert payload["env"] == {"JAVA_MAIN_CLASS": "org.example.Cli"}

    def test_invalid_main_class_option(self, project):
        result = runner.invoke(app, ["launch", str(project), "--main-class", "not a class"])

        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output

    def test_config_file_in_project(self, project):
        (project / "imagesmith.yaml").write_text(
            yaml.dump({"launch": {"mainClass": "org.example.FromConfig"}})
        )
        result = runner.invoke(app, ["launch", str(project), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["main_class"] == "org.example.FromConfig"
        assert payload["inject_env"] is True

    def test_explicit_config_file_missing(self, project):
        result = runner.invoke(app, ["launch", str(project), "--config", str(project / "missing.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_config_file_not_a_mapping(self, project):
        config = project / "imagesmith.yaml"
        config.write_text("- just\n- a list\n")
        result = runner.invoke(app, ["launch", str(project)])

        assert result.exit_code == 1
        assert "Invalid config format" in result.output

    def test_fat_archive(self, project):
        write_jar(project / "target" / "service.jar", "org.example.Packaged")
        result = runner.invoke(app, ["launch", str(project), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["source"] == "archive"
        assert payload["inject_env"] is False
        assert payload["env"] == {}
        assert payload["archive"] == "target/service.jar"

    def test_fat_archive_human_output(self, project):
        write_jar(project / "target" / "service.jar", "org.example.Packaged")
        result = runner.invoke(app, ["launch", str(project)])

        assert result.exit_code == 0
        assert "org.example.Packaged" in result.output
        assert "no environment variable needed" in result.output

    def test_custom_output_dir(self, project):
        libs = project / "build" / "libs"
        libs.mkdir(parents=True)
        write_jar(libs / "service-all.jar", "org.example.Gradle")
        result = runner.invoke(
            app, ["launch", str(project), "--output-dir", "build/libs", "--json"]
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["main_class"] == "org.example.Gradle"

    def test_undetermined(self, project):
        result = runner.invoke(app, ["launch", str(project), "--json"])

        assert result.exit_code == 2
        payload = json.loads(result.stdout)
        assert payload["resolved"] is False
        assert payload["stages_tried"] == ["config", "archive", "scan"]
        assert payload["candidates"] == []

    def test_undetermined_human_output(self, project):
        result = runner.invoke(app, ["launch", str(project)])

        assert result.exit_code == 2
        assert "Cannot determine a launch target" in result.output


class TestVersion:
    """Test version command."""

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
