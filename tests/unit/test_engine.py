# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""
Unit tests for settings, engine invocation and progress output.
"""
import subprocess
from types import SimpleNamespace
from pkgexport.UTILS import engine as engine_module
from pkgexport.UTILS.engine import Engine, docker_cmd
from pkgexport.UTILS.ui import UI, Status
from pkgexport.config import ExportSettings


class TestExportSettings:
    """Tests for ExportSettings."""

    def test_defaults(self):
        settings = ExportSettings.from_env(environ={})
        assert settings.docker_cmd == "docker"
        assert settings.registry_url is None

    def test_from_environ(self):
        settings = ExportSettings.from_env(environ={
            "PKGEXPORT_DOCKER_CMD": "sudo podman",
            "PKGEXPORT_REGISTRY_URL": "registry.example.com",
            "PKGEXPORT_MEMORY": "",
        })
        assert settings.registry_url == "registry.example.com"
        assert settings.memory is None
        assert docker_cmd(settings) == ["sudo", "podman"]

    def test_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PKGEXPORT_REGISTRY_TOKEN", "")
        monkeypatch.delenv("PKGEXPORT_REGISTRY_TOKEN")
        (tmp_path / ".env").write_text("PKGEXPORT_REGISTRY_TOKEN=from-dotenv\n")
        assert ExportSettings.from_env().registry_token == "from-dotenv"


class TestEngine:
    """Tests for Engine."""

    def test_run_returns_exit_status(self, monkeypatch):
        seen = {}

        def fake_run(argv, **kwargs):
            seen["argv"], seen["kwargs"] = argv, kwargs
            return SimpleNamespace(returncode=7, stdout="")

        monkeypatch.setattr(engine_module.subprocess, "run", fake_run)
        status = Engine(["podman"]).run(["rmi", "core/redis"], cwd="/tmp")
        assert status == 7
        assert seen["argv"] == ["podman", "rmi", "core/redis"]
        assert seen["kwargs"] == {"cwd": "/tmp"}

    def test_output_captures_stdout(self, monkeypatch):
        def fake_run(argv, **kwargs):
            assert kwargs["capture_output"] and kwargs["text"]
            return SimpleNamespace(returncode=0, stdout="abc123\n")

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert Engine(["docker"]).output(["images", "-q", "x"]) == "abc123\n"


class TestUI:
    """Tests for UI output."""

    def test_writes_to_stderr(self, capsys):
        ui = UI()
        ui.begin("start")
        ui.status(Status.UPLOADING, "image 'a'")
        ui.end("done")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Uploading image 'a'" in captured.err
        assert "done" in captured.err

    def test_quiet(self, capsys):
        UI(quiet=True).status(Status.CREATING, "x")
        assert capsys.readouterr().err == ""
