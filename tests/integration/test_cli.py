import pytest
import yaml
from click.testing import CliRunner
from conftest import BUSYBOX, HAB, GLIBC, REDIS, FakeEngine, populate_rootfs
from pkgexport.CLI import main as cli_main
from pkgexport.CLI.main import cli


@pytest.fixture
def manifest(tmp_path):
    populate_rootfs(tmp_path / "build" / "rootfs")
    data = {
        "workdir": "build",
        "base_image": "scratch",
        "env_path": "/hab/bin:/bin",
        "exposes": [6379],
        "primary_svc_ident": "core/redis",
        "users": [{"name": "hab", "uid": 42, "gid": 42}],
        "groups": [{"name": "hab", "gid": 42}],
        "packages": [
            {"ident": GLIBC},
            {"ident": BUSYBOX},
            {"ident": HAB, "deps": [GLIBC]},
            {"ident": REDIS, "deps": [GLIBC]},
        ],
        "naming": {"version_release_tag": False},
    }
    path = tmp_path / "manifest.yml"
    path.write_text(yaml.safe_dump(data))
    return path


@pytest.fixture
def fake_engine(monkeypatch):
    engine = FakeEngine(image_id="abc123")
    monkeypatch.setattr(cli_main, "Engine", lambda command: engine)
    return engine


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'build container images' in result.output

def test_cli_export_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['export', '--help'])
    assert result.exit_code == 0
    assert '--push' in result.output

def test_cli_export_missing_manifest():
    runner = CliRunner()
    result = runner.invoke(cli, ['export', 'non_existent.yml'])
    assert result.exit_code != 0

def test_cli_export_builds_and_reports(manifest, fake_engine, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['-q', 'export', str(manifest), '--platform', 'linux',
                                 '--report-dir', str(tmp_path / 'results')])
    assert result.exit_code == 0, result.output
    assert result.output.strip().endswith("abc123")

    workdir = tmp_path / "build"
    assert (workdir / "Dockerfile").exists()
    assert (workdir / "rootfs" / "init.sh").exists()
    assert fake_engine.calls[0] == [
        "build", "--force-rm", "--tag", "core/redis:4.0.14", "--tag", "core/redis:latest", ".",
    ]
    report = (tmp_path / "results" / "last_docker_export.env").read_text()
    assert "name_tags=core/redis:4.0.14,core/redis:latest" in report

def test_cli_export_push_rm_cleanup(manifest, fake_engine, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['-q', 'export', str(manifest), '--platform', 'linux',
                                 '--push', '--token', 'T', '--registry-url', 'registry.example.com',
                                 '--rm-image', '--cleanup'])
    assert result.exit_code == 0, result.output
    pushed = [c for c in fake_engine.calls if "push" in c]
    assert [c[-1] for c in pushed] == ["core/redis:4.0.14", "core/redis:latest"]
    assert ["rmi", "core/redis:latest"] in fake_engine.calls
    assert not (tmp_path / "build").exists()

def test_cli_push_requires_token(manifest, fake_engine, monkeypatch):
    monkeypatch.delenv("PKGEXPORT_REGISTRY_TOKEN", raising=False)
    runner = CliRunner()
    result = runner.invoke(cli, ['export', str(manifest), '--push'])
    assert result.exit_code == 2
    assert '--push requires' in result.output

def test_cli_export_failure_exit_code(manifest, monkeypatch):
    engine = FakeEngine(build_status=1)
    monkeypatch.setattr(cli_main, "Engine", lambda command: engine)
    runner = CliRunner()
    result = runner.invoke(cli, ['-q', 'export', str(manifest), '--platform', 'windows'])
    assert result.exit_code == 1
    assert 'Docker build failed with exit code: 1' in result.output
