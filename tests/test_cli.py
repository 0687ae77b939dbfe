"""Tests for the mcpmux-install and mcpmux-apt-setup commands."""

import os

import pytest
from click.testing import CliRunner

from mcpmux_installer.cli import apt_setup, install

from tests.conftest import FakeRunner, fake_which


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_config_file(monkeypatch):
    monkeypatch.delenv("MCPMUX_INSTALL_CONFIG", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


def _obj(runner, *tools, machine="x86_64"):
    return {
        "runner": runner,
        "which": fake_which("curl", *tools),
        "machine": machine,
        "exists": lambda path: False,
    }


class TestInstallCommand:
    def test_help(self, cli_runner):
        for flag in ("--help", "-h"):
            result = cli_runner.invoke(install, [flag])
            assert result.exit_code == 0
            assert "--skip-verify" in result.output

    def test_unknown_flag_exits_1(self, cli_runner):
        runner = FakeRunner()
        result = cli_runner.invoke(install, ["--bogus"], obj=_obj(runner))
        assert result.exit_code == 1
        assert "--bogus" in result.output
        assert runner.calls == []

    def test_version_flag_without_value_exits_1(self, cli_runner):
        result = cli_runner.invoke(install, ["--version"], obj=_obj(FakeRunner()))
        assert result.exit_code == 1

    @pytest.mark.parametrize("machine", ["i686", "armv7l", "s390x", "amd64", "arm64", "X86_64"])
    def test_unsupported_architecture(self, cli_runner, machine):
        runner = FakeRunner()
        result = cli_runner.invoke(install, [], obj=_obj(runner, machine=machine))
        assert result.exit_code == 1
        assert f"Unsupported architecture: {machine}" in result.output
        assert runner.calls == []

    def test_missing_curl(self, cli_runner):
        runner = FakeRunner()
        obj = _obj(runner)
        obj["which"] = fake_which()
        result = cli_runner.invoke(install, [], obj=obj)
        assert result.exit_code == 1
        assert "'curl' is required" in result.output

    def test_explicit_version_appimage_install(self, cli_runner, tmp_path):
        runner = FakeRunner()
        home = tmp_path / "home"
        install_dir = home / ".local" / "bin"
        env = {"HOME": str(home), "PATH": f"{install_dir}{os.pathsep}/usr/bin"}

        result = cli_runner.invoke(
            install, ["-v", "1.2.3", "--skip-verify"], obj=_obj(runner), env=env
        )

        assert result.exit_code == 0, result.output
        assert "installed successfully" in result.output
        assert "api.github.com" not in " ".join(runner.urls())
        assert runner.urls() == [
            "https://github.com/mcpmux/mcp-mux/releases/download/v1.2.3/McpMux_1.2.3_amd64.AppImage"
        ]
        assert os.access(install_dir / "McpMux.AppImage", os.X_OK)

    def test_latest_version_apt_install(self, cli_runner):
        runner = FakeRunner()
        runner.on_url(
            "https://api.github.com/repos/mcpmux/mcp-mux/releases/latest",
            stdout='{"tag_name":"v0.0.12"}',
        )
        result = cli_runner.invoke(install, ["--skip-verify"], obj=_obj(runner, "apt-get", "dnf"))

        assert result.exit_code == 0, result.output
        assert "Installing McpMux v0.0.12" in result.output
        install_cmd = runner.calls[-1]
        assert "apt-get" in install_cmd
        assert install_cmd[-1].endswith("mcpmux_0.0.12_amd64.deb")

    def test_release_not_found(self, cli_runner):
        runner = FakeRunner()
        runner.on("curl", returncode=22)
        result = cli_runner.invoke(install, [], obj=_obj(runner, "apt-get"))
        assert result.exit_code == 1
        assert "Could not determine latest version" in result.output
        assert len(runner.calls) == 1

    def test_no_aur_helper(self, cli_runner):
        result = cli_runner.invoke(
            install, ["--version", "0.0.12"], obj=_obj(FakeRunner(), "pacman")
        )
        assert result.exit_code == 1
        assert "No AUR helper found" in result.output

    def test_bad_config_file(self, cli_runner, tmp_path, monkeypatch):
        config = tmp_path / "installer.yaml"
        config.write_text("nonsense_key: 1\n")
        monkeypatch.setenv("MCPMUX_INSTALL_CONFIG", str(config))
        result = cli_runner.invoke(install, ["-v", "1.0.0"], obj=_obj(FakeRunner()))
        assert result.exit_code == 1
        assert "Unknown config keys: nonsense_key" in result.output

    def test_missing_curl_is_reported_before_config_errors(
        self, cli_runner, tmp_path, monkeypatch
    ):
        config = tmp_path / "installer.yaml"
        config.write_text("nonsense_key: 1\n")
        monkeypatch.setenv("MCPMUX_INSTALL_CONFIG", str(config))
        obj = _obj(FakeRunner())
        obj["which"] = fake_which()
        result = cli_runner.invoke(install, ["-v", "1.0.0"], obj=obj)
        assert result.exit_code == 1
        assert "'curl' is required" in result.output
        assert "nonsense_key" not in result.output

    def test_unwritable_install_dir_exits_1(self, cli_runner, tmp_path):
        home = tmp_path / "home"
        home.mkdir()
        (home / ".local").write_text("not a directory")
        result = cli_runner.invoke(
            install,
            ["-v", "1.2.3", "--skip-verify"],
            obj=_obj(FakeRunner()),
            env={"HOME": str(home)},
        )
        assert result.exit_code == 1
        assert "Error: Could not install to" in result.output
        assert isinstance(result.exception, SystemExit)


class TestAptSetupCommand:
    def test_requires_root(self, cli_runner):
        runner = FakeRunner()
        result = cli_runner.invoke(apt_setup, [], obj={"runner": runner, "is_root": False})
        assert result.exit_code == 1
        assert "must be run as root" in result.output
        assert runner.calls == []

    def test_rejects_flags(self, cli_runner):
        result = cli_runner.invoke(apt_setup, ["--version", "1.0"], obj={"is_root": True})
        assert result.exit_code == 1

    def test_configures_repository(self, cli_runner, tmp_path, monkeypatch):
        config = tmp_path / "installer.yaml"
        config.write_text(
            f"apt_source_list: {tmp_path / 'mcpmux.list'}\n"
            f"apt_keyring: {tmp_path / 'keyring.gpg'}\n"
        )
        monkeypatch.setenv("MCPMUX_INSTALL_CONFIG", str(config))
        runner = FakeRunner().on("dpkg", "--print-architecture", stdout="amd64")

        result = cli_runner.invoke(
            apt_setup,
            [],
            obj={
                "runner": runner,
                "is_root": True,
                "which": fake_which("curl", "gpg", "dpkg", "apt-get"),
            },
        )

        assert result.exit_code == 0, result.output
        assert "arch=amd64" in (tmp_path / "mcpmux.list").read_text()
        assert (tmp_path / "keyring.gpg").exists()

    def test_missing_gpg(self, cli_runner):
        result = cli_runner.invoke(
            apt_setup,
            [],
            obj={
                "runner": FakeRunner(),
                "is_root": True,
                "which": fake_which("curl", "dpkg", "apt-get"),
            },
        )
        assert result.exit_code == 1
        assert "'gpg' is required" in result.output
