# SPDX-License-Identifier: MIT
"""Tests for the tyler check and env commands."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from tyler_cli.main import Context, cli


class TestCheckCommand:
    """Tests for tyler check command."""

    def test_valid_package(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["check", str(package_dir)], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert "Package name is valid: my-package" in result.output
        assert "Check passed for my-package:0.1.0" in result.output

    def test_manifest_file_as_entrypoint(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["check", str(package_dir / "typst.toml")], obj=cli_context)
        assert result.exit_code == 0, result.output

    def test_invalid_name(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        manifest = package_dir / "typst.toml"
        manifest.write_text(manifest.read_text(encoding="utf-8").replace("my-package", "My_Package"), encoding="utf-8")

        result = cli_runner.invoke(cli, ["check", str(package_dir)], obj=cli_context)

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "M, _, P" in result.output

    def test_malformed_license(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        manifest = package_dir / "typst.toml"
        manifest.write_text(
            manifest.read_text(encoding="utf-8").replace('license = "MIT"', 'license = "MIT OR"'), encoding="utf-8"
        )

        result = cli_runner.invoke(cli, ["check", str(package_dir)], obj=cli_context)

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "The license 'MIT OR' is not a valid SPDX-2 expression" in result.output

    def test_missing_entrypoint_path(self, cli_runner: CliRunner, cli_context: Context, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["check", str(tmp_path / "nope")], obj=cli_context)
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_missing_manifest(self, cli_runner: CliRunner, cli_context: Context, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["check", str(tmp_path)], obj=cli_context)
        assert result.exit_code == 1
        assert "file not found" in result.output

    def test_index_unreachable_degrades(
        self, unreachable_transport, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        cli_context.http_transport = unreachable_transport

        result = cli_runner.invoke(cli, ["check", str(package_dir)], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert "Warning:" in result.output
        assert "skipped" in result.output

    def test_strict_fails_on_warnings(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        (package_dir / "LICENSE").unlink()

        lenient = cli_runner.invoke(cli, ["check", str(package_dir)], obj=cli_context)
        strict = cli_runner.invoke(cli, ["check", "--strict", str(package_dir)], obj=cli_context)

        assert lenient.exit_code == 0
        assert strict.exit_code == 1
        assert "strict mode" in strict.output

    def test_verbose_shows_debug_output(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["-v", "check", str(package_dir)], obj=cli_context)
        assert result.exit_code == 0
        assert "Fetching package index from" in result.output


class TestEnvCommand:
    """Tests for tyler env command."""

    def test_reports_tools(self, cli_runner: CliRunner, cli_context: Context, fake_runner) -> None:
        result = cli_runner.invoke(cli, ["env"], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert "git:" in result.output
        assert "gh:" in result.output
        assert f"local packages: {cli_context.local_packages_dir} (does not exist yet)" in result.output
        assert ("--version",) in fake_runner.commands
