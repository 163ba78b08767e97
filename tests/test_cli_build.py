# SPDX-License-Identifier: MIT
"""Tests for the tyler build command."""

from __future__ import annotations

import sys
from pathlib import Path

from click.testing import CliRunner

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from tyler_cli.main import Context, cli
from tyler_publish import ProcessResult


def version_of(path: Path) -> str:
    with open(path, "rb") as f:
        return tomllib.load(f)["package"]["version"]


class TestBuildCommand:
    """Tests for tyler build command."""

    def test_build_with_bump(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["build", str(package_dir), "--bump", "patch"], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert "Built my-package:0.1.1" in result.output
        assert version_of(package_dir / "typst.toml") == "0.1.1"
        assert version_of(package_dir / "dist" / "typst.toml") == "0.1.1"
        assert (package_dir / "dist" / "lib.typ").is_file()

    def test_no_bump_keeps_version(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["build", str(package_dir), "-n", "-b", "major"], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert version_of(package_dir / "dist" / "typst.toml") == "0.1.0"
        assert "already published" in result.output

    def test_without_terminal_version_is_kept(
        self, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["build", str(package_dir)], obj=cli_context)
        assert result.exit_code == 0, result.output
        assert version_of(package_dir / "typst.toml") == "0.1.0"

    def test_explicit_version(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["build", str(package_dir), "-b", "1.0.0-rc.1"], obj=cli_context)
        assert result.exit_code == 0, result.output
        assert version_of(package_dir / "dist" / "typst.toml") == "1.0.0-rc.1"

    def test_invalid_bump(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["build", str(package_dir), "-b", "huge"], obj=cli_context)

        assert result.exit_code == 1
        assert "Cannot bump version" in result.output
        assert not (package_dir / "dist").exists()

    def test_rebuilding_an_older_published_version_warns(
        self, make_index_transport, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        cli_context.http_transport = make_index_transport(
            [
                {"name": "my-package", "version": "0.1.0", "entrypoint": "lib.typ"},
                {"name": "my-package", "version": "0.2.0", "entrypoint": "lib.typ"},
            ]
        )

        result = cli_runner.invoke(cli, ["build", str(package_dir), "-n"], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert "Version 0.1.0 of my-package is already published on the index" in result.output

    def test_interactive_bump(
        self, make_decisions, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        cli_context.decisions = make_decisions(choices=["minor"])

        result = cli_runner.invoke(cli, ["build", str(package_dir)], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert version_of(package_dir / "typst.toml") == "0.2.0"

    def test_interactive_custom_version(
        self, make_decisions, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        cli_context.decisions = make_decisions(choices=["custom"], texts=["0.5.0"])

        result = cli_runner.invoke(cli, ["build", str(package_dir)], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert version_of(package_dir / "typst.toml") == "0.5.0"

    def test_interactive_cancel(
        self, make_decisions, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        cli_context.decisions = make_decisions(choices=["cancel"])

        result = cli_runner.invoke(cli, ["build", str(package_dir)], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert "Cancelled by user" in result.output
        assert not (package_dir / "dist").exists()

    def test_dry_run(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        original = (package_dir / "typst.toml").read_bytes()

        result = cli_runner.invoke(cli, ["build", str(package_dir), "-b", "minor", "--dry-run"], obj=cli_context)

        assert result.exit_code == 0, result.output
        assert "(dry-run)" in result.output
        assert (package_dir / "typst.toml").read_bytes() == original
        assert not (package_dir / "dist").exists()

    def test_validation_failure_writes_nothing(
        self, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        (package_dir / "src" / "lib.typ").unlink()

        result = cli_runner.invoke(cli, ["build", str(package_dir), "-b", "patch"], obj=cli_context)

        assert result.exit_code == 1
        assert version_of(package_dir / "typst.toml") == "0.1.0"
        assert not (package_dir / "dist").exists()

    def test_index_unreachable_is_fatal(
        self, unreachable_transport, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        cli_context.http_transport = unreachable_transport

        result = cli_runner.invoke(cli, ["build", str(package_dir), "-b", "patch"], obj=cli_context)

        assert result.exit_code == 1
        assert not (package_dir / "dist").exists()

    def test_custom_outdir_and_ignore(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        (package_dir / "src" / "notes.md").write_text("", encoding="utf-8")

        result = cli_runner.invoke(
            cli,
            ["build", str(package_dir), "-n", "-o", "out", "--ignore", "*.md"],
            obj=cli_context,
        )

        assert result.exit_code == 0, result.output
        assert (package_dir / "out" / "lib.typ").is_file()
        assert not (package_dir / "out" / "notes.md").exists()
        # README.md comes from the package root, not from the sources
        assert (package_dir / "out" / "README.md").is_file()

    def test_outdir_covering_the_package(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["build", str(package_dir), "-b", "patch", "-o", "."], obj=cli_context)

        assert result.exit_code == 1
        assert "would overwrite the package" in result.output
        assert (package_dir / "src" / "lib.typ").is_file()
        assert version_of(package_dir / "typst.toml") == "0.1.0"

    def test_install(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["build", str(package_dir), "-b", "patch", "--install"], obj=cli_context)

        assert result.exit_code == 0, result.output
        installed = cli_context.local_packages_dir / "my-package" / "0.1.1"
        assert (installed / "lib.typ").is_file()
        assert version_of(installed / "typst.toml") == "0.1.1"


class TestBuildPublish:
    """Tests for tyler build --publish."""

    def test_requires_publish_flag(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["build", str(package_dir), "--pr", "1234"], obj=cli_context)
        assert result.exit_code == 1
        assert "require --publish" in result.output

    def test_publish(
        self, make_runner, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        runner = make_runner({("status", "--porcelain"): ProcessResult(0, stdout="A  lib.typ\n")})
        cli_context.process_runner = runner

        result = cli_runner.invoke(cli, ["build", str(package_dir), "-b", "patch", "--publish"], obj=cli_context)

        assert result.exit_code == 0, result.output
        repo = cli_context.repository_dir
        assert (repo / "packages" / "preview" / "my-package" / "0.1.1" / "lib.typ").is_file()
        assert runner.commands[0][0] == "clone"
        assert ("checkout", "-b", "my-package-0.1.1") in runner.commands
        assert ("commit", "-m", "my-package:0.1.1") in runner.commands
        assert 'gh pr create --title "my-package:0.1.1"' in result.output

    def test_publish_dry_run_runs_no_processes(
        self, cli_runner: CliRunner, cli_context: Context, package_dir: Path, fake_runner
    ) -> None:
        result = cli_runner.invoke(
            cli,
            ["build", str(package_dir), "-b", "patch", "--publish", "--pr-body", "--dry-run"],
            obj=cli_context,
        )

        assert result.exit_code == 0, result.output
        assert fake_runner.requests == []
        assert not cli_context.repository_dir.exists()
        assert not (cli_context.repository_dir.parent / "tyler-pr-body.md").exists()

    def test_publish_to_existing_pull_request(
        self, cli_runner: CliRunner, cli_context: Context, package_dir: Path, fake_runner
    ) -> None:
        result = cli_runner.invoke(
            cli, ["build", str(package_dir), "-b", "patch", "--publish", "--pr", "1234"], obj=cli_context
        )

        assert result.exit_code == 0, result.output
        assert ("fetch", "janedoe") in fake_runner.commands
        assert "push janedoe HEAD:my-package-0.1.0" in result.output

    def test_unknown_pull_request(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(
            cli, ["build", str(package_dir), "-n", "--publish", "--pr", "42"], obj=cli_context
        )
        assert result.exit_code == 1
        assert "HTTP 404" in result.output

    def test_pr_body(self, cli_runner: CliRunner, cli_context: Context, package_dir: Path) -> None:
        result = cli_runner.invoke(
            cli, ["build", str(package_dir), "-b", "patch", "--publish", "--pr-body", "--yes"], obj=cli_context
        )

        assert result.exit_code == 0, result.output
        body_file = cli_context.repository_dir.parent / "tyler-pr-body.md"
        body = body_file.read_text(encoding="utf-8")
        assert "- [x] an update for a package" in body
        assert "- [ ] a new package" in body
        assert f'--body-file "{body_file}"' in result.output

    def test_git_failure(
        self, make_runner, cli_runner: CliRunner, cli_context: Context, package_dir: Path
    ) -> None:
        cli_context.process_runner = make_runner({("clone",): ProcessResult(128, stderr="fatal: repository not found")})

        result = cli_runner.invoke(cli, ["build", str(package_dir), "-n", "--publish"], obj=cli_context)

        assert result.exit_code == 1
        assert "repository not found" in result.output
