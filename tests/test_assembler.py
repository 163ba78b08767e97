# SPDX-License-Identifier: MIT
"""Tests for build planning and assembly of the output directory."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import pytest

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from tyler_build import (
    BuildError,
    BuildOptions,
    assemble,
    clear_directory,
    matches_any_pattern,
    plan_build,
)
from tyler_manifest import read_manifest


def plan_for(package_dir: Path, version: str = "0.1.1", ignore: Optional[str] = None, **overrides: str):
    manifest_path = package_dir / "typst.toml"
    manifest = read_manifest(manifest_path)
    options = BuildOptions.resolve(package_dir, manifest.tool_config, ignore=ignore, **overrides)
    return plan_build(manifest, manifest_path, options, version)


def load_toml(path: Path) -> dict:
    with open(path, "rb") as f:
        return tomllib.load(f)


def tree(directory: Path) -> dict[str, bytes]:
    return {
        p.relative_to(directory).as_posix(): p.read_bytes()
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    }


class TestMatchesAnyPattern:
    """Tests for matches_any_pattern function."""

    @pytest.mark.parametrize(
        "path,patterns,expected",
        [
            ("docs/manual.pdf", ["*.pdf"], True),
            ("manual.pdf", ["docs/*"], False),
            ("tests", ["tests"], True),
            ("a/tests", ["tests"], True),
            ("lib.typ", [], False),
        ],
    )
    def test_patterns(self, path, patterns, expected):
        assert matches_any_pattern(path, patterns) is expected


class TestPlanBuild:
    """Tests for plan_build function."""

    def test_plan_is_read_only(self, package_dir: Path):
        before = tree(package_dir)
        plan = plan_for(package_dir)
        assert plan.version == "0.1.1"
        assert plan.version_changed is True
        assert plan.entrypoint == "lib.typ"
        assert tree(package_dir) == before
        assert not plan.outdir.exists()

    def test_missing_srcdir(self, package_dir: Path):
        with pytest.raises(BuildError, match="Source directory not found"):
            plan_for(package_dir, srcdir="nowhere")

    @pytest.mark.parametrize("outdir", [".", "src", ".."])
    def test_outdir_must_not_cover_the_package(self, package_dir: Path, outdir: str):
        before = tree(package_dir)

        with pytest.raises(BuildError, match="would overwrite the package"):
            plan_for(package_dir, outdir=outdir)

        assert tree(package_dir) == before

    def test_template_rewrites_are_planned(self, template_package_dir: Path):
        plan = plan_for(template_package_dir, "0.2.0")
        assert list(plan.rewrites) == ["template/main.typ"]
        assert '"@preview/my-package:0.2.0"' in plan.rewrites["template/main.typ"]


class TestAssemble:
    """Tests for assemble function."""

    def test_basic_build(self, package_dir: Path):
        result = assemble(plan_for(package_dir))
        dist = package_dir / "dist"

        assert result.files == ["typst.toml", "README.md", "LICENSE", "lib.typ"]
        assert sorted(tree(dist)) == ["LICENSE", "README.md", "lib.typ", "typst.toml"]
        assert load_toml(dist / "typst.toml")["package"]["version"] == "0.1.1"
        assert load_toml(package_dir / "typst.toml")["package"]["version"] == "0.1.1"
        assert result.warnings == []

    def test_published_manifest_has_no_tool_table(self, package_dir: Path):
        manifest = package_dir / "typst.toml"
        manifest.write_text(
            manifest.read_text(encoding="utf-8") + '\n[tool.tyler]\nignore = ["*.pdf"]\n', encoding="utf-8"
        )
        assemble(plan_for(package_dir))

        assert "tool" not in load_toml(package_dir / "dist" / "typst.toml")
        assert load_toml(manifest)["tool"]["tyler"]["ignore"] == ["*.pdf"]

    def test_unchanged_version_leaves_source_manifest_alone(self, package_dir: Path):
        manifest = package_dir / "typst.toml"
        original = manifest.read_bytes()
        assemble(plan_for(package_dir, "0.1.0"))
        assert manifest.read_bytes() == original

    def test_build_is_idempotent(self, package_dir: Path):
        (package_dir / "src" / "utils").mkdir()
        (package_dir / "src" / "utils" / "math.typ").write_text("#let two = 2\n", encoding="utf-8")

        first = assemble(plan_for(package_dir, "0.1.1"))
        snapshot = tree(package_dir / "dist")
        second = assemble(plan_for(package_dir, "0.1.1"))

        assert second.files == first.files
        assert tree(package_dir / "dist") == snapshot

    def test_stale_files_are_removed(self, package_dir: Path):
        stale = package_dir / "dist" / "old" / "stale.typ"
        stale.parent.mkdir(parents=True)
        stale.write_text("", encoding="utf-8")

        assemble(plan_for(package_dir))
        assert not stale.exists()
        assert not stale.parent.exists()

    def test_symlinked_outdir_is_preserved(self, package_dir: Path, tmp_path: Path):
        real = tmp_path / "real-dist"
        real.mkdir()
        (real / "stale.typ").write_text("", encoding="utf-8")
        link = package_dir / "dist"
        try:
            link.symlink_to(real, target_is_directory=True)
        except OSError:
            pytest.skip("symlinks are not supported here")

        assemble(plan_for(package_dir))

        assert link.is_symlink()
        assert sorted(tree(real)) == ["LICENSE", "README.md", "lib.typ", "typst.toml"]

    def test_ignore_patterns(self, package_dir: Path):
        src = package_dir / "src"
        (src / "docs").mkdir()
        (src / "docs" / "manual.typ").write_text("", encoding="utf-8")
        (src / "preview.pdf").write_bytes(b"%PDF")

        result = assemble(plan_for(package_dir, ignore="docs,*.pdf"))

        assert "lib.typ" in result.files
        assert sorted(result.ignored) == ["docs", "preview.pdf"]
        assert not (package_dir / "dist" / "docs").exists()
        assert not (package_dir / "dist" / "preview.pdf").exists()

    def test_srcdir_is_workdir(self, package_dir: Path):
        (package_dir / "src" / "lib.typ").rename(package_dir / "lib.typ")
        (package_dir / "src").rmdir()

        result = assemble(plan_for(package_dir, srcdir="."))
        dist = package_dir / "dist"

        assert sorted(result.files) == ["LICENSE", "README.md", "lib.typ", "typst.toml"]
        assert not (dist / "dist").exists()
        assert load_toml(dist / "typst.toml")["package"]["version"] == "0.1.1"

    def test_missing_readme_warns(self, package_dir: Path):
        (package_dir / "README.md").unlink()
        result = assemble(plan_for(package_dir))
        assert any("README.md" in w for w in result.warnings)
        assert "README.md" not in result.files

    def test_template_build(self, template_package_dir: Path):
        result = assemble(plan_for(template_package_dir, "0.2.0"))
        dist = template_package_dir / "dist"

        assert "thumbnail.png" in result.files
        assert (dist / "thumbnail.png").is_file()
        content = (dist / "template" / "main.typ").read_text(encoding="utf-8")
        assert content.startswith('#import "@preview/my-package:0.2.0": *')
        source = (template_package_dir / "src" / "template" / "main.typ").read_text(encoding="utf-8")
        assert source.startswith('#import "../lib.typ": *')

    def test_dry_run_touches_nothing(self, template_package_dir: Path):
        before = tree(template_package_dir)
        dry = assemble(plan_for(template_package_dir, "0.2.0"), dry_run=True)

        assert dry.dry_run is True
        assert tree(template_package_dir) == before
        assert not (template_package_dir / "dist").exists()

        real = assemble(plan_for(template_package_dir, "0.2.0"))
        assert dry.files == real.files


class TestClearDirectory:
    """Tests for clear_directory function."""

    def test_keeps_directory(self, tmp_path: Path):
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "file.txt").write_text("", encoding="utf-8")
        clear_directory(tmp_path)
        assert tmp_path.is_dir()
        assert list(tmp_path.iterdir()) == []
