"""Tests for build file discovery."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from buildprep.dockerfile import DockerfileSearchOpts, search_dockerfile
from buildprep.errors import EscapeDetectedError, MissingSourceDirectoryError, PathError


@pytest.fixture
def source(tmp_path: Path) -> Path:
    src = tmp_path / "source"
    src.mkdir()
    return src


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("FROM scratch\n")
    return path


class TestSearchDefaults:
    """Auto-detection of Containerfile and Dockerfile."""

    def test_missing_source_dir(self) -> None:
        with pytest.raises(MissingSourceDirectoryError):
            search_dockerfile(DockerfileSearchOpts(source_dir=""))

    def test_missing_source_is_path_error(self, tmp_path: Path) -> None:
        with pytest.raises(PathError):
            search_dockerfile(DockerfileSearchOpts(source_dir=str(tmp_path / "absent")))

    def test_empty_source_returns_none(self, source: Path) -> None:
        assert search_dockerfile(DockerfileSearchOpts(source_dir=str(source))) is None

    def test_finds_dockerfile(self, source: Path) -> None:
        dockerfile = _touch(source / "Dockerfile")
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(source)))
        assert result == dockerfile.resolve()

    def test_containerfile_wins_over_dockerfile(self, source: Path) -> None:
        _touch(source / "Dockerfile")
        containerfile = _touch(source / "Containerfile")
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(source)))
        assert result == containerfile.resolve()

    def test_source_containerfile_wins_over_context_dockerfile(self, source: Path) -> None:
        _touch(source / "ctx" / "Dockerfile")
        containerfile = _touch(source / "Containerfile")
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(source), context_dir="ctx"))
        assert result == containerfile.resolve()

    def test_context_takes_precedence(self, source: Path) -> None:
        _touch(source / "Dockerfile")
        in_context = _touch(source / "ctx" / "Dockerfile")
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(source), context_dir="ctx"))
        assert result == in_context.resolve()

    def test_falls_back_to_source_root(self, source: Path) -> None:
        (source / "ctx").mkdir()
        dockerfile = _touch(source / "Dockerfile")
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(source), context_dir="ctx"))
        assert result == dockerfile.resolve()

    def test_empty_context_defaults_to_dot(self, source: Path) -> None:
        dockerfile = _touch(source / "Dockerfile")
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(source), context_dir=""))
        assert result == dockerfile.resolve()

    def test_relative_source(self, source: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        dockerfile = _touch(source / "Containerfile")
        monkeypatch.chdir(source.parent)
        result = search_dockerfile(DockerfileSearchOpts(source_dir="source"))
        assert result == dockerfile.resolve()

    def test_directory_named_dockerfile_is_returned_as_path(self, source: Path) -> None:
        (source / "Dockerfile").mkdir()
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(source)))
        assert result == (source / "Dockerfile").resolve()


class TestSearchExplicit:
    """Explicit build file names."""

    def test_explicit_in_context(self, source: Path) -> None:
        _touch(source / "build.Dockerfile")
        in_context = _touch(source / "ctx" / "build.Dockerfile")
        opts = DockerfileSearchOpts(
            source_dir=str(source), context_dir="ctx", dockerfile="build.Dockerfile"
        )
        assert search_dockerfile(opts) == in_context.resolve()

    def test_explicit_in_source(self, source: Path) -> None:
        (source / "ctx").mkdir()
        in_source = _touch(source / "docker" / "Dockerfile.prod")
        opts = DockerfileSearchOpts(
            source_dir=str(source), context_dir="ctx", dockerfile="docker/Dockerfile.prod"
        )
        assert search_dockerfile(opts) == in_source.resolve()

    def test_explicit_not_found(self, source: Path) -> None:
        _touch(source / "Dockerfile")
        opts = DockerfileSearchOpts(source_dir=str(source), dockerfile="Containerfile.missing")
        assert search_dockerfile(opts) is None

    def test_explicit_does_not_fall_back_to_defaults(self, source: Path) -> None:
        _touch(source / "Containerfile")
        opts = DockerfileSearchOpts(source_dir=str(source), dockerfile="Dockerfile")
        assert search_dockerfile(opts) is None

    def test_explicit_parent_segments_escape(self, source: Path) -> None:
        _touch(source.parent / "outside" / "Dockerfile")
        opts = DockerfileSearchOpts(source_dir=str(source), dockerfile="../outside/Dockerfile")
        with pytest.raises(EscapeDetectedError):
            search_dockerfile(opts)

    def test_explicit_absolute_path_stays_under_source(self, source: Path) -> None:
        inside = _touch(source / "abs" / "Dockerfile")
        opts = DockerfileSearchOpts(source_dir=str(source), dockerfile="/abs/Dockerfile")
        assert search_dockerfile(opts) == inside.resolve()


class TestSymlinks:
    """Containment checks against symlinked paths."""

    def test_source_may_be_symlink(self, tmp_path: Path) -> None:
        real = tmp_path / "real"
        dockerfile = _touch(real / "Dockerfile")
        link = tmp_path / "link"
        link.symlink_to(real)
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(link)))
        assert result == dockerfile.resolve()

    def test_context_symlink_escape(self, tmp_path: Path, source: Path) -> None:
        outside = tmp_path / "outside"
        _touch(outside / "Dockerfile")
        (source / "ctx").symlink_to(outside)

        with pytest.raises(EscapeDetectedError) as exc_info:
            search_dockerfile(DockerfileSearchOpts(source_dir=str(source), context_dir="ctx"))
        assert exc_info.value.path == str((outside / "Dockerfile").resolve())
        assert exc_info.value.boundary == str(source.resolve())

    def test_dockerfile_symlink_escape(self, tmp_path: Path, source: Path) -> None:
        outside = _touch(tmp_path / "elsewhere" / "Dockerfile")
        (source / "Dockerfile").symlink_to(outside)
        with pytest.raises(EscapeDetectedError):
            search_dockerfile(DockerfileSearchOpts(source_dir=str(source)))

    def test_symlink_inside_source_is_allowed(self, source: Path) -> None:
        target = _touch(source / "docker" / "Dockerfile")
        (source / "Dockerfile").symlink_to(target)
        result = search_dockerfile(DockerfileSearchOpts(source_dir=str(source)))
        assert result == target.resolve()

    def test_dangling_symlink_is_not_found(self, source: Path) -> None:
        (source / "Dockerfile").symlink_to(source / "nowhere")
        assert search_dockerfile(DockerfileSearchOpts(source_dir=str(source))) is None


class TestLogging:
    """Logger injection."""

    def test_uses_given_logger(self, source: Path, caplog: pytest.LogCaptureFixture) -> None:
        _touch(source / "Dockerfile")
        custom = logging.getLogger("custom.locator")
        with caplog.at_level(logging.DEBUG, logger="custom.locator"):
            search_dockerfile(DockerfileSearchOpts(source_dir=str(source)), logger=custom)
        assert any(r.name == "custom.locator" for r in caplog.records)
        assert "Found build file" in caplog.text
