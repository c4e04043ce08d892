"""Tests for plugbuild.orchestrator."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List

import pytest

from plugbuild.bundler import BundleSyntaxError
from plugbuild.config import BuildConfig, default_config
from plugbuild.models import BuildResult, ModuleRegistry
from plugbuild.orchestrator import Orchestrator
from tests._fixtures.project_builder import ProjectBuilder


class RecordingBuilder:
    """Test double that records which entities were built."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls: List[str] = []
        self.threads: set[str] = set()
        self._lock = threading.Lock()

    def __call__(
        self, entity: str, registry: ModuleRegistry, config: BuildConfig
    ) -> BuildResult:
        with self._lock:
            self.calls.append(entity)
            self.threads.add(threading.current_thread().name)
        if entity == self.fail_on:
            raise RuntimeError(f"{entity} exploded")
        descriptor = registry[entity]
        return BuildResult(
            entity_name=entity,
            destination_path=descriptor.destination_path,
            sourcemap_path=descriptor.destination_path.with_suffix(".js.map"),
        )


def test_prepare_builds_registry_from_source_dir(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {"alert.js": "export default 1\n", "scroll-spy.js": "export default 2\n"}
    )

    registry = Orchestrator().prepare(project_builder.config())

    assert list(registry) == ["Alert", "ScrollSpy"]
    assert registry["ScrollSpy"].display_name == "scroll-spy.js"


def test_prepare_propagates_missing_source_dir(project_builder: ProjectBuilder) -> None:
    with pytest.raises(FileNotFoundError):
        Orchestrator().prepare(project_builder.config())


def test_run_builds_every_module_off_the_event_loop(project_builder: ProjectBuilder) -> None:
    project_builder.write({"alert.js": "", "modal.js": "", "tab.js": ""})
    builder = RecordingBuilder()

    report = Orchestrator(builder=builder).run(project_builder.config())

    assert sorted(builder.calls) == ["Alert", "Modal", "Tab"]
    assert [result.entity_name for result in report.results] == ["Alert", "Modal", "Tab"]
    assert threading.main_thread().name not in builder.threads
    assert report.elapsed >= 0


def test_run_reraises_first_failure_unwrapped(project_builder: ProjectBuilder) -> None:
    project_builder.write({"alert.js": "", "modal.js": ""})
    builder = RecordingBuilder(fail_on="Modal")

    with pytest.raises(RuntimeError, match="Modal exploded"):
        Orchestrator(builder=builder).run(project_builder.config())


def test_run_with_no_modules(project_builder: ProjectBuilder) -> None:
    project_builder.source_dir.mkdir(parents=True)

    report = Orchestrator(builder=RecordingBuilder()).run(project_builder.config())

    assert report.results == []


def test_end_to_end_build_writes_artifacts(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "alert.js": "class Alert {}\nexport default Alert\n",
            "modal.js": """
                import Alert from './alert'
                class Modal extends Alert {}
                export default Modal
            """,
        }
    )

    report = Orchestrator().run(project_builder.config())

    dist = project_builder.config().root / "js" / "dist"
    assert sorted(path.name for path in dist.iterdir()) == [
        "alert.js",
        "alert.js.map",
        "modal.js",
        "modal.js.map",
    ]
    for name in ("alert.js", "modal.js"):
        assert (dist / name).read_text(encoding="utf-8").startswith("/*!")
    modal = (dist / "modal.js").read_text(encoding="utf-8")
    assert "global.Modal = factory(global.Alert)" in modal
    assert {result.entity_name for result in report.results} == {"Alert", "Modal"}


def test_end_to_end_syntax_error_aborts(project_builder: ProjectBuilder) -> None:
    project_builder.write({"alert.js": "export default 1\n", "broken.js": "const = ;\n"})

    with pytest.raises(BundleSyntaxError):
        Orchestrator().run(project_builder.config())


def test_missing_module_path_is_reported(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Orchestrator().run(default_config(tmp_path / "nowhere"))
