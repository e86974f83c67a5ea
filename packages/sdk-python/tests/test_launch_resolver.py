"""Tests for resolver.py - the launch target fallback chain."""

import threading
from pathlib import Path
from typing import List, Optional

import pytest

from imagesmith_common import AmbiguousResolutionError, UndeterminedLaunchTargetError
from imagesmith_schema import LaunchConfig
from imagesmith_sdk.launch.archive_inspector import FatArchiveInspector, FatArchiveResult
from imagesmith_sdk.launch.class_scanner import StaticClassScanner
from imagesmith_sdk.launch.project import ProjectContext
from imagesmith_sdk.launch.resolver import (
    ArchiveDetector,
    LaunchDescriptor,
    LaunchSource,
    LaunchTargetResolver,
    MainClassDetector,
    UndeterminedLaunchTarget,
)


class FakeArchiveDetector:
    def __init__(self, result: Optional[FatArchiveResult] = None):
        self.result = result
        self.calls = 0

    def scan(self) -> Optional[FatArchiveResult]:
        self.calls += 1
        return self.result


class FakeClassDetector:
    def __init__(self, classes: Optional[List[str]] = None):
        self.classes = classes or []
        self.calls = 0

    def find_main_classes(self) -> List[str]:
        self.calls += 1
        return list(self.classes)


@pytest.fixture
def project():
    return ProjectContext(base_directory=Path("/the/project"), version="1.33.7-SNAPSHOT")


@pytest.fixture
def fat_archive():
    return FatArchiveResult(
        archive_file=Path("/the/project/target/app.jar"),
        main_class="the.detected.MainClass",
    )


def make_resolver(project, main_class=None, archive=None, classes=None, strict=False):
    return LaunchTargetResolver(
        LaunchConfig(main_class=main_class),
        project,
        archive_detector=FakeArchiveDetector(archive),
        class_detector=FakeClassDetector(classes),
        strict=strict,
    )


class TestProtocols:
    def test_fakes_satisfy_protocols(self):
        assert isinstance(FakeArchiveDetector(), ArchiveDetector)
        assert isinstance(FakeClassDetector(), MainClassDetector)

    def test_real_detectors_satisfy_protocols(self, tmp_path):
        assert isinstance(FatArchiveInspector(tmp_path), ArchiveDetector)
        assert isinstance(StaticClassScanner(tmp_path), MainClassDetector)


class TestConfigStage:
    def test_config_wins(self, project, fat_archive):
        resolver = make_resolver(
            project, main_class="the.main.ClassName", archive=fat_archive, classes=["other.Main"]
        )

        result = resolver.resolve()

        assert result == LaunchDescriptor(
            main_class="the.main.ClassName", inject_env=True, source=LaunchSource.CONFIG
        )

    def test_config_short_circuits(self, project, fat_archive):
        archives = FakeArchiveDetector(fat_archive)
        classes = FakeClassDetector(["other.Main"])
        resolver = LaunchTargetResolver(
            LaunchConfig(main_class="the.main.ClassName"),
            project,
            archive_detector=archives,
            class_detector=classes,
        )

        resolver.resolve()

        assert archives.calls == 0
        assert classes.calls == 0

    def test_config_env(self, project):
        result = make_resolver(project, main_class="the.main.ClassName").resolve()

        assert result.env() == {"JAVA_MAIN_CLASS": "the.main.ClassName"}

    def test_none_config(self, project):
        resolver = LaunchTargetResolver(
            None,
            project,
            archive_detector=FakeArchiveDetector(),
            class_detector=FakeClassDetector(["the.detected.MainClass"]),
        )

        assert resolver.resolve().source is LaunchSource.SCAN


class TestArchiveStage:
    def test_archive_main_class_not_injected(self, project, fat_archive):
        result = make_resolver(project, archive=fat_archive).resolve()

        assert isinstance(result, LaunchDescriptor)
        assert result.main_class == "the.detected.MainClass"
        assert result.inject_env is False
        assert result.source is LaunchSource.ARCHIVE
        assert result.archive is fat_archive
        assert result.env() == {}

    @pytest.mark.parametrize("classes", [[], ["one.Main"], ["one.Main", "two.Main"]])
    def test_archive_wins_regardless_of_scan(self, project, fat_archive, classes):
        detector = FakeClassDetector(classes)
        resolver = LaunchTargetResolver(
            LaunchConfig(),
            project,
            archive_detector=FakeArchiveDetector(fat_archive),
            class_detector=detector,
        )

        result = resolver.resolve()

        assert result.main_class == "the.detected.MainClass"
        assert result.inject_env is False
        assert detector.calls == 0


class TestScanStage:
    def test_unique_class_injected(self, project):
        result = make_resolver(project, classes=["the.detected.MainClass"]).resolve()

        assert result == LaunchDescriptor(
            main_class="the.detected.MainClass", inject_env=True, source=LaunchSource.SCAN
        )
        assert result.env() == {"JAVA_MAIN_CLASS": "the.detected.MainClass"}

    def test_no_class_undetermined(self, project):
        result = make_resolver(project, classes=[]).resolve()

        assert isinstance(result, UndeterminedLaunchTarget)
        assert result.stages_tried == ("config", "archive", "scan")
        assert result.candidates == ()
        assert "no main class found" in result.message

    def test_several_classes_undetermined(self, project):
        result = make_resolver(project, classes=["a.Main", "b.Main"]).resolve()

        assert isinstance(result, UndeterminedLaunchTarget)
        assert result.candidates == ("a.Main", "b.Main")
        assert "a.Main, b.Main" in result.message

    def test_several_classes_strict(self, project):
        with pytest.raises(AmbiguousResolutionError):
            make_resolver(project, classes=["a.Main", "b.Main"], strict=True).resolve()

    def test_concurrent_resolves_keep_own_candidates(self, project):
        """Overlapping resolve() calls on one resolver report their own scan results."""
        barrier = threading.Barrier(2, timeout=5)

        class PerThreadDetector:
            def find_main_classes(self) -> List[str]:
                name = threading.current_thread().name
                barrier.wait()
                return [f"{name}.One", f"{name}.Two"]

        resolver = LaunchTargetResolver(
            LaunchConfig(),
            project,
            archive_detector=FakeArchiveDetector(),
            class_detector=PerThreadDetector(),
        )
        results = {}

        def run():
            results[threading.current_thread().name] = resolver.resolve()

        threads = [threading.Thread(target=run, name=name) for name in ("first", "second")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results["first"].candidates == ("first.One", "first.Two")
        assert results["second"].candidates == ("second.One", "second.Two")


class TestResolveOrRaise:
    def test_returns_descriptor(self, project):
        descriptor = make_resolver(project, main_class="the.main.ClassName").resolve_or_raise()

        assert descriptor.main_class == "the.main.ClassName"

    def test_raises_when_undetermined(self, project):
        with pytest.raises(UndeterminedLaunchTargetError) as exc_info:
            make_resolver(project, classes=["a.Main", "b.Main"]).resolve_or_raise()

        assert exc_info.value.candidates == ["a.Main", "b.Main"]
        assert exc_info.value.code == "UNDETERMINED_LAUNCH_TARGET"


class TestFilesystemDefaults:
    """Resolver wired to the real inspector and scanner."""

    def test_fat_jar_in_target(self, project_dir, make_archive, make_class):
        make_archive(project_dir / "target" / "app.jar", main_class="org.example.FromJar", padding=64)
        make_class(project_dir / "target" / "classes", "org.example.FromScan")

        resolver = LaunchTargetResolver(LaunchConfig(), ProjectContext(project_dir))
        result = resolver.resolve()

        assert result.main_class == "org.example.FromJar"
        assert result.inject_env is False
        assert result.archive.relative_to(project_dir) == Path("target/app.jar")

    def test_scan_when_no_archive(self, project_dir, make_class):
        make_class(project_dir / "target" / "classes", "org.example.FromScan")

        result = LaunchTargetResolver(LaunchConfig(), ProjectContext(project_dir)).resolve()

        assert result.main_class == "org.example.FromScan"
        assert result.inject_env is True

    def test_missing_output_directory(self, tmp_path):
        result = LaunchTargetResolver(LaunchConfig(), ProjectContext(tmp_path)).resolve()

        assert isinstance(result, UndeterminedLaunchTarget)

    def test_each_resolve_rescans(self, project_dir, make_class):
        resolver = LaunchTargetResolver(LaunchConfig(), ProjectContext(project_dir))
        assert isinstance(resolver.resolve(), UndeterminedLaunchTarget)

        make_class(project_dir / "target" / "classes", "org.example.Late")

        assert resolver.resolve().main_class == "org.example.Late"


class TestProjectContext:
    def test_defaults(self):
        project = ProjectContext(Path("/p"))

        assert project.output_directory == Path("/p/target")
        assert project.classes_directory == Path("/p/target/classes")

    def test_relative_directories(self):
        project = ProjectContext(Path("/p"), output_directory="build/libs", classes_directory="build/classes")

        assert project.output_directory == Path("/p/build/libs")
        assert project.classes_directory == Path("/p/build/classes")

    def test_absolute_directories(self):
        project = ProjectContext("/p", output_directory="/out")

        assert project.base_directory == Path("/p")
        assert project.classes_directory == Path("/out/classes")
