"""
Tests for publishing — metadata attachment, POM rendering and the
Maven repository writer.
"""

import hashlib
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from localpub.core.constants import PUBLICATIONS_TO_LOCAL_REPOSITORY, PUBLISH_LIFECYCLE_NAME
from localpub.core.errors import ConfigurationError, PublicationValidationError
from localpub.core.maven import layout
from localpub.core.maven.pom import POM_NAMESPACE, build_pom, render_pom
from localpub.core.maven.publisher import publish_to_repository, validate_publication
from localpub.core.maven.repository_metadata import merge_metadata, read_metadata
from localpub.core.models.extension import LocalPublicationExtension
from localpub.core.models.publication import MavenPublication, PomLicense
from localpub.core.plugin import add_metadata
from localpub.core.project import BuildGraph
from localpub.core.publishing import (
    MavenPublishPlugin,
    PublishingExtension,
    publish_all_task_name,
    publish_task_name,
)

NS = {"m": POM_NAMESPACE}


def _extension() -> LocalPublicationExtension:
    ext = LocalPublicationExtension()
    ext.metadata.name = "Core"
    ext.metadata.group_id = "org.example"
    ext.metadata.description = "Core rules"
    ext.metadata.url = "https://example.org/core"
    ext.license.name = "MIT"
    ext.license.url = "https://opensource.org/licenses/MIT"
    ext.developer.id = "jdoe"
    ext.developer.organization_url = "https://example.org"
    ext.scm.connection = "scm:git:https://git.example.org/core.git"
    return ext


def _jar(tmp_path: Path, name: str = "core.jar", content: bytes = b"jar") -> Path:
    path = tmp_path / "dist" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


# ── Metadata attachment ──────────────────────────────────────────────


class TestAddMetadata:
    def test_absent_name_taken_from_extension(self):
        pub = MavenPublication(name="maven")
        add_metadata(pub, _extension())
        assert pub.pom.name == "Core"

    def test_existing_name_kept(self):
        pub = MavenPublication(name="maven")
        pub.pom.name = "Custom"
        add_metadata(pub, _extension())
        assert pub.pom.name == "Custom"

    def test_group_description_url_always_overwritten(self):
        pub = MavenPublication(name="maven", group_id="com.other")
        pub.pom.description = "mine"
        pub.pom.url = "https://mine.example"
        add_metadata(pub, _extension())
        assert pub.group_id == "org.example"
        assert pub.pom.description == "Core rules"
        assert pub.pom.url == "https://example.org/core"

    def test_empty_group_overwrites_existing(self):
        pub = MavenPublication(name="maven", group_id="com.other")
        add_metadata(pub, LocalPublicationExtension())
        assert pub.group_id == ""

    def test_exactly_one_license_and_developer(self):
        pub = MavenPublication(name="maven")
        pub.pom.licenses = [PomLicense(name="A"), PomLicense(name="B")]
        add_metadata(pub, _extension())
        assert [lic.name for lic in pub.pom.licenses] == ["MIT"]
        assert len(pub.pom.developers) == 1
        assert pub.pom.developers[0].id == "jdoe"
        assert pub.pom.scm.connection == "scm:git:https://git.example.org/core.git"

    def test_default_extension_keeps_publication_name(self):
        pub = MavenPublication(name="maven", group_id="com.other")
        pub.pom.name = "core"
        add_metadata(pub, LocalPublicationExtension())
        assert pub.pom.name == "core"
        assert (pub.group_id, pub.pom.description, pub.pom.url) == ("", "", "")

    def test_unset_extension_writes_empty_blocks(self):
        pub = MavenPublication(name="maven")
        add_metadata(pub, LocalPublicationExtension())
        assert pub.pom.name == ""
        assert pub.pom.licenses[0].name == ""
        assert pub.pom.developers[0].name == ""


class TestPublicationFinalization:
    def test_metadata_attached_once_at_finalize(self, graph: BuildGraph, make_project):
        project = make_project("core")
        publishing = project.extensions.get_by_type(PublishingExtension)
        pub = publishing.publications.find("maven")
        assert pub.group_id == ""

        publishing.publications.finalize(pub)
        assert pub.group_id == "org.example"

        pub.group_id = "changed"
        publishing.publications.finalize(pub)
        assert pub.group_id == "changed"

    def test_extension_change_before_finalize_is_seen(self, make_project):
        project = make_project("core")
        ext = project.extensions.get_by_type(LocalPublicationExtension)
        ext.metadata.group_id = "org.late"
        publishing = project.extensions.get_by_type(PublishingExtension)
        pub = publishing.publications.finalize(publishing.publications.find("maven"))
        assert pub.group_id == "org.late"


# ── Publish tasks ────────────────────────────────────────────────────


class TestPublishTasks:
    def test_task_names(self):
        assert publish_task_name("maven", "local") == "publishMavenPublicationToLocalRepository"
        assert publish_all_task_name("local") == PUBLICATIONS_TO_LOCAL_REPOSITORY

    def test_plugin_registers_tasks(self, make_project):
        project = make_project("core")
        names = project.tasks.names()
        assert PUBLISH_LIFECYCLE_NAME in names
        assert PUBLICATIONS_TO_LOCAL_REPOSITORY in names
        assert "publishMavenPublicationToLocalRepository" in names

    def test_publication_added_later_gets_task(self, make_project):
        project = make_project("core")
        publishing = project.extensions.get_by_type(PublishingExtension)
        publishing.publications.create("docs", artifact_id="core-docs", version="1.0.0")
        aggregate = project.tasks.named(PUBLICATIONS_TO_LOCAL_REPOSITORY)
        deps = [t.name for t in aggregate.task_dependencies()]
        assert deps == [
            "publishMavenPublicationToLocalRepository",
            "publishDocsPublicationToLocalRepository",
        ]

    def test_lifecycle_depends_on_every_repository(self, graph: BuildGraph, tmp_path: Path):
        project = graph.create_project("core")
        project.plugins.apply(MavenPublishPlugin)
        publishing = project.extensions.get_by_type(PublishingExtension)
        publishing.repositories.maven("a", tmp_path / "a")
        publishing.repositories.maven("b", tmp_path / "b")
        lifecycle = project.tasks.named(PUBLISH_LIFECYCLE_NAME)
        assert [t.name for t in lifecycle.task_dependencies()] == [
            "publishAllPublicationsToARepository",
            "publishAllPublicationsToBRepository",
        ]

    def test_duplicate_publication_rejected(self, make_project):
        project = make_project("core")
        publishing = project.extensions.get_by_type(PublishingExtension)
        with pytest.raises(ConfigurationError, match="already declared"):
            publishing.publications.create("maven")

    def test_plugin_applied_once(self, make_project):
        project = make_project("core")
        project.plugins.apply(MavenPublishPlugin)
        assert project.plugins.has_plugin(MavenPublishPlugin)


# ── POM ──────────────────────────────────────────────────────────────


class TestPom:
    def test_full_pom(self):
        pub = MavenPublication(name="maven", artifact_id="core", version="1.0.0")
        pub.pom.packaging = "jar"
        add_metadata(pub, _extension())
        root = ET.fromstring(render_pom(pub))

        assert root.tag == f"{{{POM_NAMESPACE}}}project"
        assert root.findtext("m:modelVersion", namespaces=NS) == "4.0.0"
        assert root.findtext("m:groupId", namespaces=NS) == "org.example"
        assert root.findtext("m:name", namespaces=NS) == "Core"
        assert root.findtext("m:licenses/m:license/m:name", namespaces=NS) == "MIT"
        assert root.findtext("m:developers/m:developer/m:organizationUrl", namespaces=NS) == (
            "https://example.org"
        )
        assert root.findtext("m:scm/m:connection", namespaces=NS).startswith("scm:git:")

    def test_empty_fields_omitted(self):
        pub = MavenPublication(name="maven", group_id="g", artifact_id="a", version="1")
        root = build_pom(pub)
        tags = [child.tag for child in root]
        assert tags == ["modelVersion", "groupId", "artifactId", "version"]

    def test_xml_declaration(self):
        pub = MavenPublication(name="maven", group_id="g", artifact_id="a", version="1")
        assert render_pom(pub).startswith('<?xml version="1.0" encoding="UTF-8"?>')


# ── Repository writer ────────────────────────────────────────────────


class TestRepositoryWriter:
    def _pub(self, tmp_path: Path, version: str = "1.0.0") -> MavenPublication:
        pub = MavenPublication(name="maven", group_id="org.example", artifact_id="core", version=version)
        pub.artifact(_jar(tmp_path))
        return pub

    def test_layout(self, tmp_path: Path):
        repo = tmp_path / "repo"
        result = publish_to_repository(self._pub(tmp_path), repo)

        target = repo / "org" / "example" / "core" / "1.0.0"
        assert result.version_dir == target
        assert (target / "core-1.0.0.jar").read_bytes() == b"jar"
        assert (target / "core-1.0.0.pom").is_file()
        assert (repo / "org" / "example" / "core" / layout.METADATA_FILE).is_file()

    def test_checksums(self, tmp_path: Path):
        repo = tmp_path / "repo"
        publish_to_repository(self._pub(tmp_path), repo)
        jar = repo / "org" / "example" / "core" / "1.0.0" / "core-1.0.0.jar"
        assert (jar.parent / "core-1.0.0.jar.sha1").read_text() == hashlib.sha1(b"jar").hexdigest()
        assert (jar.parent / "core-1.0.0.jar.md5").is_file()
        assert (jar.parent / "core-1.0.0.pom.sha256").is_file()

    def test_classifier_file_name(self, tmp_path: Path):
        pub = self._pub(tmp_path)
        pub.artifact(_jar(tmp_path, "core-sources.jar"), classifier="sources")
        result = publish_to_repository(pub, tmp_path / "repo")
        assert (result.version_dir / "core-1.0.0-sources.jar").is_file()

    def test_metadata_merges_versions(self, tmp_path: Path):
        repo = tmp_path / "repo"
        publish_to_repository(self._pub(tmp_path, "1.0.0"), repo)
        publish_to_repository(self._pub(tmp_path, "1.1.0-SNAPSHOT"), repo)

        meta = read_metadata(layout.metadata_path(repo, "org.example", "core"), "org.example", "core")
        assert meta.versions == ["1.0.0", "1.1.0-SNAPSHOT"]
        assert meta.latest == "1.1.0-SNAPSHOT"
        assert meta.release == "1.0.0"

    def test_republish_same_version_listed_once(self, tmp_path: Path):
        path = tmp_path / layout.METADATA_FILE
        merge_metadata(path, "g", "a", "1.0")
        meta = merge_metadata(path, "g", "a", "1.0")
        assert meta.versions == ["1.0"]

    def test_corrupt_metadata_rewritten(self, tmp_path: Path):
        path = tmp_path / layout.METADATA_FILE
        path.write_text("<metadata><versioning>")
        meta = merge_metadata(path, "g", "a", "2.0")
        assert meta.versions == ["2.0"]
        assert "<version>2.0</version>" in path.read_text()

    @pytest.mark.parametrize("field", ["group_id", "artifact_id", "version"])
    def test_empty_coordinate_rejected(self, tmp_path: Path, field: str):
        pub = self._pub(tmp_path)
        setattr(pub, field, "")
        with pytest.raises(PublicationValidationError, match="cannot be empty"):
            validate_publication(pub)

    def test_missing_artifact_rejected(self, tmp_path: Path):
        pub = MavenPublication(name="maven", group_id="g", artifact_id="a", version="1")
        pub.artifact(tmp_path / "nope.jar")
        with pytest.raises(PublicationValidationError, match="not found"):
            validate_publication(pub)

    def test_duplicate_artifact_rejected(self, tmp_path: Path):
        pub = self._pub(tmp_path)
        pub.artifact(_jar(tmp_path, "other.jar"))
        with pytest.raises(PublicationValidationError, match="multiple artifacts"):
            validate_publication(pub)

    def test_publish_task_fails_without_group(self, make_project):
        from localpub.core.use_cases.run import run_tasks

        project = make_project("core", group_id="")
        result = run_tasks([":core:publish"], graph=project.graph, persist=False)
        assert result.report.failed == 1
        assert "groupId cannot be empty" in result.error
