"""
POM rendering — serialize a publication into a pom.xml document.

Empty descriptive fields are omitted rather than written as empty
elements. Coordinates are always written.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from localpub.core.models.publication import MavenPublication

POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
POM_SCHEMA_LOCATION = (
    "http://maven.apache.org/POM/4.0.0 https://maven.apache.org/xsd/maven-4.0.0.xsd"
)
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
MODEL_VERSION = "4.0.0"


def _text(parent: ET.Element, tag: str, value: str | None) -> None:
    if value:
        ET.SubElement(parent, tag).text = value


def build_pom(publication: MavenPublication) -> ET.Element:
    """Build the ``<project>`` element tree for a publication."""
    project = ET.Element(
        "project",
        {
            "xmlns": POM_NAMESPACE,
            "xmlns:xsi": XSI_NAMESPACE,
            "xsi:schemaLocation": POM_SCHEMA_LOCATION,
        },
    )
    ET.SubElement(project, "modelVersion").text = MODEL_VERSION
    ET.SubElement(project, "groupId").text = publication.group_id
    ET.SubElement(project, "artifactId").text = publication.artifact_id
    ET.SubElement(project, "version").text = publication.version

    pom = publication.pom
    _text(project, "packaging", pom.packaging)
    _text(project, "name", pom.name)
    _text(project, "description", pom.description)
    _text(project, "url", pom.url)

    if pom.licenses:
        licenses = ET.SubElement(project, "licenses")
        for lic in pom.licenses:
            node = ET.SubElement(licenses, "license")
            _text(node, "name", lic.name)
            _text(node, "url", lic.url)
            _text(node, "distribution", lic.distribution)

    if pom.developers:
        developers = ET.SubElement(project, "developers")
        for dev in pom.developers:
            node = ET.SubElement(developers, "developer")
            _text(node, "id", dev.id)
            _text(node, "name", dev.name)
            _text(node, "organization", dev.organization)
            _text(node, "organizationUrl", dev.organization_url)

    if pom.scm is not None:
        scm = ET.SubElement(project, "scm")
        _text(scm, "connection", pom.scm.connection)
        _text(scm, "developerConnection", pom.scm.developer_connection)
        _text(scm, "url", pom.scm.url)

    return project


def render_pom(publication: MavenPublication) -> str:
    """Serialize a publication's POM to an XML string."""
    root = build_pom(publication)
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'
