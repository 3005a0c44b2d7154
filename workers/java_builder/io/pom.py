"""
pom.xml serialization and parsing.

Writer output layout:
    <project xmlns=... xmlns:xsi=... xsi:schemaLocation=...>
        <groupId/> <artifactId/> <version/>
        [<build><plugins><plugin> maven-jar-plugin ... <mainClass/>]
        <dependencies><dependency> groupId / artifactId / version ...

Every leaf value is written as a CDATA section so coordinates and class
names round-trip verbatim. The parser is namespace-agnostic and also reads
hand-written descriptors (parent inheritance, scopes, sourceDirectory).
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Iterator, List, Optional
from xml.dom import minidom

from java_builder.errors import DescriptorParseError, SerializationError
from java_builder.io.schema import Coordinate, ProjectDescriptor
from java_builder.policy.profile import BuildProfile

logger = logging.getLogger(__name__)

POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
POM_SCHEMA_LOCATION = f"{POM_NAMESPACE} http://maven.apache.org/xsd/maven-4.0.0.xsd"


# ── Writing ──────────────────────────────────────────────────────────────────

def _append(doc: minidom.Document, parent, tag: str, content: Optional[str] = None):
    child = doc.createElement(tag)
    if content is not None:
        child.appendChild(doc.createCDATASection(content))
    parent.appendChild(child)
    return child


def render_pom(descriptor: ProjectDescriptor, profile: BuildProfile | None = None) -> bytes:
    """
    Serialize *descriptor* into UTF-8 pom.xml bytes.

    Raises
    ------
    SerializationError
        If a value cannot be represented (e.g. contains ``]]>``).
    """
    if profile is None:
        profile = BuildProfile.v1()

    doc = minidom.getDOMImplementation().createDocument(None, "project", None)
    project = doc.documentElement
    project.setAttribute("xmlns", POM_NAMESPACE)
    project.setAttribute("xmlns:xsi", XSI_NAMESPACE)
    project.setAttribute("xsi:schemaLocation", POM_SCHEMA_LOCATION)

    coordinate = descriptor.coordinate
    _append(doc, project, "groupId", coordinate.group_id)
    _append(doc, project, "artifactId", coordinate.artifact_id)
    _append(doc, project, "version", coordinate.version)

    if descriptor.main_class is not None:
        build = _append(doc, project, "build")
        plugins = _append(doc, build, "plugins")
        plugin = _append(doc, plugins, "plugin")
        _append(doc, plugin, "artifactId", profile.packaging_plugin)
        configuration = _append(doc, plugin, "configuration")
        archive = _append(doc, configuration, "archive")
        manifest = _append(doc, archive, "manifest")
        _append(doc, manifest, "mainClass", descriptor.main_class)

    dependencies = _append(doc, project, "dependencies")
    for dependency in descriptor.dependencies:
        dep = _append(doc, dependencies, "dependency")
        _append(doc, dep, "groupId", dependency.group_id)
        _append(doc, dep, "artifactId", dependency.artifact_id)
        _append(doc, dep, "version", dependency.version)
        if dependency.scope is not None:
            _append(doc, dep, "scope", dependency.scope)

    try:
        return doc.toprettyxml(indent=profile.indent, encoding="UTF-8")
    except ValueError as e:
        raise SerializationError(
            f"Cannot serialize descriptor for {coordinate}: {e}"
        ) from e
    finally:
        doc.unlink()


# ── Parsing ──────────────────────────────────────────────────────────────────

def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: Optional[ET.Element], name: str) -> Iterator[ET.Element]:
    if element is None:
        return
    for child in element:
        if isinstance(child.tag, str) and _local(child.tag) == name:
            yield child


def _child(element: Optional[ET.Element], *path: str) -> Optional[ET.Element]:
    for name in path:
        element = next(_children(element, name), None)
        if element is None:
            return None
    return element


def _text(element: Optional[ET.Element], *path: str) -> Optional[str]:
    node = _child(element, *path)
    if node is None or node.text is None:
        return None
    # single-line values (every rendered CDATA leaf) are kept verbatim;
    # hand-wrapped multi-line values are trimmed
    text = node.text
    return text.strip() if "\n" in text else text


def _find_main_class(root: ET.Element, profile: BuildProfile) -> Optional[str]:
    for plugin in _children(_child(root, "build", "plugins"), "plugin"):
        if _text(plugin, "artifactId") != profile.packaging_plugin:
            continue
        main_class = _text(plugin, "configuration", "archive", "manifest", "mainClass")
        if main_class:
            return main_class
    return None


def parse_pom(data: bytes, profile: BuildProfile | None = None) -> ProjectDescriptor:
    """
    Parse pom.xml bytes into a ProjectDescriptor.

    ``groupId`` and ``version`` fall back to the ``<parent>`` block when the
    project does not declare its own.

    Raises
    ------
    DescriptorParseError
        Malformed XML, wrong root element, or missing coordinates.
    """
    if profile is None:
        profile = BuildProfile.v1()

    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise DescriptorParseError(f"Malformed pom.xml: {e}") from e

    if _local(root.tag) != "project":
        raise DescriptorParseError(f"Expected <project> root, got <{_local(root.tag)}>")

    artifact_id = _text(root, "artifactId")
    group_id = _text(root, "groupId") or _text(root, "parent", "groupId")
    version = _text(root, "version") or _text(root, "parent", "version")
    if not artifact_id:
        raise DescriptorParseError("pom.xml is missing <artifactId>")
    if not group_id:
        raise DescriptorParseError(f"pom.xml for {artifact_id} is missing <groupId>")
    if not version:
        raise DescriptorParseError(f"pom.xml for {artifact_id} is missing <version>")

    dependencies: List[Coordinate] = []
    for dep in _children(_child(root, "dependencies"), "dependency"):
        dep_group = _text(dep, "groupId")
        dep_artifact = _text(dep, "artifactId")
        dep_version = _text(dep, "version")
        if not (dep_group and dep_artifact and dep_version):
            raise DescriptorParseError(
                f"Incomplete dependency in {group_id}:{artifact_id}: "
                f"{dep_group}:{dep_artifact}:{dep_version}"
            )
        dependencies.append(Coordinate(
            group_id=dep_group,
            artifact_id=dep_artifact,
            version=dep_version,
            scope=_text(dep, "scope"),
        ))

    source_root = _text(root, "build", "sourceDirectory") or profile.source_root.rstrip("/")

    return ProjectDescriptor(
        coordinate=Coordinate(group_id=group_id, artifact_id=artifact_id, version=version),
        main_class=_find_main_class(root, profile),
        dependencies=dependencies,
        source_root=source_root,
    )
