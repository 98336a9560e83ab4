"""OOXML package reader — resolves the relationship graph of an .xlsx archive.

Path resolution follows the Open Packaging Conventions:
    <dir>/<name>            — a part
    <dir>/_rels/<name>.rels — the part's relationship index
    _rels/.rels             — the package-level index (points at the workbook)

Relationship targets are relative to the *source part's* directory, so a
drawing target of ``../drawings/drawing1.xml`` from ``xl/worksheets/sheet1.xml``
resolves to ``xl/drawings/drawing1.xml``. A leading ``/`` makes a target
package-absolute.

Only the workbook manifest is mandatory. Every other missing or unreadable
member degrades to "nothing found" for that branch.
"""

import logging
import posixpath
import zipfile
from io import BytesIO
from xml.etree import ElementTree

from lablend.domain.entities import EmbeddedImage
from lablend.domain.exceptions import MalformedArchiveError

logger = logging.getLogger(__name__)

_DEFAULT_WORKBOOK_PATH = "xl/workbook.xml"
_OFFICE_DOCUMENT_TYPE = "/officeDocument"
_ANCHOR_TAGS = frozenset({"twoCellAnchor", "oneCellAnchor"})


# ── XML helpers (namespace-agnostic: transitional and strict OOXML) ──

def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ElementTree.Element, name: str) -> ElementTree.Element | None:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _children(element: ElementTree.Element, name: str) -> list[ElementTree.Element]:
    return [child for child in element if _local(child.tag) == name]


def _rel_attr(element: ElementTree.Element, name: str) -> str | None:
    """Read a relationship-namespaced attribute such as ``r:id`` or ``r:embed``."""
    for key, value in element.attrib.items():
        if key.startswith("{") and _local(key) == name:
            return value
    return None


def rels_path_for(part_path: str) -> str:
    """Return the relationship index path for a part (``""`` for the package)."""
    directory, name = posixpath.split(part_path)
    return posixpath.join(directory, "_rels", f"{name}.rels")


def resolve_target(source_part: str, target: str) -> str:
    """Resolve a relationship target against its source part's directory."""
    target = target.replace("\\", "/")
    if target.startswith("/"):
        return posixpath.normpath(target.lstrip("/"))
    base_dir = posixpath.dirname(source_part)
    resolved = posixpath.normpath(posixpath.join(base_dir, target))
    # normpath keeps leading ".." when a target climbs above the package root
    while resolved.startswith("../"):
        resolved = resolved[3:]
    return resolved


class XlsxPackage:
    """Read-only view of an .xlsx archive held in memory.

    Usage:
        with XlsxPackage(content) as package:
            images = package.embedded_images(package.sheet_names()[0])
    """

    def __init__(self, content: bytes):
        try:
            self._zip = zipfile.ZipFile(BytesIO(content))
        except zipfile.BadZipFile as exc:
            raise MalformedArchiveError("not a zip container") from exc

        # Some writers emit backslash separators; index members by normalised path
        self._members = {
            name.replace("\\", "/"): name for name in self._zip.namelist()
        }
        self.workbook_path = self._locate_workbook()
        workbook = self._parse(self.workbook_path)
        if workbook is None:
            self.close()
            raise MalformedArchiveError(f"workbook manifest '{self.workbook_path}' missing or unreadable")
        self._workbook = workbook

    def __enter__(self) -> "XlsxPackage":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    # ── Member access ───────────────────────────────────────────────

    def read(self, path: str) -> bytes | None:
        """Return a member's bytes, or None when absent or unreadable."""
        name = self._members.get(path)
        if name is None:
            return None
        try:
            return self._zip.read(name)
        except (zipfile.BadZipFile, KeyError, OSError) as exc:
            logger.warning("Could not read archive member %s: %s", path, exc)
            return None

    def _parse(self, path: str) -> ElementTree.Element | None:
        data = self.read(path)
        if data is None:
            return None
        try:
            return ElementTree.fromstring(data)
        except ElementTree.ParseError as exc:
            logger.warning("Unparseable XML in archive member %s: %s", path, exc)
            return None

    def relationships(self, part_path: str) -> dict[str, str]:
        """Map relationship Id → resolved member path for one part.

        External targets (hyperlinks etc.) are skipped. Returns an empty
        mapping when the part has no relationship index.
        """
        root = self._parse(rels_path_for(part_path))
        if root is None:
            return {}

        resolved: dict[str, str] = {}
        for rel in _children(root, "Relationship"):
            rel_id = rel.get("Id")
            target = rel.get("Target")
            if not rel_id or not target or rel.get("TargetMode") == "External":
                continue
            resolved[rel_id] = resolve_target(part_path, target)
        return resolved

    def _locate_workbook(self) -> str:
        root = self._parse(rels_path_for(""))
        if root is not None:
            for rel in _children(root, "Relationship"):
                if (rel.get("Type") or "").endswith(_OFFICE_DOCUMENT_TYPE) and rel.get("Target"):
                    return resolve_target("", rel.get("Target", ""))
        return _DEFAULT_WORKBOOK_PATH

    # ── Workbook / sheets ───────────────────────────────────────────

    def _sheet_entries(self) -> list[tuple[str, str | None]]:
        sheets = _child(self._workbook, "sheets")
        if sheets is None:
            return []
        return [
            (sheet.get("name", ""), _rel_attr(sheet, "id"))
            for sheet in _children(sheets, "sheet")
            if sheet.get("name")
        ]

    def sheet_names(self) -> list[str]:
        """Sheet names in workbook order."""
        return [name for name, _ in self._sheet_entries()]

    def sheet_path(self, sheet_name: str) -> str | None:
        """Resolve a sheet's storage path through the workbook relationship index."""
        workbook_rels = self.relationships(self.workbook_path)
        for name, rel_id in self._sheet_entries():
            if name == sheet_name:
                return workbook_rels.get(rel_id) if rel_id else None
        return None

    # ── Embedded images ─────────────────────────────────────────────

    def embedded_images(self, sheet_name: str) -> list[EmbeddedImage]:
        """Collect anchored pictures of one sheet, in drawing parse order.

        Each hop (sheet → drawing → media) that cannot be resolved yields
        no image for that branch instead of failing.
        """
        sheet_path = self.sheet_path(sheet_name)
        if sheet_path is None:
            logger.debug("Sheet '%s' has no resolvable storage path", sheet_name)
            return []

        sheet = self._parse(sheet_path)
        if sheet is None:
            return []

        drawing = _child(sheet, "drawing")
        drawing_rel_id = _rel_attr(drawing, "id") if drawing is not None else None
        if not drawing_rel_id:
            return []

        drawing_path = self.relationships(sheet_path).get(drawing_rel_id)
        if drawing_path is None:
            logger.debug("Drawing relationship %s of %s not found", drawing_rel_id, sheet_path)
            return []

        drawing_root = self._parse(drawing_path)
        if drawing_root is None:
            return []

        media_rels = self.relationships(drawing_path)
        images: list[EmbeddedImage] = []

        for anchor in drawing_root:
            if _local(anchor.tag) not in _ANCHOR_TAGS:
                continue
            image = self._read_anchor(anchor, media_rels)
            if image is not None:
                images.append(image)

        logger.debug("Found %d embedded images in %s", len(images), drawing_path)
        return images

    def _read_anchor(
        self, anchor: ElementTree.Element, media_rels: dict[str, str]
    ) -> EmbeddedImage | None:
        start = _child(anchor, "from")
        picture = _child(anchor, "pic")
        if start is None or picture is None:
            return None

        row_el = _child(start, "row")
        col_el = _child(start, "col")
        if row_el is None or col_el is None:
            return None
        try:
            row = int((row_el.text or "").strip())
            col = int((col_el.text or "").strip())
        except ValueError:
            return None

        blip_fill = _child(picture, "blipFill")
        blip = _child(blip_fill, "blip") if blip_fill is not None else None
        embed_id = _rel_attr(blip, "embed") if blip is not None else None
        if not embed_id:
            return None

        media_path = media_rels.get(embed_id)
        if media_path is None:
            return None

        content = self.read(media_path)
        if content is None:
            logger.debug("Media member %s referenced but absent", media_path)
            return None

        return EmbeddedImage(
            anchor_row=row,
            anchor_col=col,
            filename=posixpath.basename(media_path) or "image",
            content=content,
        )
