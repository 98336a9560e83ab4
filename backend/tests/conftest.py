"""Shared fixtures — .xlsx archives built on the fly.

openpyxl writes the cell grid; drawing and media parts are then injected
into the zip by hand so tests control anchors exactly and do not need
Pillow or binary fixtures.
"""

import zipfile
from collections.abc import Callable
from io import BytesIO

import pytest
from openpyxl import Workbook

XDR_NS = "http://schemas.openxmlformats.org/drawingml/2006/spreadsheetDrawing"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
DRAWING_REL_TYPE = R_NS + "/drawing"
IMAGE_REL_TYPE = R_NS + "/image"

DEFAULT_HEADERS = [
    "Is Fixed Assets",
    "Category",
    "Asset description",
    "Serial No",
    "location",
    "user",
    "Manufacturer",
    "Value (CNY)",
    "Commissioning Time",
    "Metrology Validity Period",
    "Metrology Requirement",
    "Metrology Cost",
    "Remarks",
]

# A valid 1x1 PNG; content is opaque to the importer
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


def _drawing_xml(anchors: list[tuple[int, int, str]], anchor_kind: str = "oneCellAnchor") -> str:
    parts = []
    for index, (row, col, rel_id) in enumerate(anchors, start=1):
        if anchor_kind == "twoCellAnchor":
            extent = (
                f"<xdr:to><xdr:col>{col + 1}</xdr:col><xdr:colOff>0</xdr:colOff>"
                f"<xdr:row>{row + 1}</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:to>"
            )
        else:
            extent = '<xdr:ext cx="9525" cy="9525"/>'
        parts.append(
            f"<xdr:{anchor_kind}>"
            f"<xdr:from><xdr:col>{col}</xdr:col><xdr:colOff>0</xdr:colOff>"
            f"<xdr:row>{row}</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:from>"
            f"{extent}"
            f"<xdr:pic><xdr:nvPicPr><xdr:cNvPr id=\"{index}\" name=\"Picture {index}\"/>"
            f"<xdr:cNvPicPr/></xdr:nvPicPr>"
            f'<xdr:blipFill><a:blip r:embed="{rel_id}"/></xdr:blipFill>'
            f"<xdr:spPr/></xdr:pic><xdr:clientData/>"
            f"</xdr:{anchor_kind}>"
        )
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<xdr:wsDr xmlns:xdr="{XDR_NS}" xmlns:a="{A_NS}" xmlns:r="{R_NS}">'
        + "".join(parts)
        + "</xdr:wsDr>"
    )


def _rels_xml(relationships: list[tuple[str, str, str]]) -> str:
    body = "".join(
        f'<Relationship Id="{rel_id}" Type="{rel_type}" Target="{target}"/>'
        for rel_id, rel_type, target in relationships
    )
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<Relationships xmlns="{PKG_REL_NS}">{body}</Relationships>'
    )


def build_xlsx(
    rows: list[list],
    *,
    headers: list[str] | None = None,
    images: list[tuple[int, int, bytes]] | None = None,
    sheet_title: str = "Assets",
    drop_members: tuple[str, ...] = (),
    anchor_kind: str = "oneCellAnchor",
) -> bytes:
    """Build an .xlsx archive.

    Args:
        rows: Data rows (the header row is written first).
        headers: Header labels; defaults to the full import header set.
        images: ``(anchor_row, anchor_col, content)`` with 0-based anchors
            where the header is row 0.
        drop_members: Archive member paths to omit from the final zip.
        anchor_kind: Drawing anchor element, ``oneCellAnchor`` or ``twoCellAnchor``.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(headers or DEFAULT_HEADERS)
    for row in rows:
        ws.append(row)

    buffer = BytesIO()
    wb.save(buffer)

    members: dict[str, bytes] = {}
    with zipfile.ZipFile(BytesIO(buffer.getvalue())) as source:
        for name in source.namelist():
            members[name] = source.read(name)

    if images:
        sheet_path = "xl/worksheets/sheet1.xml"
        sheet_xml = members[sheet_path].decode("utf-8")
        drawing_tag = f'<drawing xmlns:r="{R_NS}" r:id="rIdDrawing1"/>'
        members[sheet_path] = sheet_xml.replace(
            "</worksheet>", drawing_tag + "</worksheet>"
        ).encode("utf-8")
        members["xl/worksheets/_rels/sheet1.xml.rels"] = _rels_xml(
            [("rIdDrawing1", DRAWING_REL_TYPE, "../drawings/drawing1.xml")]
        ).encode("utf-8")

        anchors = []
        media_rels = []
        for index, (row, col, content) in enumerate(images, start=1):
            rel_id = f"rIdImage{index}"
            anchors.append((row, col, rel_id))
            media_rels.append((rel_id, IMAGE_REL_TYPE, f"../media/image{index}.png"))
            members[f"xl/media/image{index}.png"] = content

        members["xl/drawings/drawing1.xml"] = _drawing_xml(anchors, anchor_kind).encode("utf-8")
        members["xl/drawings/_rels/drawing1.xml.rels"] = _rels_xml(media_rels).encode("utf-8")

    out = BytesIO()
    with zipfile.ZipFile(out, "w", zipfile.ZIP_DEFLATED) as target:
        for name, data in members.items():
            if name in drop_members:
                continue
            target.writestr(name, data)
    return out.getvalue()


def asset_row(description: str | None, extra: dict | None = None) -> list:
    """A data row in DEFAULT_HEADERS order; ``extra`` maps header → value."""
    values = dict.fromkeys(DEFAULT_HEADERS)
    values["Asset description"] = description
    values.update(extra or {})
    return [values[h] for h in DEFAULT_HEADERS]


@pytest.fixture
def make_xlsx() -> Callable[..., bytes]:
    return build_xlsx


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture(name="asset_row")
def asset_row_fixture() -> Callable[..., list]:
    return asset_row


@pytest.fixture
def default_headers() -> list[str]:
    return list(DEFAULT_HEADERS)
