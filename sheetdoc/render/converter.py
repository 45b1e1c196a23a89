from __future__ import annotations

import re
from io import BytesIO

from bs4 import BeautifulSoup, NavigableString, Tag
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import Pt

"""Markup -> .docx converter (BeautifulSoup + python-docx).

Supported markup: h1-h6, p / div, br, b / strong, i / em, u, ul / ol / li, table
(tr / th / td). Unknown tags contribute their text. Thai text is a complex script in
Word, so the default font is also set on the ``w:cs`` slot.
"""

__all__ = [
    "DEFAULT_FONT",
    "DocxConverter",
]

DEFAULT_FONT = "TH Sarabun New"
DEFAULT_FONT_SIZE = 16

_WS_RE = re.compile(r"\s+")

_BLOCK_TAGS = {"p", "div", "section", "article", "header", "footer"}
_HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}
_ALIGN = {
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def _alignment_of(tag: Tag):
    style = (tag.get("style") or "").replace(" ", "").lower()
    for key, value in _ALIGN.items():
        if f"text-align:{key}" in style or tag.get("align") == key:
            return value
    return None


class DocxConverter:
    def __init__(self, font_name: str = DEFAULT_FONT, font_size: int = DEFAULT_FONT_SIZE) -> None:
        self.font_name = font_name
        self.font_size = font_size

    def convert(self, markup: str) -> bytes:
        doc = Document()
        self._apply_default_font(doc)
        soup = BeautifulSoup(markup, "html.parser")
        root = soup.body or soup
        self._convert_children(doc, root)
        buffer = BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    def _apply_default_font(self, doc) -> None:
        style = doc.styles["Normal"]
        style.font.name = self.font_name
        style.font.size = Pt(self.font_size)
        rfonts = style.element.get_or_add_rPr().get_or_add_rFonts()
        rfonts.set(qn("w:cs"), self.font_name)
        rfonts.set(qn("w:eastAsia"), self.font_name)

    def _convert_children(self, doc, node: Tag) -> None:
        pending = None  # paragraph collecting loose inline content
        for child in node.children:
            if isinstance(child, NavigableString):
                text = " ".join(str(child).split())
                if not text:
                    continue
                if pending is None:
                    pending = doc.add_paragraph()
                pending.add_run(text)
                continue
            if not isinstance(child, Tag):
                continue
            name = child.name.lower()
            if name in ("script", "style", "head", "title", "meta"):
                continue
            if name in _HEADING_TAGS:
                pending = None
                heading = doc.add_heading(level=_HEADING_TAGS[name])
                self._add_inline(heading, child)
                align = _alignment_of(child)
                if align is not None:
                    heading.alignment = align
            elif name in _BLOCK_TAGS:
                pending = None
                if child.find(list(_BLOCK_TAGS | set(_HEADING_TAGS) | {"table", "ul", "ol"})):
                    self._convert_children(doc, child)
                    continue
                para = doc.add_paragraph()
                self._add_inline(para, child)
                align = _alignment_of(child)
                if align is not None:
                    para.alignment = align
            elif name in ("ul", "ol"):
                pending = None
                style = "List Number" if name == "ol" else "List Bullet"
                for li in child.find_all("li", recursive=False):
                    para = doc.add_paragraph(style=style)
                    self._add_inline(para, li)
            elif name == "table":
                pending = None
                self._add_table(doc, child)
            elif name == "hr":
                pending = None
                doc.add_paragraph()
            elif name == "br":
                if pending is None:
                    pending = doc.add_paragraph()
                pending.add_run().add_break()
            else:
                if pending is None:
                    pending = doc.add_paragraph()
                self._add_inline(pending, child, wrap=True)

    def _add_inline(self, para, node: Tag, *, bold: bool = False, italic: bool = False,
                    underline: bool = False, wrap: bool = False) -> None:
        children = [node] if wrap else list(node.children)
        for child in children:
            if isinstance(child, NavigableString):
                text = _WS_RE.sub(" ", str(child))
                if not para.text or para.text.endswith((" ", "\n")):
                    text = text.lstrip()
                if not text:
                    continue
                run = para.add_run(text)
                run.bold = bold or None
                run.italic = italic or None
                run.underline = underline or None
                continue
            if not isinstance(child, Tag):
                continue
            name = child.name.lower()
            if name == "br":
                para.add_run().add_break()
                continue
            self._add_inline(
                para,
                child,
                bold=bold or name in ("b", "strong", "th"),
                italic=italic or name in ("i", "em"),
                underline=underline or name == "u",
            )

    def _add_table(self, doc, table_tag: Tag) -> None:
        rows = table_tag.find_all("tr")
        if not rows:
            return
        grid = [row.find_all(["td", "th"], recursive=False) for row in rows]
        n_cols = max((len(cells) for cells in grid), default=0)
        if n_cols == 0:
            return
        table = doc.add_table(rows=len(grid), cols=n_cols)
        table.style = "Table Grid"
        for r, cells in enumerate(grid):
            for c, cell_tag in enumerate(cells):
                cell = table.cell(r, c)
                para = cell.paragraphs[0]
                self._add_inline(para, cell_tag, bold=cell_tag.name == "th")
