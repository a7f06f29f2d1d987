"""Minimal text-only PDF writer (Courier, A4 landscape)."""
from io import BytesIO
from textwrap import wrap
from typing import Iterable, List

PAGE_WIDTH = 842
PAGE_HEIGHT = 595
LEFT = 36
TOP_MARGIN = 48
LINE_HEIGHT = 13
FONT_SIZE = 9
TITLE_SIZE = 14
WRAP_AT = 130

# Courier is a WinAnsi base font; anything outside latin-1 is replaced.
_TRANSLATE = str.maketrans({"‘": "'", "’": "'", "“": '"', "”": '"', "–": "-", "—": "-"})


def _pdf_string(text: str) -> str:
    text = text.translate(_TRANSLATE).encode("latin-1", errors="replace").decode("latin-1")
    return "(" + text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)") + ")"


def _wrapped(lines: Iterable[str]) -> List[str]:
    out = []
    for line in lines:
        out.extend(wrap(line, WRAP_AT) or [""])
    return out


class PdfDocument:
    def __init__(self, title: str = ""):
        self.title = title
        self.lines: List[str] = []

    def add(self, *lines: str) -> "PdfDocument":
        self.lines.extend(lines)
        return self

    def _pages(self) -> List[List[str]]:
        per_page = (PAGE_HEIGHT - 2 * TOP_MARGIN) // LINE_HEIGHT
        body = _wrapped(self.lines)
        pages = [body[i : i + per_page] for i in range(0, len(body), per_page)]
        return pages or [[]]

    def _content(self, lines: List[str], first: bool) -> bytes:
        ops = ["BT", f"{LEFT} {PAGE_HEIGHT - TOP_MARGIN} Td"]
        if first and self.title:
            ops += [f"/F2 {TITLE_SIZE} Tf", f"{_pdf_string(self.title)} Tj", f"0 -{LINE_HEIGHT * 2} Td"]
        ops.append(f"/F1 {FONT_SIZE} Tf")
        for line in lines:
            ops += [f"{_pdf_string(line)} Tj", f"0 -{LINE_HEIGHT} Td"]
        ops.append("ET")
        return "\n".join(ops).encode("latin-1")

    def render(self) -> bytes:
        pages = self._pages()
        # Object layout: 1 catalog, 2 page tree, 3-4 fonts, then (page, content) pairs.
        objects = {
            3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Courier /Encoding /WinAnsiEncoding >>",
            4: b"<< /Type /Font /Subtype /Type1 /BaseFont /Courier-Bold /Encoding /WinAnsiEncoding >>",
        }
        kids = []
        for index, lines in enumerate(pages):
            page_num = 5 + index * 2
            content_num = page_num + 1
            kids.append(f"{page_num} 0 R")
            stream = self._content(lines, first=index == 0)
            objects[page_num] = (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] "
                f"/Resources << /Font << /F1 3 0 R /F2 4 0 R >> >> /Contents {content_num} 0 R >>"
            ).encode("latin-1")
            objects[content_num] = b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        objects[1] = b"<< /Type /Catalog /Pages 2 0 R >>"
        objects[2] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {len(pages)} >>".encode("latin-1")

        out = BytesIO()
        out.write(b"%PDF-1.4\n")
        offsets = {}
        for num in sorted(objects):
            offsets[num] = out.tell()
            out.write(b"%d 0 obj\n" % num + objects[num] + b"\nendobj\n")
        xref = out.tell()
        size = max(objects) + 1
        out.write(b"xref\n0 %d\n0000000000 65535 f \n" % size)
        for num in range(1, size):
            out.write(b"%010d 00000 n \n" % offsets[num])
        out.write(b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF" % (size, xref))
        return out.getvalue()


def build_pdf(lines: Iterable[str], title: str = "") -> bytes:
    return PdfDocument(title).add(*lines).render()
