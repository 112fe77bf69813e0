import pytest

from anchortab_lib.models import PageGeometry, RawTable, TextRun

PAGE_WIDTH = 612
PAGE_HEIGHT = 792
CHAR_WIDTH = 6
RUN_HEIGHT = 10


class FakeDocument:
    """In-memory document: each page is a list of (text, x0, top) tuples."""

    def __init__(self, pages):
        self.name = "fake.pdf"
        self._runs = {}
        for page_no, runs in enumerate(pages, start=1):
            built = [
                TextRun(text, page_no, x0, top, x0 + CHAR_WIDTH * len(text), top + RUN_HEIGHT)
                for text, x0, top in runs
            ]
            self._runs[page_no] = sorted(built, key=lambda r: (r.top, r.x0))
        self.text_runs_calls = 0

    @property
    def page_count(self):
        return len(self._runs)

    def page_geometry(self, page_no):
        return PageGeometry(page_no, 0.0, 0.0, float(PAGE_WIDTH), float(PAGE_HEIGHT))

    def text_runs(self, page_no):
        self.text_runs_calls += 1
        return self._runs[page_no]


class RunGridDetector:
    """Builds one table per rectangle from the fake runs fully inside it."""

    def detect(self, document, region):
        tables = []
        for rect in region:
            lines = {}
            for run in document.text_runs(rect.page):
                inside = (
                    run.top >= rect.top
                    and run.bottom <= rect.bottom
                    and run.x0 >= rect.x0
                    and run.x1 <= rect.x1
                )
                if inside:
                    lines.setdefault(run.top, []).append(run.text)
            if lines:
                tables.append(RawTable.from_texts(rect.page, [lines[t] for t in sorted(lines)]))
        return tables


def _escape(text):
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages, width=PAGE_WIDTH, height=PAGE_HEIGHT, font_size=12):
    """Writes a minimal PDF. Each page is a list of (x, baseline, text) tuples,
    with the baseline measured from the top of the page."""
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(len(pages)))
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for i, runs in enumerate(pages):
        ops = [
            f"BT /F1 {font_size} Tf {x} {height - baseline} Td ({_escape(text)}) Tj ET"
            for x, baseline, text in runs
        ]
        stream = "\n".join(ops).encode("latin-1")
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {width} {height}] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
            ).encode()
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % num + body + b"\nendobj\n"
    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_offset,
    )
    return bytes(out)


@pytest.fixture
def make_document():
    return FakeDocument


@pytest.fixture
def run_grid():
    return RunGridDetector()


@pytest.fixture
def pdf_factory():
    return build_pdf


@pytest.fixture
def statement_pdf(tmp_path):
    """A one-page statement with a key/value block and a records block."""
    path = tmp_path / "statement.pdf"
    path.write_bytes(
        build_pdf(
            [
                [
                    (72, 100, "Balance Sheet"),
                    (72, 140, "Total Assets"),
                    (300, 140, "1,000"),
                    (72, 160, "Total Debts"),
                    (300, 160, "400"),
                    (72, 200, "Notes"),
                    (72, 260, "Name"),
                    (300, 260, "Age"),
                    (72, 280, "Alice"),
                    (300, 280, "30"),
                    (72, 300, "Bob"),
                    (300, 300, "41"),
                    (72, 340, "End of Report"),
                ]
            ]
        )
    )
    return path
