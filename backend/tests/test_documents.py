import pytest
from reportlab.pdfgen import canvas

from remitos.core.errors import DocumentError
from remitos.domain.entities import BranchSnapshot, DeliveryNote, LineItem
from remitos.services.document_service import DocumentService, FileDocumentStore, PdfNoteRenderer

from conftest import BrokenRenderer


def _note(n_items=2, comment=None, status="pending"):
    return DeliveryNote(
        id=1,
        number=3805,
        date="2024-05-01",
        origin="Juan Manuel de Rosas 1325",
        branch=BranchSnapshot(id=1, name="Lomas", address="Portal Lomas"),
        items=[LineItem(description=f"Artículo número {i} con descripción larga " * 2, expected=i + 1) for i in range(n_items)],
        status=status,
        comment=comment,
        public_url="/r/1",
    )


def test_render_produces_pdf():
    data = PdfNoteRenderer().render(_note())
    assert data.startswith(b"%PDF")


def test_render_long_note_with_comment():
    data = PdfNoteRenderer().render(_note(n_items=120, comment="Faltaron dos cajas. " * 40, status="discrepancy"))
    assert data.startswith(b"%PDF")


def test_publish_writes_file(tmp_path):
    service = DocumentService(PdfNoteRenderer(), FileDocumentStore(str(tmp_path / "pdf")))

    ref = service.publish(_note())

    assert ref == "/pdf/remito_3805.pdf"
    assert (tmp_path / "pdf" / "remito_3805.pdf").read_bytes().startswith(b"%PDF")


def test_publish_wraps_renderer_errors(tmp_path):
    service = DocumentService(BrokenRenderer(), FileDocumentStore(str(tmp_path)))
    with pytest.raises(DocumentError) as exc:
        service.publish(_note())
    assert exc.value.reason == "document_failed"


class RecordingCanvas(canvas.Canvas):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.pages = 1
        self.column_titles = []

    def showPage(self):
        super().showPage()
        self.pages += 1

    def drawRightString(self, x, y, text, *args, **kwargs):
        if text == "Cantidad":
            self.column_titles.append(self.pages)
        return super().drawRightString(x, y, text, *args, **kwargs)


def test_item_table_header_repeats_on_every_page(monkeypatch):
    made = []

    def factory(*args, **kwargs):
        made.append(RecordingCanvas(*args, **kwargs))
        return made[-1]

    monkeypatch.setattr(canvas, "Canvas", factory)
    PdfNoteRenderer().render(_note(n_items=60))

    pdf = made[0]
    # the final showPage closes the document
    item_pages = pdf.pages - 1
    assert item_pages > 1
    assert pdf.column_titles == list(range(1, item_pages + 1))
