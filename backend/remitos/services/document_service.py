# backend/remitos/services/document_service.py
"""
Delivery note documents.

The core hands a fully populated note to a renderer, gets opaque bytes back,
and stores only the reference returned by the file store (e.g.
"/pdf/remito_3805.pdf"), never the bytes.
"""
from __future__ import annotations
import logging
import os
from io import BytesIO
from typing import Protocol

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from ..core.errors import DocumentError
from ..domain.constants import COMPANY_LINES, DOCUMENT_NAME, DOCUMENT_URL, STATUS_DISCREPANCY
from ..domain.entities import DeliveryNote

logger = logging.getLogger(__name__)

PRIMARY = HexColor("#0ea5e9")
INK = HexColor("#111111")
MUTED = HexColor("#444444")
RULE = HexColor("#e5e7eb")

MARGIN = 36
FOOTER_Y = 82          # signature lines
BODY_BOTTOM = 130      # new page below this


class DocumentRenderer(Protocol):
    def render(self, note: DeliveryNote) -> bytes: ...


class DocumentFiles(Protocol):
    def put(self, name: str, data: bytes) -> str: ...


class PdfNoteRenderer:
    """A4 delivery note: header, shipment data, item table, comment, signatures."""

    def render(self, note: DeliveryNote) -> bytes:
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=A4)
        c.setTitle(f"Remito {note.number}")
        width, height = A4
        right = width - MARGIN

        # --- header ---
        y = height - MARGIN - 18
        c.setFillColor(PRIMARY)
        c.setFont("Helvetica-Bold", 18)
        c.drawCentredString(width / 2, y, "REMITO DE TRANSPORTE DE MERCADERÍAS")
        y -= 24
        c.setFillColor(INK)
        c.setFont("Helvetica", 10)
        for line in COMPANY_LINES:
            c.drawString(MARGIN, y, line)
            y -= 13

        y -= 6
        self._rule(c, y, right)
        y -= 18

        # --- shipment ---
        c.setFont("Helvetica", 11)
        branch = note.branch
        destination = branch.name + (f" - {branch.address}" if branch.address else "")
        for line in (
            f"Remito Nº: {note.number}",
            f"Fecha: {note.date}",
            f"Origen: {note.origin}",
            f"Destino: {destination}",
        ):
            c.drawString(MARGIN, y, line)
            y -= 16

        # --- items ---
        y = self._table_header(c, y - 8, right)
        c.setFillColor(INK)
        c.setFont("Helvetica", 11)
        desc_width = right - MARGIN - 90
        for item in note.items:
            lines = simpleSplit(item.description or "-", "Helvetica", 11, desc_width) or ["-"]
            if y - 14 * (len(lines) - 1) < BODY_BOTTOM:
                c.showPage()
                y = self._table_header(c, height - MARGIN - 18, right)
                c.setFillColor(INK)
                c.setFont("Helvetica", 11)
            c.drawRightString(right, y, str(item.expected))
            for text in lines:
                c.drawString(MARGIN, y, text)
                y -= 14
            y -= 4

        # --- closing comment ---
        if note.comment:
            y -= 10
            c.setFont("Helvetica-Bold", 11)
            title = "Diferencias informadas:" if note.status == STATUS_DISCREPANCY else "Observaciones:"
            c.drawString(MARGIN, y, title)
            y -= 15
            c.setFont("Helvetica", 10)
            for text in simpleSplit(note.comment, "Helvetica", 10, right - MARGIN):
                if y < BODY_BOTTOM:
                    c.showPage()
                    c.setFont("Helvetica", 10)
                    y = height - MARGIN - 18
                c.drawString(MARGIN, y, text)
                y -= 13

        # --- signatures ---
        c.setStrokeColor(RULE)
        c.line(80, FOOTER_Y, 240, FOOTER_Y)
        c.line(330, FOOTER_Y, 490, FOOTER_Y)
        c.setFillColor(INK)
        c.setFont("Helvetica", 10)
        c.drawString(80, FOOTER_Y - 14, "Firma y Aclaración - Origen")
        c.drawString(330, FOOTER_Y - 14, "Firma y Aclaración - Destino")

        c.showPage()
        c.save()
        return buf.getvalue()

    def _table_header(self, c: canvas.Canvas, y: float, right: float) -> float:
        """Column titles and rule; returns the baseline of the first item."""
        c.setFillColor(MUTED)
        c.setFont("Helvetica", 10)
        c.drawString(MARGIN, y, "Descripción")
        c.drawRightString(right, y, "Cantidad")
        y -= 6
        self._rule(c, y, right)
        return y - 16

    @staticmethod
    def _rule(c: canvas.Canvas, y: float, right: float) -> None:
        c.setStrokeColor(RULE)
        c.line(MARGIN, y, right, y)


class FileDocumentStore:
    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def put(self, name: str, data: bytes) -> str:
        path = os.path.join(self.directory, name)
        with open(path, "wb") as fh:
            fh.write(data)
        return DOCUMENT_URL.format(name)


class DocumentService:
    def __init__(self, renderer: DocumentRenderer, files: DocumentFiles):
        self.renderer = renderer
        self.files = files

    def publish(self, note: DeliveryNote) -> str:
        name = DOCUMENT_NAME.format(note.number)
        try:
            ref = self.files.put(name, self.renderer.render(note))
        except Exception as e:
            logger.exception("document generation failed (note id=%s, number=%s)", note.id, note.number)
            raise DocumentError(f"Document for note {note.number} could not be generated: {type(e).__name__}: {e}") from e
        logger.info("document stored for note %s -> %s", note.number, ref)
        return ref
