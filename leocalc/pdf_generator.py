"""
Supply schedule PDF — customer and vendor variants.

Uses fpdf2 (pure Python, no system dependencies).

Layout, top to bottom:
1. Header band — logo (or company name) on navy, document title on the right
2. Metadata box — recipient, PO reference, estimated closure, duration,
   total qty and balance (or excess, in red)
3. Delivery table — WEEK, DATE, SUPPLIER, QTY, STATUS
   (vendor copies drop SUPPLIER; customer copies show the company as supplier)
4. Footer band on every page — company contact line and "Page i of n"
5. Faint logo watermark behind every page when a logo is configured
"""

import logging
import os

from fpdf import FPDF

from .config import settings
from .calculators.base import to_number

logger = logging.getLogger(__name__)

NAVY = (0, 0, 128)
ACCENT = (0, 200, 83)
SLATE = (51, 65, 85)
PANEL = (248, 250, 252)
ALERT = (220, 38, 38)

CUSTOMER_COLUMNS = [("WEEK", 50), ("DATE", 34), ("SUPPLIER", 40), ("QTY", 28), ("STATUS", 30)]
VENDOR_COLUMNS = [("WEEK", 62), ("DATE", 40), ("QTY", 40), ("STATUS", 40)]


def _fmt_qty(value) -> str:
    """Thousands-separated quantity, no trailing .0 on whole numbers."""
    qty = to_number(value)
    if qty == int(qty):
        return f"{int(qty):,}"
    return f"{qty:,.2f}"


def _safe(text) -> str:
    """Replace Unicode chars that can't be rendered by built-in PDF fonts (latin-1)."""
    if not text:
        return ""
    return (
        str(text)
        .replace("\u2022", "-")    # bullet
        .replace("\u2014", " - ")  # em dash
        .replace("\u2013", "-")    # en dash
        .replace("\u201c", '"')
        .replace("\u201d", '"')
        .replace("\u2018", "'")
        .replace("\u2019", "'")
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


def contact_line() -> str:
    parts = [settings.COMPANY_EMAIL, settings.COMPANY_ADDRESS, settings.COMPANY_PHONE]
    return "  |  ".join(p for p in parts if p)


class SchedulePDF(FPDF):
    """A4 schedule document with a navy contact footer on every page."""

    def __init__(self, logo_path: str = ""):
        super().__init__(format="A4")
        self.logo_path = logo_path
        self.set_auto_page_break(auto=True, margin=25)

    def header(self):
        # Faint logo behind every page; the header band itself is drawn once by header_band()
        if self.logo_path and os.path.exists(self.logo_path):
            size = 120
            with self.local_context(fill_opacity=0.06):
                self.image(self.logo_path, x=(self.w - size) / 2, y=(self.h - size) / 2, w=size)

    def footer(self):
        self.set_y(-23)
        self.set_font("Helvetica", "", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 5, f"Page {self.page_no()} of {{nb}}", align="R")

        self.set_fill_color(*NAVY)
        self.rect(0, self.h - 15, self.w, 15, style="F")
        self.set_xy(0, self.h - 11)
        self.set_font("Helvetica", "", 9)
        self.set_text_color(255, 255, 255)
        self.cell(self.w, 6, _safe(contact_line()), align="C")
        self.set_text_color(0, 0, 0)

    def header_band(self, title: str):
        self.set_fill_color(*NAVY)
        self.rect(14, 15, 70, 24, style="F")
        self.set_fill_color(*ACCENT)
        self.rect(84, 15, 2, 24, style="F")

        if self.logo_path and os.path.exists(self.logo_path):
            self.image(self.logo_path, x=19, y=18, h=18)
        else:
            if self.logo_path:
                logger.warning("Logo not found at %s, drawing company name instead", self.logo_path)
            self.set_xy(14, 23)
            self.set_font("Helvetica", "B", 16)
            self.set_text_color(255, 255, 255)
            self.cell(70, 8, _safe(settings.COMPANY_NAME.upper()), align="C")

        self.set_xy(96, 23)
        self.set_font("Helvetica", "B", 20)
        self.set_text_color(*SLATE)
        self.cell(100, 10, _safe(title), align="R")
        self.set_text_color(0, 0, 0)

    def metadata_box(self, recipient_label: str, recipient: str, po_number: str, stats: dict):
        """Three columns of label/value pairs in a rounded panel."""
        box_y = 50
        self.set_fill_color(*PANEL)
        self.set_draw_color(226, 232, 240)
        self.rect(14, box_y, 182, 35, style="FD", round_corners=True, corner_radius=3)

        balance = to_number(stats.get("balance"))
        excess = to_number(stats.get("excess"))
        if excess > 0:
            last_label, last_value = "EXCESS:", f"+{_fmt_qty(excess)}"
        else:
            last_label, last_value = "BALANCE:", _fmt_qty(balance)

        fields = [
            (20, box_y + 6, recipient_label, recipient or "N/A"),
            (20, box_y + 20, "PO REFERENCE:", po_number or "N/A"),
            (80, box_y + 6, "EST. CLOSURE:", stats.get("closure_date") or "-"),
            (80, box_y + 20, "DURATION:", f"{stats.get('total_days', 0)} Days"),
            (140, box_y + 6, "TOTAL QTY:", _fmt_qty(stats.get("total_qty"))),
            (140, box_y + 20, last_label, last_value),
        ]
        for x, y, label, value in fields:
            self.set_xy(x, y)
            self.set_font("Helvetica", "B", 9)
            self.set_text_color(*SLATE)
            self.cell(55, 5, label)
            self.set_xy(x, y + 5)
            self.set_font("Helvetica", "", 9)
            if label == "EXCESS:":
                self.set_text_color(*ALERT)
            self.cell(55, 5, _safe(value))
        self.set_text_color(0, 0, 0)
        self.set_y(box_y + 45)

    def table_header(self, cols):
        """Render a table header row. cols: [(label, width), ...]"""
        self.set_x(14)
        self.set_font("Helvetica", "B", 10)
        self.set_fill_color(*NAVY)
        self.set_text_color(255, 255, 255)
        for label, width in cols:
            self.cell(width, 10, label, fill=True, align="C")
        self.ln()
        self.set_text_color(0, 0, 0)

    def table_row(self, values, cols, shaded=False, qty_index=None):
        """Centered data row; the QTY cell is bold. Alternate rows are shaded."""
        self.set_x(14)
        self.set_fill_color(*PANEL)
        for i, (val, (_, width)) in enumerate(zip(values, cols)):
            self.set_font("Helvetica", "B" if i == qty_index else "", 10)
            self.cell(width, 8, _safe(val), fill=shaded, align="C")
        self.ln()


def _render(recipient_label, recipient, po_number, stats, cols, rows) -> bytes:
    pdf = SchedulePDF(logo_path=settings.LOGO_PATH)
    pdf.alias_nb_pages()
    pdf.add_page()
    pdf.header_band("Supply Schedule")
    pdf.metadata_box(recipient_label, recipient, po_number, stats)

    labels = [label for label, _ in cols]
    qty_index = labels.index("QTY")
    pdf.table_header(cols)
    for i, values in enumerate(rows):
        if pdf.will_page_break(8):
            pdf.add_page()
            pdf.set_y(20)
            pdf.table_header(cols)
        pdf.table_row(values, cols, shaded=i % 2 == 1, qty_index=qty_index)

    return bytes(pdf.output())


def generate_customer_schedule_pdf(po_details: dict, supplies: list, summary: dict) -> bytes:
    """
    Customer copy of the schedule. Every row lists the company itself as the
    supplier so the customer never sees which vendor fills which delivery.

    summary: schedule_summary() output for the same PO and rows.
    """
    po_details = po_details or {}
    rows = [
        [r.get("week", ""), r.get("date") or "", settings.COMPANY_NAME,
         _fmt_qty(r.get("planned_qty")), r.get("status", "")]
        for r in supplies
    ]
    return _render(
        "CUSTOMER:", po_details.get("customer_name"), po_details.get("po_number"),
        summary, CUSTOMER_COLUMNS, rows,
    )


def generate_vendor_schedule_pdf(po_details: dict, vendor_stats: dict, date_span: dict) -> bytes:
    """
    Vendor copy — only that vendor's rows, totals against its allocation.

    vendor_stats: vendor_summary() output (includes the vendor's rows).
    date_span: date_stats() of the whole schedule, so closure matches the customer copy.
    """
    po_details = po_details or {}
    stats = {**date_span, **{k: vendor_stats.get(k) for k in ("total_qty", "balance", "excess")}}
    rows = [
        [r.get("week", ""), r.get("date") or "", _fmt_qty(r.get("planned_qty")), r.get("status", "")]
        for r in vendor_stats.get("rows", [])
    ]
    return _render(
        "VENDOR:", vendor_stats.get("vendor"), po_details.get("po_number"),
        stats, VENDOR_COLUMNS, rows,
    )


def schedule_filename(recipient: str) -> str:
    clean = "".join(c for c in (recipient or "") if c.isalnum() or c in " -_").strip()
    return f"Supply_Schedule_{clean or 'Customer'}.pdf"
