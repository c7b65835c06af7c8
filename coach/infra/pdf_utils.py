import io
import calendar
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

from coach.logic.calendar.grid import grid_rows
from coach.utilities.constants import COMPLETED, SKIPPED

_STATUS_MARK = {COMPLETED: "[x] ", SKIPPED: "[-] "}


def _cell_text(cell):
    lines = [str(cell.day)]
    for entry in cell.entries:
        lines.append(_STATUS_MARK.get(entry.status, "") + entry.name)
    return "\n".join(lines)


def generate_pdf_for_month(cells, year, month, first_weekday, title="Plan"):
    """Generate a month grid PDF: one column per weekday, each cell lists the day's entries."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=landscape(A4),
        rightMargin=20, leftMargin=20, topMargin=20, bottomMargin=20
    )

    styles = getSampleStyleSheet()
    elements = [
        Paragraph(f"{title} – {calendar.month_name[month]} {year}", styles["Title"]),
        Spacer(1, 16),
    ]

    header = [calendar.day_abbr[(first_weekday + i) % 7] for i in range(7)]
    data = [header]
    outside = []
    for r, row in enumerate(grid_rows(cells), start=1):
        data.append([_cell_text(c) for c in row])
        for col, c in enumerate(row):
            if not c.is_in_displayed_month:
                outside.append((col, r))

    table = Table(data, repeatRows=1, colWidths=[110] * 7)
    style = [
        ("BACKGROUND", (0,0), (-1,0), colors.HexColor("#4CAF50")),
        ("TEXTCOLOR", (0,0), (-1,0), colors.whitesmoke),
        ("ALIGN", (0,0), (-1,0), "CENTER"),
        ("VALIGN", (0,1), (-1,-1), "TOP"),
        ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
        ("FONTSIZE", (0,0), (-1,0), 12),
        ("FONTSIZE", (0,1), (-1,-1), 8),
        ("BOTTOMPADDING", (0,0), (-1,0), 10),
        ("GRID", (0,0), (-1,-1), 0.5, colors.grey),
    ]
    for col, r in outside:
        style.append(("TEXTCOLOR", (col, r), (col, r), colors.grey))
    table.setStyle(TableStyle(style))

    elements.append(table)
    doc.build(elements)
    return buf.getvalue()
