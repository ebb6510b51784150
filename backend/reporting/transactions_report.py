"""Generate transaction view PDFs for the transactions export endpoint."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO
from xml.sax.saxutils import escape

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from shared.models import FilterType, TransactionType, TransactionView, ViewParams


_DISPLAY_LIMIT = 250
_UNCATEGORIZED = "Uncategorized"
_CHART_CATEGORY_LIMIT = 8

_INCOME_COLOR = colors.HexColor("#047857")
_EXPENSE_HEX = "#C2410C"
_EXPENSE_COLOR = colors.HexColor(_EXPENSE_HEX)
_MUTED_COLOR = colors.HexColor("#64748B")
_RULE_COLOR = colors.HexColor("#CBD5E1")
_STRIPE_COLOR = colors.HexColor("#F8FAFC")


@dataclass(slots=True)
class CategoryRow:
    """Aggregated expenses by category."""

    name: str
    amount: Decimal


@dataclass(slots=True)
class TransactionRow:
    """One line of the transaction detail table."""

    date: str
    description: str
    category: str
    type: TransactionType
    amount: Decimal


@dataclass(slots=True)
class TransactionsReportData:
    """Input payload for transactions report rendering."""

    view_label: str
    income: Decimal
    expenses: Decimal
    net: Decimal
    count: int
    currency: str
    categories: list[CategoryRow] = field(default_factory=list)
    transactions: list[TransactionRow] = field(default_factory=list)
    skipped: int = 0


def describe_view(params: ViewParams) -> str:
    labels = {
        FilterType.ALL: "All transactions",
        FilterType.INCOME: "Income only",
        FilterType.EXPENSE: "Expenses only",
    }
    parts = [labels[params.filter_type]]
    if params.search:
        parts.append(f'matching "{params.search}"')
    parts.append(f"sorted by {params.sort_by.value} ({params.sort_order.value})")
    return ", ".join(parts)


def build_report_data(view: TransactionView, params: ViewParams, *, currency: str) -> TransactionsReportData:
    """Map a computed view onto the report payload."""

    by_category: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for transaction in view.items:
        if transaction.type != TransactionType.EXPENSE:
            continue
        by_category[transaction.category or _UNCATEGORIZED] += transaction.magnitude

    return TransactionsReportData(
        view_label=describe_view(params),
        income=view.totals.income,
        expenses=view.totals.expenses,
        net=view.totals.net,
        count=view.count,
        currency=currency,
        categories=[
            CategoryRow(name=name, amount=amount)
            for name, amount in by_category.items()
            if amount > 0
        ],
        transactions=[
            TransactionRow(
                date=transaction.date.isoformat(),
                description=transaction.description,
                category=transaction.category or "-",
                type=transaction.type,
                amount=transaction.magnitude,
            )
            for transaction in view.items
        ],
        skipped=view.skipped,
    )


def _format_amount(value: Decimal, currency: str) -> str:
    return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,.2f} {currency}"


def _shorten(value: str, limit: int = 42) -> str:
    return value if len(value) <= limit else value[: limit - 1].rstrip() + "…"


def _top_categories(categories: list[CategoryRow], limit: int = _CHART_CATEGORY_LIMIT) -> list[CategoryRow]:
    ranked = sorted(categories, key=lambda row: (-row.amount, row.name))
    if len(ranked) <= limit:
        return ranked
    remainder = sum((row.amount for row in ranked[limit - 1 :]), Decimal("0"))
    return ranked[: limit - 1] + [CategoryRow(name="Other categories", amount=remainder)]


def _build_category_chart(categories: list[CategoryRow], currency: str) -> bytes:
    rows = list(reversed(_top_categories(categories)))
    values = [float(row.amount) for row in rows]

    fig, ax = plt.subplots(figsize=(6.4, 0.45 * len(rows) + 1.2), dpi=130)
    bars = ax.barh([row.name for row in rows], values, color=_EXPENSE_HEX, height=0.6)
    ax.bar_label(bars, labels=[f"{value:,.2f}" for value in values], padding=3, fontsize=7)
    ax.set_xlabel(currency, fontsize=8)
    ax.tick_params(axis="both", labelsize=8)
    ax.spines[["top", "right"]].set_visible(False)
    ax.set_xlim(0, max(values) * 1.2)

    png = BytesIO()
    fig.tight_layout()
    fig.savefig(png, format="png")
    plt.close(fig)
    return png.getvalue()


def _build_totals_table(data: TransactionsReportData) -> Table:
    header = ["Income", "Expenses", "Net", "Transactions"]
    values = [
        _format_amount(data.income, data.currency),
        _format_amount(data.expenses, data.currency),
        _format_amount(data.net, data.currency),
        str(data.count),
    ]
    net_color = _INCOME_COLOR if data.net >= 0 else _EXPENSE_COLOR
    table = Table([header, values], colWidths=[45 * mm] * 3 + [35 * mm])
    table.setStyle(
        TableStyle(
            [
                ("FONTSIZE", (0, 0), (-1, 0), 8),
                ("TEXTCOLOR", (0, 0), (-1, 0), _MUTED_COLOR),
                ("FONTNAME", (0, 1), (-1, 1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 1), (-1, 1), 12),
                ("TEXTCOLOR", (0, 1), (0, 1), _INCOME_COLOR),
                ("TEXTCOLOR", (1, 1), (1, 1), _EXPENSE_COLOR),
                ("TEXTCOLOR", (2, 1), (2, 1), net_color),
                ("LINEBELOW", (0, 1), (-1, 1), 1, _RULE_COLOR),
                ("BOTTOMPADDING", (0, 1), (-1, 1), 6),
            ]
        )
    )
    return table


def _build_transactions_table(data: TransactionsReportData) -> Table:
    rows = [["Date", "Description", "Category", "Type", "Amount"]]
    shown = data.transactions[:_DISPLAY_LIMIT]
    for row in shown:
        signed = ("+" if row.type == TransactionType.INCOME else "-") + _format_amount(row.amount, data.currency)
        rows.append([row.date, _shorten(row.description), row.category, row.type.value, signed])
    if not shown:
        rows.append(["", "No transactions in this view", "", "", ""])

    style = [
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("LINEBELOW", (0, 0), (-1, 0), 0.8, _RULE_COLOR),
        ("ALIGN", (4, 0), (4, -1), "RIGHT"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, _STRIPE_COLOR]),
    ]
    for index, row in enumerate(shown, start=1):
        color = _INCOME_COLOR if row.type == TransactionType.INCOME else _EXPENSE_COLOR
        style.append(("TEXTCOLOR", (4, index), (4, index), color))

    table = Table(rows, colWidths=[24 * mm, 66 * mm, 38 * mm, 18 * mm, 32 * mm], repeatRows=1)
    table.setStyle(TableStyle(style))
    return table


def _footer(generated_on: str):
    def draw(canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 7)
        canvas.setFillColor(_MUTED_COLOR)
        canvas.drawString(doc.leftMargin, 8 * mm, f"Spending tracker - {generated_on}")
        canvas.drawRightString(doc.pagesize[0] - doc.rightMargin, 8 * mm, f"Page {canvas.getPageNumber()}")
        canvas.restoreState()

    return draw


def generate_transactions_report_pdf(data: TransactionsReportData) -> bytes:
    """Render the view as two pages: totals with the expense chart, then the detail table."""

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title="Transactions report",
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=18 * mm,
        bottomMargin=16 * mm,
    )
    styles = getSampleStyleSheet()
    heading = styles["Heading2"]
    note = ParagraphStyle(name="ReportNote", parent=styles["BodyText"], fontSize=8, textColor=_MUTED_COLOR)
    generated_on = date.today().isoformat()

    story = [
        Paragraph("Transactions report", styles["Title"]),
        Paragraph(escape(data.view_label), note),
        Spacer(1, 6 * mm),
        _build_totals_table(data),
        Spacer(1, 8 * mm),
        Paragraph("Expenses by category", heading),
    ]
    if data.categories:
        chart = _build_category_chart(data.categories, data.currency)
        story.append(Image(BytesIO(chart), width=160 * mm, height=160 * mm, kind="proportional"))
    else:
        story.append(Paragraph("No expenses in this view.", styles["BodyText"]))
    if data.skipped:
        story.append(Spacer(1, 4 * mm))
        story.append(Paragraph(f"{data.skipped} unreadable record(s) left out of this report.", note))

    story.append(PageBreak())
    story.append(Paragraph("Transactions", heading))
    if len(data.transactions) > _DISPLAY_LIMIT:
        story.append(Paragraph(f"Showing the first {_DISPLAY_LIMIT} of {len(data.transactions)}.", note))
    story.append(Spacer(1, 3 * mm))
    story.append(_build_transactions_table(data))

    on_page = _footer(generated_on)
    doc.build(story, onFirstPage=on_page, onLaterPages=on_page)
    return buffer.getvalue()
