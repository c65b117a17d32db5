"""PDF rendering for closing invoices."""

from __future__ import annotations

from decimal import Decimal
from html import escape
from string import Template
from typing import TYPE_CHECKING

from commission_ledger.core.config import settings
from commission_ledger.models.currency import quantize_amount

if TYPE_CHECKING:
    from commission_ledger.models.closing import Closing, ClosingLineItem

_CLOSING_TEMPLATE = Template("""\
<!DOCTYPE html>
<html>
<head>
<style>
  body { font-family: Helvetica, Arial, sans-serif; font-size: 11px; color: #333; margin: 36px; }
  h1 { font-size: 22px; margin-bottom: 4px; }
  .header { display: flex; justify-content: space-between; margin-bottom: 24px; }
  .header-left, .header-right { width: 48%; }
  .meta td { padding: 2px 8px 2px 0; }
  table.items { width: 100%; border-collapse: collapse; margin: 18px 0; }
  table.items th { text-align: left; border-bottom: 2px solid #333; padding: 5px 6px; }
  table.items td { padding: 5px 6px; border-bottom: 1px solid #ddd; }
  table.items .right { text-align: right; }
  .overridden { font-style: italic; }
  .totals { width: 280px; margin-left: auto; }
  .totals td { padding: 4px 8px; }
  .totals .label { text-align: right; }
  .totals .total-row { font-weight: bold; border-top: 2px solid #333; }
  .status { display: inline-block; padding: 4px 12px; border-radius: 4px; font-weight: bold;
             text-transform: uppercase; font-size: 10px; }
  .status-active { background: #e6f4ea; color: #137333; }
  .status-reversed { background: #fce8e6; color: #c5221f; }
</style>
</head>
<body>
<div class="header">
  <div class="header-left">
    <h1>${company_name}</h1>
    <p>${company_address}</p>
  </div>
  <div class="header-right" style="text-align: right;">
    <h1>${title}</h1>
    <span class="status status-${status}">${status}</span>
  </div>
</div>
<table class="meta">
  <tr><td><strong>Invoice #:</strong></td><td>${invoice_number}</td></tr>
  <tr><td><strong>Issued:</strong></td><td>${issued_at}</td></tr>
  <tr><td><strong>Period:</strong></td><td>${period}</td></tr>
  <tr><td><strong>${recipient_label}:</strong></td><td>${recipient_name}</td></tr>
  <tr><td><strong>Prepared by:</strong></td><td>${created_by}</td></tr>
</table>
<table class="items">
  <thead>
    <tr>
      <th>Reservation</th>
      <th>Sale date</th>
      <th>Client</th>
      <th>Tour</th>
      <th class="right">Pax</th>
      <th class="right">Gross</th>
      <th class="right">Rate</th>
      <th class="right">Amount</th>
    </tr>
  </thead>
  <tbody>
    ${line_rows}
  </tbody>
</table>
<table class="totals">
  <tr><td class="label">Items:</td><td class="right">${item_count}</td></tr>
  <tr class="total-row"><td class="label">Total (${currency}):</td>\
<td class="right">${total}</td></tr>
</table>
${reversal_note}
</body>
</html>
""")

_LINE_ROW_TEMPLATE = Template(
    '<tr class="${row_class}"><td>${reservation_number}</td><td>${sale_date}</td>'
    "<td>${client_name}</td><td>${tour_name}</td>"
    '<td class="right">${pax}</td><td class="right">${gross}</td>'
    '<td class="right">${rate}</td><td class="right">${amount}</td></tr>'
)

_TITLES = {
    "salesperson": ("SALESPERSON COMMISSIONS", "Salesperson"),
    "agency": ("AGENCY COMMISSIONS", "Agency"),
    "operator": ("OPERATOR PAYMENTS", "Operator"),
}


def _format_amount(value: object, currency: str) -> str:
    """Format a monetary amount to the currency's minor unit."""
    if value is None:
        value = Decimal("0")
    return f"{quantize_amount(Decimal(str(value)), currency):,}"


def _format_rate(value: object) -> str:
    if value is None:
        return ""
    return f"{Decimal(str(value)).normalize():f}%"


def _format_date(dt: object) -> str:
    """Format a date or datetime to YYYY-MM-DD, or return empty string if None."""
    if dt is None:
        return ""
    return str(dt)[:10]


def _text(value: object) -> str:
    return escape(str(value)) if value is not None else ""


class PdfService:
    """Service for generating closing invoice PDFs."""

    def render_closing_html(self, closing: Closing, line_items: list[ClosingLineItem]) -> str:
        currency = str(closing.currency)
        line_rows = "\n    ".join(
            _LINE_ROW_TEMPLATE.substitute(
                row_class="overridden" if item.is_overridden else "",
                reservation_number=_text(item.reservation_number),
                sale_date=_format_date(item.sale_date),
                client_name=_text(item.client_name),
                tour_name=_text(item.tour_name),
                pax=item.pax or 0,
                gross=_format_amount(item.gross_amount, currency),
                rate=_format_rate(item.rate),
                amount=_format_amount(item.amount, currency),
            )
            for item in line_items
        )

        title, recipient_label = _TITLES.get(str(closing.closing_type), ("CLOSING", "Recipient"))
        reversal_note = ""
        if not closing.is_active:
            reversal_note = (
                f"<p><strong>Reversed</strong> on {_format_date(closing.undone_at)} by "
                f"{_text(closing.undone_by_name or closing.undone_by)}: "
                f"{_text(closing.undo_reason)}</p>"
            )

        return _CLOSING_TEMPLATE.substitute(
            company_name=_text(settings.COMPANY_NAME),
            company_address="<br>".join(
                _text(part) for part in (settings.COMPANY_ADDRESS, settings.COMPANY_EMAIL) if part
            ),
            title=title,
            status="active" if closing.is_active else "reversed",
            invoice_number=_text(closing.invoice_number),
            issued_at=_format_date(closing.created_at),
            period=f"{_format_date(closing.period_start)} to {_format_date(closing.period_end)}",
            recipient_label=recipient_label,
            recipient_name=_text(closing.recipient_name),
            created_by=_text(closing.created_by_name or closing.created_by),
            line_rows=line_rows,
            item_count=closing.item_count,
            currency=currency,
            total=_format_amount(closing.total_amount, currency),
            reversal_note=reversal_note,
        )

    def generate_closing_pdf(self, closing: Closing, line_items: list[ClosingLineItem]) -> bytes:
        """Generate the invoice PDF for a closing.

        Args:
            closing: The closing to render.
            line_items: Its snapshot line items.

        Returns:
            Raw PDF bytes.
        """
        html = self.render_closing_html(closing, line_items)

        import weasyprint

        pdf_bytes: bytes = weasyprint.HTML(string=html).write_pdf()
        return pdf_bytes
