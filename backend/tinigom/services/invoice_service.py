from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from tinigom.schemas import InvoiceRequest
from tinigom.services.gateway import PersistenceGateway

BRAND_BLUE = colors.HexColor("#2c6fbb")


def format_invoice_number(number: int) -> str:
    return f"#{number:05d}"


def next_invoice_number(gateway: PersistenceGateway) -> str:
    """Bump the counter on the settings row and return the formatted number."""
    row = gateway.get_settings()
    number = row.last_invoice_number + 1
    gateway.settings.update(row.id, {"last_invoice_number": number})
    return format_invoice_number(number)


class InvoicePDFGenerator:
    """Render a single-service invoice as PDF bytes."""

    def __init__(self, currency: str = "AED"):
        self.currency = currency
        self.styles = getSampleStyleSheet()
        self.custom_styles = self._create_custom_styles()

    def _create_custom_styles(self):
        return {
            'InvoiceTitle': ParagraphStyle(
                'InvoiceTitle',
                parent=self.styles['Heading1'],
                fontSize=24,
                spaceAfter=6,
                textColor=BRAND_BLUE
            ),
            'Label': ParagraphStyle(
                'Label',
                parent=self.styles['Normal'],
                fontSize=9,
                textColor=colors.grey,
                fontName='Helvetica-Bold'
            ),
            'Body': ParagraphStyle(
                'Body',
                parent=self.styles['Normal'],
                fontSize=10,
                leading=14
            ),
        }

    def _money(self, value: float) -> str:
        return f"{self.currency} {value:,.2f}"

    def _party(self, title, name, address, phone):
        body = self.custom_styles['Body']
        lines = [Paragraph(title, self.custom_styles['Label']), Paragraph(f"<b>{escape(name)}</b>", body)]
        if address:
            lines.append(Paragraph(escape(address), body))
        if phone:
            lines.append(Paragraph(escape(phone), body))
        return lines

    def generate(self, invoice: InvoiceRequest, invoice_number: str) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=56,
            leftMargin=56,
            topMargin=56,
            bottomMargin=36,
            title=f"Invoice {invoice_number}",
        )
        body = self.custom_styles['Body']
        story = []

        # Header
        header = Table(
            [[Paragraph("INVOICE", self.custom_styles['InvoiceTitle']), Paragraph(f"<b>{escape(invoice_number)}</b>", body)]],
            colWidths=[300, 180],
        )
        header.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'MIDDLE'), ('ALIGN', (1, 0), (1, 0), 'RIGHT')]))
        story.append(header)

        dates = [['Date:', invoice.date.isoformat()]]
        if invoice.due_date:
            dates.append(['Due date:', invoice.due_date.isoformat()])
        story.append(Table(dates, colWidths=[80, 160], hAlign='LEFT'))
        story.append(Spacer(1, 18))

        # Parties
        sender = invoice.from_name or invoice.user.value
        parties = Table(
            [[
                self._party("FROM", sender, invoice.from_address, invoice.from_phone),
                self._party("BILL TO", invoice.to_name, invoice.to_address, invoice.to_phone),
            ]],
            colWidths=[240, 240],
        )
        parties.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
        story.append(parties)
        story.append(Spacer(1, 24))

        # Service line
        description = [Paragraph(f"<b>{escape(invoice.service_description)}</b>", body)]
        if invoice.services_rendered:
            description.append(Paragraph(f"Services rendered: {escape(invoice.services_rendered)}", body))
        if invoice.deliverables:
            description.append(Paragraph(f"Deliverables: {escape(invoice.deliverables)}", body))

        lines = Table(
            [
                ['Description', 'Qty', 'Rate', 'Amount'],
                [description, str(invoice.quantity), self._money(invoice.amount), self._money(invoice.total)],
            ],
            colWidths=[250, 50, 90, 90],
        )
        lines.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), BRAND_BLUE),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LINEBELOW', (0, -1), (-1, -1), 0.5, colors.lightgrey),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
        ]))
        story.append(lines)
        story.append(Spacer(1, 18))

        # Totals
        totals = Table(
            [['Subtotal', self._money(invoice.total)], ['Total', self._money(invoice.total)]],
            colWidths=[90, 90],
            hAlign='RIGHT',
        )
        totals.setStyle(TableStyle([
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTNAME', (0, 1), (-1, 1), 'Helvetica-Bold'),
            ('LINEABOVE', (0, 1), (-1, 1), 1, BRAND_BLUE),
        ]))
        story.append(totals)

        doc.build(story)
        pdf = buffer.getvalue()
        buffer.close()
        return pdf
