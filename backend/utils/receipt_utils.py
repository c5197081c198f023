from fpdf import FPDF
from fpdf.enums import XPos, YPos
import logging
import os

from utils.formatting import format_inr, amount_to_words

logger = logging.getLogger(__name__)

COMPANY_NAME = os.getenv("COMPANY_NAME", "Fish Trading Company")
COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "")

NEXT_LINE = {"new_x": XPos.LMARGIN, "new_y": YPos.NEXT}


def _latin1(text) -> str:
    # Core PDF fonts only cover latin-1
    return str(text or "").encode("latin-1", "replace").decode("latin-1")


class PDF(FPDF):
    title_text = "Receipt"

    def header(self):
        self.set_font('helvetica', 'B', 12)
        self.cell(0, 10, self.title_text, border=0, align='C', **NEXT_LINE)
        self.ln(5)

    def footer(self):
        self.set_y(-15)
        self.set_font('helvetica', 'I', 8)
        self.cell(0, 10, f'Page {self.page_no()}', border=0, align='C')


def render_invoice_pdf(invoice, payment, kind: str) -> bytes:
    """
    Render a payment invoice as PDF bytes.

    Args:
        invoice: ClientInvoice or VendorInvoice row.
        payment: The payment the invoice was issued for.
        kind: "client" or "vendor"; selects the heading and the counter-party label.
    """
    pdf = PDF()
    pdf.title_text = "Payment Receipt" if kind == "client" else "Payment Voucher"
    pdf.add_page()

    pdf.set_font('helvetica', 'B', 16)
    pdf.cell(0, 10, _latin1(COMPANY_NAME), **NEXT_LINE)
    if COMPANY_ADDRESS:
        pdf.set_font('helvetica', '', 11)
        pdf.cell(0, 8, _latin1(COMPANY_ADDRESS), **NEXT_LINE)
    pdf.ln(5)

    pdf.set_font('helvetica', '', 11)
    pdf.cell(0, 8, f'Invoice #: {invoice.invoice_no}', **NEXT_LINE)
    pdf.cell(0, 8, f'Date: {invoice.invoice_date.strftime("%d-%m-%Y")}', **NEXT_LINE)
    pdf.ln(3)

    pdf.set_font('helvetica', 'B', 11)
    pdf.cell(0, 8, 'Received From:' if kind == "client" else 'Paid To:', **NEXT_LINE)
    pdf.set_font('helvetica', '', 11)
    pdf.cell(0, 8, _latin1(invoice.party_name), **NEXT_LINE)
    if invoice.address:
        pdf.multi_cell(0, 8, _latin1(invoice.address), **NEXT_LINE)
    pdf.ln(5)

    pdf.set_font('helvetica', 'B', 11)
    pdf.cell(100, 10, 'Description', border=1, align='C')
    pdf.cell(40, 10, 'Mode', border=1, align='C')
    pdf.cell(50, 10, 'Amount', border=1, align='C', **NEXT_LINE)

    pdf.set_font('helvetica', '', 11)
    mode = payment.payment_mode.value if payment.payment_mode else ''
    if payment.reference:
        mode = f'{mode} ({payment.reference})'
    pdf.cell(100, 10, _latin1(invoice.description or 'Payment'), border=1)
    pdf.cell(40, 10, _latin1(mode), border=1)
    pdf.cell(50, 10, format_inr(invoice.total_amount), border=1, align='R', **NEXT_LINE)
    pdf.ln(5)

    if kind == "vendor":
        bank_lines = [
            f'{label}: {value}'
            for label, value in (
                ('Bank', payment.bank_name),
                ('A/c No', payment.account_number),
                ('IFSC', payment.ifsc),
            )
            if value
        ]
        if payment.installment_number:
            of_total = f' of {payment.installments}' if payment.installments else ''
            bank_lines.append(f'Installment {payment.installment_number}{of_total}')
        if bank_lines:
            pdf.set_font('helvetica', '', 10)
            for line in bank_lines:
                pdf.cell(0, 7, _latin1(line), **NEXT_LINE)
            pdf.ln(3)

    pdf.set_font('helvetica', 'I', 10)
    pdf.multi_cell(0, 8, f'Amount in words: {amount_to_words(invoice.total_amount)}', **NEXT_LINE)

    logger.debug(f"Rendered {kind} invoice {invoice.invoice_no} for payment {payment.id}")
    return bytes(pdf.output())
