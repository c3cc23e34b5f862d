import io
import os
import re
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from tailor_billing.config import settings
from tailor_billing.core.assembler import should_show_payment_qr
from tailor_billing.core.money import format_money
from tailor_billing.core.types import Bill
from tailor_billing.utils.qr import decode_data_uri

MARGIN = 30
COLUMN_GAP = 16
LINE = 13
ITEMS_BOTTOM = 330   # room left for totals + payment block


def _money(amount):
    # Helvetica has no rupee glyph
    return format_money(amount, symbol="Rs. ")


def _qty(value):
    text = f"{value:f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def _draw_copy(c, bill: Bill, x, width, top, copy_title):
    right = x + width
    y = top

    # -------------------------
    # HEADER
    # -------------------------
    c.setFont("Helvetica-Bold", 14)
    c.drawCentredString(x + width / 2, y, settings.SHOP_NAME)
    y -= LINE
    c.setFont("Helvetica", 7)
    c.drawCentredString(x + width / 2, y, settings.SHOP_TAGLINE)
    y -= LINE - 3
    c.drawCentredString(x + width / 2, y, settings.SHOP_ADDRESS)
    y -= 6
    c.line(x, y, right, y)
    y -= LINE

    c.setFont("Helvetica-Bold", 8)
    c.drawString(x, y, copy_title)
    c.drawRightString(right, y, f"Bill No - {bill.bill_no_display or 'Pending'}")
    y -= LINE

    c.setFont("Helvetica", 8)
    c.drawString(x, y, f"Date: {bill.created_date.strftime('%d-%m-%Y')}")
    c.drawRightString(right, y, f"Qty: {_qty(bill.total_quantity)}")
    y -= LINE

    c.drawString(x, y, f"Customer: {bill.customer_name}")
    y -= LINE
    c.drawString(x, y, f"Phone: {bill.customer_phone}")
    y -= LINE
    if bill.customer_address:
        c.drawString(x, y, f"Address: {bill.customer_address[:45]}")
        y -= LINE
    y -= 4

    # -------------------------
    # ITEMS
    # -------------------------
    c.setFont("Helvetica-Bold", 8)
    c.drawString(x, y, "Item")
    c.drawRightString(x + width * 0.58, y, "Qty")
    c.drawRightString(x + width * 0.78, y, "Rate")
    c.drawRightString(right, y, "Amount")
    y -= 5
    c.line(x, y, right, y)
    y -= LINE - 2

    c.setFont("Helvetica", 8)
    for index, item in enumerate(bill.items):
        if y < ITEMS_BOTTOM:
            c.drawString(x, y, f"+ {len(bill.items) - index} more items")
            y -= LINE
            break

        label = item.name if not item.item_type else f"{item.item_type}: {item.name}"
        c.drawString(x, y, label[:28])
        c.drawRightString(x + width * 0.58, y, _qty(item.quantity))
        c.drawRightString(x + width * 0.78, y, f"{item.unit_price:.2f}")
        c.drawRightString(right, y, f"{item.quantity * item.unit_price:.2f}")
        y -= LINE

    # -------------------------
    # TOTALS
    # -------------------------
    y -= 4
    c.line(x + width * 0.4, y, right, y)
    y -= LINE

    for label, amount in (
        ("Subtotal:", bill.subtotal),
        ("Discount:", bill.discount),
        ("Total:", bill.total),
        ("Advance:", bill.advance),
    ):
        c.drawRightString(x + width * 0.78, y, label)
        c.drawRightString(right, y, _money(amount))
        y -= LINE

    c.setFont("Helvetica-Bold", 9)
    c.drawRightString(x + width * 0.78, y, "Balance:")
    c.drawRightString(right, y, _money(bill.balance))
    y -= LINE + 2

    c.setFont("Helvetica", 8)
    if bill.due_date:
        c.drawString(x, y, f"Delivery: {bill.due_date.strftime('%d-%m-%Y')}")
        y -= LINE
    if bill.special_instructions:
        c.drawString(x, y, f"Note: {bill.special_instructions[:50]}")
        y -= LINE

    return y


def _draw_payment_block(c, bill: Bill, upi_id, y):
    width, _ = A4
    center = width / 2

    c.setFont("Helvetica-Bold", 9)
    c.drawCentredString(center, y, "Scan to Pay Balance Amount")
    y -= 8

    size = 100
    if bill.qr_code:
        image = ImageReader(io.BytesIO(decode_data_uri(bill.qr_code)))
        c.drawImage(image, center - size / 2, y - size, width=size, height=size)
        y -= size + LINE
    else:
        y -= LINE
        c.setFont("Helvetica", 8)
        c.drawCentredString(center, y, "QR code not available")
        y -= LINE

    c.setFont("Helvetica", 8)
    c.drawCentredString(center, y, f"UPI Payment  {_money(bill.balance)}")
    y -= LINE
    c.drawCentredString(center, y, f"UPI: {upi_id}")
    y -= LINE
    c.drawCentredString(center, y, f"Order #{bill.bill_no_display or 'Pending'}")
    return y - LINE


def generate_bill_pdf(bill: Bill, upi_id=None, output_dir=None):
    """Shop copy and customer copy side by side, payment QR underneath while money is due."""
    output_dir = output_dir or settings.PDF_OUTPUT_DIR
    upi_id = upi_id or settings.DEFAULT_UPI_ID

    # Ensure directory exists
    os.makedirs(output_dir, exist_ok=True)

    name = bill.bill_no_display or f"pending_{bill.id or 'draft'}"
    name = re.sub(r"[^\w.-]", "_", name)
    file_path = os.path.join(output_dir, f"bill_{name}.pdf")

    c = canvas.Canvas(file_path, pagesize=A4)
    width, height = A4

    column = (width - 2 * MARGIN - COLUMN_GAP) / 2
    top = height - 50

    left_bottom = _draw_copy(c, bill, MARGIN, column, top, "SHOP COPY")
    right_x = MARGIN + column + COLUMN_GAP
    right_bottom = _draw_copy(c, bill, right_x, column, top, "CASH MEMO")

    y = min(left_bottom, right_bottom)
    c.line(width / 2, top + 12, width / 2, y)
    c.rect(MARGIN - 8, y - 4, width - 2 * MARGIN + 16, top + 20 - y)
    y -= 24

    if should_show_payment_qr(bill):
        _draw_payment_block(c, bill, upi_id, y)

    c.save()
    return file_path
