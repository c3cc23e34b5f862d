import base64
import io

import qrcode

DATA_URI_PREFIX = "data:image/png;base64,"


def make_qr_data_uri(payload: str) -> str:
    """Render ``payload`` as a PNG QR code and return it as a data URI."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=2,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white").convert("L")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")

    return DATA_URI_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")


def decode_data_uri(data_uri: str) -> bytes:
    """PNG bytes back out of a data URI produced by ``make_qr_data_uri``."""
    if not data_uri or "," not in data_uri:
        raise ValueError("Not a data URI")
    return base64.b64decode(data_uri.split(",", 1)[1])
