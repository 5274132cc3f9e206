from datetime import datetime
from typing import Optional
import base64
import json
import qrcode
from qrcode import constants
from io import BytesIO
from PIL import Image

CREDENTIAL_TYPE = "TRANSIT_BOOKING"

def generate_ticket_credential(booking_id: str, issued_at: Optional[datetime] = None) -> str:
    """Opaque presentation token for a paid booking.

    Base64 of a small JSON document. It is not signed and is not proof of
    payment on its own; gates must look the booking up.
    """
    issued_at = issued_at or datetime.now()
    payload = {
        "booking_id": booking_id,
        "timestamp": int(issued_at.timestamp() * 1000),
        "type": CREDENTIAL_TYPE
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()

def decode_ticket_credential(credential: str) -> dict:
    return json.loads(base64.b64decode(credential.encode()).decode())

def render_ticket_qr(credential: str, size: int = 300, border: int = 4) -> bytes:
    """Render the credential as a PNG QR code"""

    qr = qrcode.QRCode(
        version=1,
        error_correction=constants.ERROR_CORRECT_M,
        box_size=10,
        border=border,
    )

    qr.add_data(credential)
    qr.make(fit=True)

    qr_image = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    qr_image = qr_image.resize((size, size), Image.LANCZOS)

    buffer = BytesIO()
    qr_image.save(buffer, format="PNG")
    return buffer.getvalue()
