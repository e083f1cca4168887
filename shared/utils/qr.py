"""
QR codes pointing at a menu's public page, for printing on tables and flyers.
"""

import io
import re

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from shared.config.settings import settings


def public_menu_url(restaurant_id: int, menu_id: int) -> str:
    return f"{settings.public_menu_base_url.rstrip('/')}/{restaurant_id}?menu={menu_id}"


def render_qr_png(data: str, *, box_size: int = 10, border: int = 4) -> bytes:
    """Black on white PNG with medium error correction."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=box_size, border=border)
    qr.add_data(data)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()


def qr_filename(*parts: str) -> str:
    """Download name like QR-Carta-Casa_Matriz.png (ASCII letters and digits only)."""
    slugs = [re.sub(r"[^A-Za-z0-9]+", "_", part).strip("_") for part in parts]
    return "QR-" + "-".join(s for s in slugs if s) + ".png"
