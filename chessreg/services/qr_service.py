"""
QR ticket for a fresh registration.

Encodes the player's reference number so organisers can scan it when
matching a bank deposit slip. Uses `segno`, a pure-Python QR encoder.
"""
from __future__ import annotations

import io

import segno


def ticket_payload(reference_number: str, full_name: str) -> str:
    return f"{reference_number}|{full_name}"


def generate_qr_png(payload: str, scale: int = 10, border: int = 2) -> bytes:
    """
    Render a QR code as PNG bytes.

    Parameters
    ----------
    payload : text to encode
    scale   : pixels per module
    border  : quiet-zone width in modules
    """
    qr  = segno.make_qr(payload, error="M")
    buf = io.BytesIO()
    qr.save(buf, kind="png", scale=scale, border=border)
    return buf.getvalue()
