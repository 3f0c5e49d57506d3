"""
app/normalizers package marker.
"""

from app.normalizers.numeric import NULL_PLACEHOLDERS, coerce_token, normalize_row

__all__ = [
    "NULL_PLACEHOLDERS",
    "coerce_token",
    "normalize_row",
]
