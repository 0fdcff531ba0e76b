"""QR code generation for dining tables.
"""

import logging
from typing import Optional

import qrcode
from qrcode.exceptions import DataOverflowError
from qrcode.image.svg import SvgPathImage

from adapters import storage
from app.config import settings

logger = logging.getLogger("restaurant.qr")

QR_DIRECTORY = "qr_codes"


def table_menu_url(table) -> str:
    """URL a guest lands on after scanning the table's code."""
    base = settings.app_url.rstrip("/")
    return f"{base}/menu?table={table.id}&floor={table.floor}&num={table.num}"


def generate(table) -> Optional[str]:
    """Render a QR code for ``table`` as SVG under the media root.

    Returns:
        Path relative to the media root, or None if rendering or writing failed
    """
    relative_path = f"{QR_DIRECTORY}/table_{table.id}.svg"
    try:
        image = qrcode.make(table_menu_url(table), image_factory=SvgPathImage)
        target = storage.absolute_path(relative_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as out:
            image.save(out)
    except (OSError, ValueError, DataOverflowError) as exc:
        logger.error("QR code generation failed for table %s: %s", table.id, exc)
        return None

    logger.info("Generated QR code for table %s at %s", table.id, relative_path)
    return relative_path
