"""Local file storage for uploaded images and generated assets.
"""

import logging
import secrets
import shutil
import string
from pathlib import Path, PurePosixPath

from app.config import settings

logger = logging.getLogger("restaurant.storage")

_NAME_ALPHABET = string.ascii_letters + string.digits
_NAME_LENGTH = 40


# ------------------ Paths ------------------
def media_root() -> Path:
    return Path(settings.media_root)


def absolute_path(relative_path: str) -> Path:
    """Resolve a stored relative path, refusing anything outside the media root."""
    root = media_root().resolve()
    target = (root / relative_path).resolve()
    if root != target and root not in target.parents:
        raise ValueError(f"Path escapes media root: {relative_path}")
    return target


def random_name(extension: str) -> str:
    stem = "".join(secrets.choice(_NAME_ALPHABET) for _ in range(_NAME_LENGTH))
    extension = extension.lower().lstrip(".")
    return f"{stem}.{extension}" if extension else stem


def asset_url(relative_path: str) -> str:
    """Public URL of a stored asset."""
    base = settings.app_url.rstrip("/")
    prefix = "/" + settings.media_url_prefix.strip("/")
    return f"{base}{prefix}/{relative_path}"


# ------------------ Operations ------------------
def store(upload, directory: str) -> str:
    """Store an uploaded file under a generated name.

    Args:
        upload: UploadFile-like object with ``filename`` and a readable ``file``
        directory: sub-directory of the media root (e.g. "meals")

    Returns:
        Path relative to the media root, e.g. "meals/AbC...xyz.png"
    """
    extension = PurePosixPath(upload.filename or "").suffix
    relative_path = str(PurePosixPath(directory) / random_name(extension))
    target = absolute_path(relative_path)
    target.parent.mkdir(parents=True, exist_ok=True)

    upload.file.seek(0)
    with open(target, "wb") as out:
        shutil.copyfileobj(upload.file, out)

    logger.info("Stored upload %s as %s", upload.filename, relative_path)
    return relative_path


def delete(relative_path: str) -> bool:
    """Delete a stored file. Returns False if there was nothing to delete."""
    if not relative_path:
        return False
    try:
        target = absolute_path(relative_path)
    except ValueError:
        logger.warning("Refusing to delete %s: outside media root", relative_path)
        return False
    if not target.is_file():
        logger.info("Asset %s already absent", relative_path)
        return False
    target.unlink()
    logger.info("Deleted asset %s", relative_path)
    return True
