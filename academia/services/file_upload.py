import logging
import secrets
import time
from pathlib import Path

from fastapi import UploadFile

from academia.core.config import Settings
from academia.core.errors import InvalidInput

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def file_url(filename: str) -> str:
    return f"/uploads/{filename}"


def _unique_name(field_name: str, suffix: str) -> str:
    return f"{field_name}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


def save_upload(upload: UploadFile, settings: Settings, field_name: str = "file") -> str:
    """
    Store an uploaded file under UPLOAD_DIR and return its public URL.

    Rejects files whose extension is not allowed and files larger than
    MAX_UPLOAD_BYTES with a 400. A partially written file is removed.
    """
    suffix = Path(upload.filename or "").suffix.lower()
    if suffix.lstrip(".") not in settings.ALLOWED_UPLOAD_EXTENSIONS:
        raise InvalidInput("Only specific file types are allowed!")

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    name = _unique_name(field_name, suffix)
    target = upload_dir / name

    written = 0
    try:
        with target.open("wb") as out:
            while chunk := upload.file.read(CHUNK_SIZE):
                written += len(chunk)
                if written > settings.MAX_UPLOAD_BYTES:
                    raise InvalidInput("File too large")
                out.write(chunk)
    except Exception:
        target.unlink(missing_ok=True)
        raise

    logger.info("stored upload %s (%d bytes)", name, written)
    return file_url(name)


def discard_upload(url: str, settings: Settings) -> None:
    name = Path(url).name
    (Path(settings.UPLOAD_DIR) / name).unlink(missing_ok=True)
    logger.info("discarded upload %s", name)
