"""
upload_processor.py - Upload validation and archive extraction

Turns an uploaded HTML page or ZIP archive into the list of files sent to
the hosting provider. Archive entries are filtered by an extension
allow-list and a path safety check; unsafe entries are dropped rather than
failing the upload.
"""

import base64
import binascii
import io
import logging
import posixpath
import re
import zipfile
from typing import List

from .models import UploadFile

_LOG = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")

SAFE_EXTENSIONS = frozenset({
    ".html", ".htm", ".css", ".js", ".json", ".txt", ".md",
    ".jpg", ".jpeg", ".png", ".gif", ".svg", ".ico",
    ".woff", ".woff2", ".ttf", ".eot", ".webp",
})

ALLOWED_DOTFILES = frozenset({".htaccess"})

ENTRY_POINT = "index.html"


class UploadValidationError(ValueError):
    """Raised when an upload cannot be turned into a deployable file set."""

    def __init__(self, message: str, reason: str = "invalid_upload"):
        super().__init__(message)
        self.reason = reason


def is_valid_name(name: str) -> bool:
    """Lowercase letters, digits and hyphens only."""
    return bool(NAME_PATTERN.fullmatch(name))


def is_safe_file(file_path: str) -> bool:
    """Return True if an archive entry may be deployed."""
    ext = posixpath.splitext(file_path)[1].lower()
    if ext not in SAFE_EXTENSIONS:
        return False

    if ".." in file_path or "//" in file_path:
        return False

    basename = posixpath.basename(file_path)
    if basename.startswith(".") and basename not in ALLOWED_DOTFILES:
        return False

    return True


def has_entry_point(files: List[UploadFile]) -> bool:
    return any(f.filepath.lower() == ENTRY_POINT for f in files)


def extract_archive(file_data: str) -> List[UploadFile]:
    """Decode a base64 ZIP archive and return its safe entries.

    Raises:
        UploadValidationError: if the payload is not a readable archive or
            no ``index.html`` survives filtering.
    """
    try:
        raw = base64.b64decode(file_data)
        archive = zipfile.ZipFile(io.BytesIO(raw))
    except (binascii.Error, ValueError, zipfile.BadZipFile) as e:
        raise UploadValidationError("File is not a valid ZIP archive", reason="invalid_archive") from e

    files: List[UploadFile] = []
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            if not is_safe_file(info.filename):
                _LOG.debug("Skipping unsafe archive entry: %s", info.filename)
                continue
            try:
                data = archive.read(info)
            except (zipfile.BadZipFile, RuntimeError, NotImplementedError) as e:
                # Corrupt, encrypted or unsupported-compression entries
                raise UploadValidationError(
                    f"Archive entry '{info.filename}' cannot be read", reason="invalid_archive"
                ) from e
            content = base64.b64encode(data).decode("ascii")
            files.append(UploadFile(filepath=info.filename, content=content))

    if not has_entry_point(files):
        raise UploadValidationError("ZIP archive must contain index.html", reason="missing_index")

    _LOG.info("Extracted %d file(s) from archive", len(files))
    return files


def process_upload(file_name: str, file_data: str) -> List[UploadFile]:
    """Build the deployable file set for an upload.

    ``.zip`` uploads are extracted and filtered. ``.html``/``.htm`` uploads
    are already base64 and become ``index.html`` unchanged.
    """
    lowered = file_name.lower()

    if lowered.endswith(".zip"):
        return extract_archive(file_data)

    if lowered.endswith(".html") or lowered.endswith(".htm"):
        return [UploadFile(filepath=ENTRY_POINT, content=file_data)]

    raise UploadValidationError("Only .html/.htm or .zip files are supported", reason="unsupported_file_type")
