"""Optional PDF attachment sent alongside the idea description.

The analysis endpoint only understands ``application/pdf`` uploads, so
anything else is rejected before the request is made.  The document is
opened with ``pypdf`` to catch corrupt or encrypted files early and to
report the page count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from knack.util import CLIError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_ATTACHMENT_SIZE = 20 * 1024 * 1024  # 20 MB
PDF_MIME_TYPE = "application/pdf"
_PDF_EXTENSIONS = frozenset({".pdf"})


@dataclass
class Attachment:
    """A validated file ready to be sent as the multipart ``file`` part."""

    filename: str
    data: bytes
    mime_type: str = PDF_MIME_TYPE
    page_count: int = 0

    @property
    def size(self) -> int:
        return len(self.data)

    def to_multipart(self) -> dict[str, tuple[str, bytes, str]]:
        """Return the ``files=`` mapping for ``requests.post``."""
        return {"file": (self.filename, self.data, self.mime_type)}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def read_attachment(path: str | Path) -> Attachment:
    """Read and validate a PDF attachment.

    Raises:
        CLIError if the file is missing, not a PDF, too large, or cannot
        be opened by ``pypdf``.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise CLIError(f"Attachment not found: {path}")

    if path.suffix.lower() not in _PDF_EXTENSIONS:
        raise CLIError(
            f"Unsupported attachment type: '{path.suffix or path.name}'.\n"
            "Only PDF documents can be attached to an analysis."
        )

    size = path.stat().st_size
    if size > MAX_ATTACHMENT_SIZE:
        raise CLIError(
            f"Attachment too large ({size // (1024 * 1024)}MB > "
            f"{MAX_ATTACHMENT_SIZE // (1024 * 1024)}MB limit)."
        )

    data = path.read_bytes()
    page_count = _count_pdf_pages(path)
    logger.debug("Attachment %s: %d bytes, %d pages", path.name, len(data), page_count)
    return Attachment(filename=path.name, data=data, page_count=page_count)


def _count_pdf_pages(path: Path) -> int:
    """Open the PDF with pypdf and return its page count."""
    from pypdf import PdfReader
    from pypdf.errors import PdfReadError

    try:
        reader = PdfReader(str(path))
        if reader.is_encrypted:
            raise CLIError(f"Attachment is encrypted and cannot be analyzed: {path.name}")
        return len(reader.pages)
    except PdfReadError as exc:
        raise CLIError(f"Attachment is not a readable PDF: {path.name} ({exc})") from exc
