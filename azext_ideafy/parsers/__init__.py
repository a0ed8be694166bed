"""Parsers for files sent alongside an analysis request."""

from azext_ideafy.parsers.attachment import (
    MAX_ATTACHMENT_SIZE,
    Attachment,
    read_attachment,
)

__all__ = [
    "Attachment",
    "read_attachment",
    "MAX_ATTACHMENT_SIZE",
]
