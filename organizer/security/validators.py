import re

from organizer import config

ALLOWED_PDF_CONTENT_TYPES = (
    "application/pdf",
    "application/x-pdf",
)
ALLOWED_PDF_EXTENSIONS = (".pdf",)

# UUID v4 regex for validating workspace / download / print surface ids (path parameters)
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[4][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def _check_file_type(upload_file, allowed_content_types, allowed_extensions, expected_label: str):
    """Raise ValueError if content_type or filename extension is not allowed."""
    ct = (upload_file.content_type or "").split(";")[0].strip().lower()
    fn = (upload_file.filename or "").lower()
    has_valid_ext = fn and any(fn.endswith(ext) for ext in allowed_extensions)
    has_valid_ct = ct and ct in allowed_content_types
    if has_valid_ct or has_valid_ext:
        return
    if ct and not has_valid_ext:
        raise ValueError(f"Invalid file type. Expected {expected_label}.")
    if fn:
        raise ValueError(f"Invalid file. Expected {expected_label} (e.g. {', '.join(allowed_extensions)}).")
    raise ValueError("Invalid file: missing filename and content type.")


def validate_upload(file):
    """Validate that the upload is a PDF (content-type or extension)."""
    _check_file_type(
        file,
        ALLOWED_PDF_CONTENT_TYPES,
        ALLOWED_PDF_EXTENSIONS,
        "PDF",
    )


def validate_file_size(size: int, max_size: int = config.MAX_FILE_SIZE) -> None:
    """Raise ValueError if size exceeds max_size (default MAX_FILE_SIZE)."""
    if size <= 0:
        raise ValueError("File is empty.")
    if size > max_size:
        mb = max_size // (1024 * 1024)
        raise ValueError(f"File too large. Maximum size is {mb} MB.")


def validate_id(value: str) -> None:
    """Raise ValueError if value is not a valid UUID v4."""
    if not value or not UUID_PATTERN.match(value.strip()):
        raise ValueError("Invalid ID format.")


def ensure_pdf_bytes(data: bytes) -> None:
    """Raise ValueError if data does not look like a PDF (magic bytes)."""
    if len(data) < 8 or not data.startswith(b"%PDF"):
        raise ValueError("File does not appear to be a PDF.")
