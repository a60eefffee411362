"""Download filename for exported documents."""
import os
import re

DEFAULT_EXPORT_FILENAME = "reordered.pdf"


def _safe_basename(name: str, max_len: int = 80) -> str:
    """Get a safe filename base from a configured name (no extension, no bad chars)."""
    if not name or not name.strip():
        return ""
    base = os.path.splitext(os.path.basename(name.strip()))[0]
    base = re.sub(r'[^\w\s\-_.]', "_", base)
    base = re.sub(r'[\s]+', "_", base).strip("._")
    return base[:max_len]


def make_export_filename(configured: str | None) -> str:
    """
    Fixed download name for every export of a workspace. Falls back to
    reordered.pdf when the configured name is empty or unusable; always ends in .pdf.
    """
    base = _safe_basename(configured or "")
    if not base:
        return DEFAULT_EXPORT_FILENAME
    return f"{base}.pdf"
