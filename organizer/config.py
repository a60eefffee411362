"""Configuration for the PDF page organizer service."""
import os

from dotenv import load_dotenv

load_dotenv()

# Storage: transient download artifacts live under this directory
STORAGE_DIR = os.path.abspath(os.environ.get("ORGANIZER_STORAGE_DIR", "/tmp/pdf-organizer"))

# Thumbnails
THUMBNAIL_SCALE = float(os.getenv("THUMBNAIL_SCALE", "0.35"))
THUMBNAIL_CONCURRENCY = max(1, int(os.getenv("THUMBNAIL_CONCURRENCY", "2")))

# Export / print delivery
EXPORT_FILENAME = os.getenv("EXPORT_FILENAME", "reordered.pdf")
DOWNLOAD_REVOKE_SECONDS = float(os.getenv("DOWNLOAD_REVOKE_SECONDS", "30"))
PRINT_LOAD_TIMEOUT_SECONDS = float(os.getenv("PRINT_LOAD_TIMEOUT_SECONDS", "60"))
PRINT_RELEASE_SECONDS = float(os.getenv("PRINT_RELEASE_SECONDS", "30"))

# Workspaces untouched for this long are closed and dropped from the registry
WORKSPACE_IDLE_SECONDS = float(os.getenv("WORKSPACE_IDLE_SECONDS", "1800"))
WORKSPACE_SWEEP_SECONDS = float(os.getenv("WORKSPACE_SWEEP_SECONDS", "60"))

# Upload limits
MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE_MB", "25")) * 1024 * 1024
MAX_PAGES = int(os.getenv("MAX_PAGES", "200"))

# Server
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
