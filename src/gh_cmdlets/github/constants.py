"""Read-only tables shared by the invocation layer and the resource functions."""

from types import MappingProxyType

DEFAULT_ACCEPT_HEADER = "application/vnd.github+json"
DEFAULT_JSON_BODY_CONTENT_TYPE = "application/json; charset=UTF-8"
DEFAULT_IN_FILE_CONTENT_TYPE = "text/plain"

# Preview media types still requested by some endpoints
INERTIA_ACCEPT_HEADER = "application/vnd.github.inertia-preview+json"
SYMMETRA_ACCEPT_HEADER = "application/vnd.github.symmetra-preview+json"

REQUEST_ID_HEADER = "X-GitHub-Request-Id"
API_VERSION_HEADER = "X-GitHub-Api-Version"

STATE_CHANGING_METHODS = frozenset({"POST", "PATCH", "PUT", "DELETE"})
VALID_METHODS = frozenset({"GET"}) | STATE_CHANGING_METHODS

# Media type suffixes accepted for bodies of issues, comments and gists
MEDIA_TYPES = MappingProxyType(
    {
        "raw": "application/vnd.github.raw+json",
        "text": "application/vnd.github.text+json",
        "html": "application/vnd.github.html+json",
        "full": "application/vnd.github.full+json",
    }
)

# Keys whose string values are upgraded to datetimes by the materializer
DATE_PROPERTY_NAMES = frozenset(
    {
        "closed_at",
        "committed_at",
        "completed_at",
        "created_at",
        "date",
        "due_on",
        "last_edited_at",
        "last_read_at",
        "merged_at",
        "published_at",
        "pushed_at",
        "starred_at",
        "started_at",
        "submitted_at",
        "timestamp",
        "updated_at",
    }
)

EXTENSION_TO_CONTENT_TYPE = MappingProxyType(
    {
        ".3gp": "video/3gpp",
        ".3g2": "video/3gpp2",
        ".7z": "application/x-7z-compressed",
        ".aac": "audio/aac",
        ".avi": "video/x-msvideo",
        ".bin": "application/octet-stream",
        ".bmp": "image/bmp",
        ".bz": "application/x-bzip",
        ".bz2": "application/x-bzip2",
        ".csh": "application/x-csh",
        ".css": "text/css",
        ".csv": "text/csv",
        ".deb": "application/vnd.debian.binary-package",
        ".doc": "application/msword",
        ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ".dmg": "application/x-apple-diskimage",
        ".epub": "application/epub+zip",
        ".exe": "application/vnd.microsoft.portable-executable",
        ".gif": "image/gif",
        ".gz": "application/gzip",
        ".htm": "text/html",
        ".html": "text/html",
        ".ico": "image/vnd.microsoft.icon",
        ".ics": "text/calendar",
        ".jar": "application/java-archive",
        ".jpeg": "image/jpeg",
        ".jpg": "image/jpeg",
        ".js": "text/javascript",
        ".json": "application/json",
        ".md": "text/markdown",
        ".mid": "audio/midi",
        ".midi": "audio/midi",
        ".mp3": "audio/mpeg",
        ".mp4": "video/mp4",
        ".mpeg": "video/mpeg",
        ".msi": "application/x-msdownload",
        ".odp": "application/vnd.oasis.opendocument.presentation",
        ".ods": "application/vnd.oasis.opendocument.spreadsheet",
        ".odt": "application/vnd.oasis.opendocument.text",
        ".ogg": "audio/ogg",
        ".otf": "font/otf",
        ".pdf": "application/pdf",
        ".png": "image/png",
        ".ppt": "application/vnd.ms-powerpoint",
        ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        ".ps1": "text/plain",
        ".py": "text/x-python",
        ".rar": "application/vnd.rar",
        ".rpm": "application/x-rpm",
        ".rtf": "application/rtf",
        ".sh": "application/x-sh",
        ".svg": "image/svg+xml",
        ".tar": "application/x-tar",
        ".tif": "image/tiff",
        ".tiff": "image/tiff",
        ".ttf": "font/ttf",
        ".txt": "text/plain",
        ".wav": "audio/wav",
        ".webm": "video/webm",
        ".webp": "image/webp",
        ".woff": "font/woff",
        ".woff2": "font/woff2",
        ".xls": "application/vnd.ms-excel",
        ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        ".xml": "application/xml",
        ".yaml": "application/yaml",
        ".yml": "application/yaml",
        ".zip": "application/zip",
    }
)

NOT_FOUND_EXPLANATION = (
    "GitHub answers 404 both when the resource does not exist and when it exists "
    "but the current user is not allowed to see it. Check that you are "
    "authenticated and that your access token has the scopes this request needs."
)
