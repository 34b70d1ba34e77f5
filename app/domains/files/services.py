"""Безопасная раздача файлов из фиксированного корневого каталога."""
import logging
import mimetypes
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

_logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"application/pdf", "text/html", "application/json", "text/plain"}
DEFAULT_MAX_FILE_BYTES = 50 * 1024 * 1024

HTML_CONTENT_SECURITY_POLICY = "default-src 'none'; style-src 'unsafe-inline'; img-src data:"

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]")
_FORBIDDEN_FRAGMENTS = ("..", "/", "\\")


class FileAccessError(Exception):
    """Отказ в доступе к файлу с HTTP-статусом"""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class ServedFile:
    path: Path
    media_type: str
    size_bytes: int
    headers: Dict[str, str] = field(default_factory=dict)


def sanitize_segment(segment: str) -> str:
    return _UNSAFE_CHARS_RE.sub("", segment)


def is_strict_descendant(path: Path, root: Path) -> bool:
    """path лежит внутри root (сам root и соседние каталоги не подходят)"""
    return str(path).startswith(str(root) + os.sep)


def split_path(raw_path: str) -> List[str]:
    return [segment for segment in raw_path.split("/") if segment != ""]


class SecureFileResolver:
    """Разрешение пути запроса в файл внутри корневого каталога"""

    def __init__(self, root, max_bytes: int = DEFAULT_MAX_FILE_BYTES, logger: Optional[logging.Logger] = None):
        self.root = Path(root).resolve()
        self.max_bytes = max_bytes
        self.logger = logger or _logger

    def _deny(self, status_code: int, message: str, raw: Sequence[str]) -> FileAccessError:
        self.logger.warning(f"File access denied: {message}", extra={"path": "/".join(raw), "http_status": status_code})
        return FileAccessError(status_code, message)

    def clean_segments(self, segments: Sequence[str]) -> List[str]:
        if not segments:
            raise self._deny(400, "File path is required", segments)

        cleaned = []
        for raw in segments:
            if any(fragment in raw for fragment in _FORBIDDEN_FRAGMENTS):
                raise self._deny(403, "Path traversal attempt detected", segments)

            segment = sanitize_segment(raw)
            if not segment:
                raise self._deny(400, "Invalid path segment", segments)
            if segment.startswith("."):
                raise self._deny(403, "Access to hidden files is not allowed", segments)
            cleaned.append(segment)

        return cleaned

    def resolve(self, segments: Sequence[str]) -> ServedFile:
        cleaned = self.clean_segments(segments)
        resolved = self.root.joinpath(*cleaned).resolve()

        if not is_strict_descendant(resolved, self.root):
            raise self._deny(403, "Access denied", segments)

        if not resolved.is_file():
            raise self._deny(404, "File not found", segments)

        size = resolved.stat().st_size
        if size > self.max_bytes:
            raise self._deny(413, "File too large", segments)

        media_type, _ = mimetypes.guess_type(resolved.name)
        if media_type not in ALLOWED_MIME_TYPES:
            raise self._deny(403, "File type not allowed", segments)

        self.logger.info("Serving file", extra={"path": str(resolved), "size_bytes": size})
        return ServedFile(
            path=resolved,
            media_type=media_type,
            size_bytes=size,
            headers=self.security_headers(media_type),
        )

    def security_headers(self, media_type: str) -> Dict[str, str]:
        content_type = f"{media_type}; charset=utf-8" if media_type.startswith("text/") else media_type

        headers = {
            "Content-Type": content_type,
            "X-Content-Type-Options": "nosniff",
            # Встраивание во фрейм разрешено только для PDF-просмотрщика
            "X-Frame-Options": "SAMEORIGIN" if media_type == "application/pdf" else "DENY",
            "Cache-Control": "private, max-age=3600",
        }
        if media_type == "text/html":
            headers["Content-Security-Policy"] = HTML_CONTENT_SECURITY_POLICY
        return headers
