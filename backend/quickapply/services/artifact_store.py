"""
Disk-backed storage for uploaded resumes and generated summary documents.

Files are written under a base directory injected at construction and are
addressed by a relative posix reference (e.g. ``resumes/resume-...pdf``).
The same directory is served read-only under ``/uploads``.
"""
import logging
import secrets
import time
from pathlib import Path

from ..utils.error_handlers import NotFoundError, StorageError

logger = logging.getLogger(__name__)

MAX_EXTENSION_LENGTH = 10
DEFAULT_EXTENSION = ".pdf"
RESUMES_SUBDIR = "resumes"
SUMMARIES_SUBDIR = "summaries"


def storage_name(original_filename: str | None, *, prefix: str = "resume") -> str:
    """
    `<prefix>-<ms timestamp>-<128-bit hex><ext>`; the caller-supplied name only
    contributes its (bounded) extension.
    """
    ext = Path(original_filename or "").suffix.lower()[:MAX_EXTENSION_LENGTH]
    if len(ext) < 2:
        ext = DEFAULT_EXTENSION
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(16)}{ext}"


class ArtifactStore:
    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def store(
        self,
        data: bytes,
        original_filename: str | None,
        *,
        prefix: str = "resume",
        subdir: str = RESUMES_SUBDIR,
    ) -> str:
        """Write `data` under a fresh name and return its relative reference."""
        target_dir = self.base_dir / subdir
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create upload directory {target_dir}: {e}")
            raise StorageError("Failed to prepare storage") from e

        stored_filename = storage_name(original_filename, prefix=prefix)
        dest = target_dir / stored_filename
        try:
            # "xb" never clobbers an existing artifact.
            with open(dest, "xb") as out:
                out.write(data)
        except OSError as e:
            logger.error(f"File save error for {dest}: {e}")
            if dest.exists():
                try:
                    dest.unlink()
                except OSError as cleanup_error:
                    logger.warning(f"Could not remove partial file {dest}: {cleanup_error}")
            raise StorageError() from e

        reference = f"{subdir}/{stored_filename}"
        logger.info(f"Stored artifact {reference} ({len(data)} bytes)")
        return reference

    def absolute_path(self, reference: str) -> Path:
        base = self.base_dir.resolve()
        path = (base / reference).resolve()
        if path != base and base not in path.parents:
            raise NotFoundError("File not found")
        return path

    def exists(self, reference: str) -> bool:
        try:
            return self.absolute_path(reference).is_file()
        except NotFoundError:
            return False

    def read(self, reference: str) -> bytes:
        path = self.absolute_path(reference)
        if not path.is_file():
            raise NotFoundError("File not found")
        return path.read_bytes()

    def delete(self, reference: str) -> bool:
        path = self.absolute_path(reference)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def list_references(self, subdir: str = RESUMES_SUBDIR) -> list[str]:
        target_dir = self.base_dir / subdir
        if not target_dir.is_dir():
            return []
        return sorted(f"{subdir}/{p.name}" for p in target_dir.iterdir() if p.is_file())

    @staticmethod
    def public_url(reference: str | None, base_url: str = "") -> str | None:
        if not reference:
            return None
        return f"{base_url}/uploads/{reference}"
