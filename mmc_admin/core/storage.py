# mmc_admin/core/storage.py
"""
Upload manager for blog images and newsletter PDFs.

Files live on the local filesystem under ``UPLOAD_DIR/<purpose directory>``
and are served back by the static mount at ``UPLOAD_URL_PREFIX``.
"""
import os
import time
import secrets
import logging
import aiofiles
import aiofiles.os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from mmc_admin.core.config import settings
from mmc_admin.core.exceptions import InvalidFileTypeError, FileTooLargeError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class UploadPurpose:
    """Destination and validation rules for one kind of upload."""
    directory: str
    prefix: str
    max_size: int
    # Exact media type, or a "type/" prefix
    media_type: str
    # Records keep a URL path (True) or the bare stored filename (False)
    url_reference: bool = True

    def accepts(self, content_type: Optional[str]) -> bool:
        if not content_type:
            return False
        content_type = content_type.split(";")[0].strip().lower()
        if self.media_type.endswith("/"):
            return content_type.startswith(self.media_type)
        return content_type == self.media_type


BLOG_IMAGES = UploadPurpose(
    directory="blog-images",
    prefix="blog",
    max_size=settings.MAX_BLOG_IMAGE_SIZE,
    media_type="image/",
)

NEWSLETTERS = UploadPurpose(
    directory="newsletters",
    prefix="newsletter",
    max_size=settings.MAX_NEWSLETTER_PDF_SIZE,
    media_type="application/pdf",
    url_reference=False,
)


@dataclass
class StoredFile:
    reference: str
    filename: str
    original_name: str
    size: int
    path: Path


class UploadManager:
    """
    Service for validating, storing and removing uploaded files.
    """

    def __init__(
        self,
        upload_dir: str = "./uploads",
        url_prefix: str = "/uploads",
        purposes: Sequence[UploadPurpose] = (BLOG_IMAGES, NEWSLETTERS),
    ):
        """
        Initialize the upload manager.

        Args:
            upload_dir: Root directory for stored files
            url_prefix: URL path the root directory is served under
            purposes: Upload purposes whose directories must exist
        """
        self.upload_dir = Path(upload_dir)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.purposes = tuple(purposes)

    def ensure_directories(self) -> None:
        """Create one directory per purpose. Called once at startup."""
        for purpose in self.purposes:
            (self.upload_dir / purpose.directory).mkdir(parents=True, exist_ok=True)
        logger.info(f"Upload directories ready under {self.upload_dir}")

    def generate_filename(self, purpose: UploadPurpose, original_filename: Optional[str]) -> str:
        """
        Generate a unique filename.

        Format: {prefix}-{epoch millis}-{random hex}{ext}. Wall clock plus a
        random component, so concurrent uploads cannot pick the same name.
        """
        ext = Path(original_filename or "").suffix.lower()
        timestamp = int(time.time() * 1000)
        return f"{purpose.prefix}-{timestamp}-{secrets.token_hex(8)}{ext}"

    def path_for(self, purpose: UploadPurpose, filename: str) -> Path:
        return self.upload_dir / purpose.directory / filename

    def reference_for(self, purpose: UploadPurpose, filename: str) -> str:
        if purpose.url_reference:
            return f"{self.url_prefix}/{purpose.directory}/{filename}"
        return filename

    def is_local(self, reference: Optional[str]) -> bool:
        """Whether a URL-style reference points into the upload mount."""
        return bool(reference) and reference.startswith(self.url_prefix + "/")

    def filename_for(self, reference: str, purpose: UploadPurpose) -> str:
        """
        Extract the stored filename from a reference issued for ``purpose``.

        Raises:
            ValueError: if the reference belongs to another purpose or is not
                a single filename
        """
        name = reference
        if purpose.url_reference:
            prefix = f"{self.url_prefix}/{purpose.directory}/"
            if not reference.startswith(prefix):
                raise ValueError(f"Not a {purpose.directory} reference: {reference}")
            name = reference[len(prefix):]

        if name in ("", ".", "..") or any(sep in name for sep in ("/", "\\", "\x00")):
            raise ValueError(f"Upload reference is not a single filename: {reference}")
        return name

    def resolve(self, reference: str, purpose: UploadPurpose) -> Path:
        """
        Map a stored reference back to its path inside the purpose directory.

        Raises:
            ValueError: if the reference cannot be mapped or leaves the purpose directory
        """
        directory = (self.upload_dir / purpose.directory).resolve()
        path = (directory / self.filename_for(reference, purpose)).resolve()
        if path.parent != directory:
            raise ValueError(f"Upload reference escapes {purpose.directory}: {reference}")
        return path

    async def read_upload(self, purpose: UploadPurpose, upload: Any) -> bytes:
        """
        Validate the declared media type and read the payload.

        Reads at most ``max_size + 1`` bytes so oversized payloads are never
        fully buffered.
        """
        if not purpose.accepts(getattr(upload, "content_type", None)):
            logger.warning(
                f"Rejected {purpose.directory} upload '{upload.filename}' "
                f"with media type {upload.content_type!r}"
            )
            if purpose.media_type.endswith("/"):
                raise InvalidFileTypeError(f"Only {purpose.media_type}* files are allowed")
            raise InvalidFileTypeError(f"Only {purpose.media_type} files are allowed")

        chunks = []
        received = 0
        while received <= purpose.max_size:
            chunk = await upload.read(min(READ_CHUNK_SIZE, purpose.max_size + 1 - received))
            if not chunk:
                break
            chunks.append(chunk)
            received += len(chunk)

        if received > purpose.max_size:
            logger.warning(f"Rejected {purpose.directory} upload '{upload.filename}': exceeds {purpose.max_size} bytes")
            raise FileTooLargeError(f"File size exceeds maximum of {purpose.max_size // (1024 * 1024)}MB")

        return b"".join(chunks)

    async def store(self, purpose: UploadPurpose, upload: Any) -> StoredFile:
        """
        Validate and persist an incoming upload.

        Args:
            purpose: Destination and constraints
            upload: Object with ``filename``, ``content_type`` and async ``read(size)``

        Returns:
            StoredFile describing the written file

        Raises:
            InvalidFileTypeError: declared media type not accepted
            FileTooLargeError: payload exceeds the purpose limit
        """
        content = await self.read_upload(purpose, upload)

        while True:
            filename = self.generate_filename(purpose, upload.filename)
            path = self.path_for(purpose, filename)
            try:
                # Exclusive create never overwrites an existing upload
                async with aiofiles.open(path, "xb") as f:
                    await f.write(content)
                break
            except FileExistsError:
                logger.warning(f"Generated filename already exists, retrying: {filename}")

        logger.info(f"Saved upload: {path} ({len(content)} bytes)")
        return StoredFile(
            reference=self.reference_for(purpose, filename),
            filename=filename,
            original_name=upload.filename or filename,
            size=len(content),
            path=path,
        )

    async def remove(self, reference: Optional[str], purpose: UploadPurpose) -> bool:
        """
        Delete a stored file.

        Idempotent: an already-absent file is not an error. Failures are logged
        and reported as False, never raised.

        Returns:
            True if a file was deleted
        """
        if not reference:
            return False
        try:
            path = self.resolve(reference, purpose)
        except ValueError as e:
            logger.warning(f"Refusing to delete upload: {e}")
            return False
        try:
            await aiofiles.os.remove(path)
            logger.info(f"Deleted upload: {path}")
            return True
        except FileNotFoundError:
            logger.info(f"Upload already absent, nothing to delete: {reference}")
            return False
        except OSError as e:
            logger.error(f"Failed to delete upload {reference}: {e}")
            return False

    async def replace(
        self,
        purpose: UploadPurpose,
        old_reference: Optional[str],
        upload: Any,
        commit: Callable[[StoredFile], Any],
    ) -> StoredFile:
        """
        Store a new file, link it to its record, then drop the old file.

        ``commit`` performs the record update. If it raises, the new file is
        removed and the error propagates; the old file is left in place.
        A crash between the steps can orphan a file on disk; this is logged,
        not reconciled.
        """
        stored = await self.store(purpose, upload)
        try:
            commit(stored)
        except Exception:
            logger.error(f"Record update failed, discarding new upload {stored.reference}")
            await self.remove(stored.reference, purpose)
            raise

        if old_reference and old_reference != stored.reference:
            await self.remove(old_reference, purpose)
        return stored

    def exists(self, reference: str, purpose: UploadPurpose) -> bool:
        try:
            return os.path.isfile(self.resolve(reference, purpose))
        except ValueError:
            return False


# Global upload manager instance
_upload_manager: Optional[UploadManager] = None


def get_upload_manager() -> UploadManager:
    """Get the global upload manager instance."""
    global _upload_manager
    if _upload_manager is None:
        _upload_manager = UploadManager(
            upload_dir=settings.UPLOAD_DIR,
            url_prefix=settings.UPLOAD_URL_PREFIX,
        )
    return _upload_manager
