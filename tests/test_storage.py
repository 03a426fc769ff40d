import asyncio
import io
import re

import pytest
from starlette.datastructures import Headers, UploadFile

from mmc_admin.core.exceptions import InvalidFileTypeError, FileTooLargeError
from mmc_admin.core.storage import UploadManager, UploadPurpose, BLOG_IMAGES, NEWSLETTERS

SMALL_IMAGES = UploadPurpose(directory="blog-images", prefix="blog", max_size=16, media_type="image/")


def make_upload(content: bytes, filename: str = "photo.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def stored_files(manager: UploadManager, purpose: UploadPurpose):
    return sorted(p.name for p in (manager.upload_dir / purpose.directory).iterdir())


class TestUploadPurpose:
    def test_accepts_prefix(self):
        assert BLOG_IMAGES.accepts("image/png")
        assert BLOG_IMAGES.accepts("image/jpeg; charset=binary")
        assert not BLOG_IMAGES.accepts("text/plain")
        assert not BLOG_IMAGES.accepts(None)

    def test_accepts_exact(self):
        assert NEWSLETTERS.accepts("application/pdf")
        assert not NEWSLETTERS.accepts("application/pdfx")


class TestFilenames:
    def test_generate_filename_format(self, upload_manager: UploadManager):
        name = upload_manager.generate_filename(BLOG_IMAGES, "Holiday.JPG")
        assert re.fullmatch(r"blog-\d{13}-[0-9a-f]{16}\.jpg", name)

    def test_generated_names_are_unique(self, upload_manager: UploadManager):
        names = {upload_manager.generate_filename(NEWSLETTERS, "issue.pdf") for _ in range(50)}
        assert len(names) == 50

    def test_reference_styles(self, upload_manager: UploadManager):
        assert upload_manager.reference_for(BLOG_IMAGES, "a.png") == "/uploads/blog-images/a.png"
        assert upload_manager.reference_for(NEWSLETTERS, "a.pdf") == "a.pdf"

    def test_resolve(self, upload_manager: UploadManager):
        root = upload_manager.upload_dir.resolve()
        assert upload_manager.resolve("/uploads/blog-images/a.png", BLOG_IMAGES) == root / "blog-images" / "a.png"
        assert upload_manager.resolve("a.pdf", NEWSLETTERS) == root / "newsletters" / "a.pdf"

    @pytest.mark.parametrize("reference", [
        "/uploads/../../etc/passwd",
        "/uploads/blog-images/../newsletters/a.pdf",
        "/uploads/blog-images/nested/a.png",
        "/uploads/blog-images/",
        "/uploads/blog-images/..",
    ])
    def test_resolve_rejects_escape_from_blog_images(self, upload_manager: UploadManager, reference):
        with pytest.raises(ValueError):
            upload_manager.resolve(reference, BLOG_IMAGES)

    @pytest.mark.parametrize("reference", ["../secret.pdf", "..", "sub/a.pdf", "..\\a.pdf", ""])
    def test_resolve_rejects_escape_from_newsletters(self, upload_manager: UploadManager, reference):
        with pytest.raises(ValueError):
            upload_manager.resolve(reference, NEWSLETTERS)

    def test_resolve_rejects_other_purpose(self, upload_manager: UploadManager):
        with pytest.raises(ValueError):
            upload_manager.resolve("/uploads/newsletters/newsletter-1.pdf", BLOG_IMAGES)
        with pytest.raises(ValueError):
            upload_manager.resolve("a.png", BLOG_IMAGES)

    def test_resolve_rejects_external_url(self, upload_manager: UploadManager):
        with pytest.raises(ValueError):
            upload_manager.resolve("https://cdn.example.com/a.png", BLOG_IMAGES)

    def test_is_local(self, upload_manager: UploadManager):
        assert upload_manager.is_local("/uploads/blog-images/a.png")
        assert upload_manager.is_local("/uploads/newsletters/a.pdf")
        assert not upload_manager.is_local("https://cdn.example.com/uploads/a.png")
        assert not upload_manager.is_local(None)
        assert not upload_manager.is_local("")


class TestStore:
    def test_store_image(self, upload_manager: UploadManager):
        stored = asyncio.run(upload_manager.store(BLOG_IMAGES, make_upload(b"\x89PNG data")))

        assert stored.reference == f"/uploads/blog-images/{stored.filename}"
        assert stored.original_name == "photo.png"
        assert stored.size == 9
        assert stored.path.read_bytes() == b"\x89PNG data"
        assert upload_manager.exists(stored.reference, BLOG_IMAGES)
        assert not upload_manager.exists(stored.reference, NEWSLETTERS)

    def test_store_rejects_wrong_type_without_writing(self, upload_manager: UploadManager):
        upload = make_upload(b"hello", filename="notes.txt", content_type="text/plain")

        with pytest.raises(InvalidFileTypeError):
            asyncio.run(upload_manager.store(BLOG_IMAGES, upload))
        assert stored_files(upload_manager, BLOG_IMAGES) == []

    def test_store_rejects_oversized_without_writing(self, upload_manager: UploadManager):
        upload = make_upload(b"x" * 17)

        with pytest.raises(FileTooLargeError):
            asyncio.run(upload_manager.store(SMALL_IMAGES, upload))
        assert stored_files(upload_manager, BLOG_IMAGES) == []

    def test_store_accepts_exact_limit(self, upload_manager: UploadManager):
        stored = asyncio.run(upload_manager.store(SMALL_IMAGES, make_upload(b"x" * 16)))
        assert stored.size == 16


class TestRemove:
    def test_remove_is_idempotent(self, upload_manager: UploadManager):
        stored = asyncio.run(upload_manager.store(NEWSLETTERS, make_upload(b"%PDF", "a.pdf", "application/pdf")))

        assert asyncio.run(upload_manager.remove(stored.reference, NEWSLETTERS)) is True
        assert asyncio.run(upload_manager.remove(stored.reference, NEWSLETTERS)) is False
        assert not stored.path.exists()

    def test_remove_empty_reference(self, upload_manager: UploadManager):
        assert asyncio.run(upload_manager.remove(None, BLOG_IMAGES)) is False

    def test_remove_never_raises_on_bad_reference(self, upload_manager: UploadManager):
        assert asyncio.run(upload_manager.remove("/uploads/../../etc/passwd", BLOG_IMAGES)) is False

    def test_remove_leaves_other_purpose_files_alone(self, upload_manager: UploadManager):
        pdf = asyncio.run(upload_manager.store(NEWSLETTERS, make_upload(b"%PDF", "a.pdf", "application/pdf")))

        assert asyncio.run(upload_manager.remove(f"/uploads/newsletters/{pdf.filename}", BLOG_IMAGES)) is False
        assert asyncio.run(upload_manager.remove(f"../newsletters/{pdf.filename}", NEWSLETTERS)) is False
        assert pdf.path.exists()


class TestReplace:
    def test_replace_removes_old_file(self, upload_manager: UploadManager):
        old = asyncio.run(upload_manager.store(BLOG_IMAGES, make_upload(b"old")))
        committed = []

        new = asyncio.run(upload_manager.replace(
            BLOG_IMAGES, old.reference, make_upload(b"new"), commit=committed.append
        ))

        assert committed == [new]
        assert not old.path.exists()
        assert new.path.read_bytes() == b"new"

    def test_replace_rolls_back_new_file_when_commit_fails(self, upload_manager: UploadManager):
        old = asyncio.run(upload_manager.store(BLOG_IMAGES, make_upload(b"old")))

        def failing_commit(stored):
            raise RuntimeError("database unavailable")

        with pytest.raises(RuntimeError):
            asyncio.run(upload_manager.replace(
                BLOG_IMAGES, old.reference, make_upload(b"new"), commit=failing_commit
            ))

        assert old.path.exists()
        assert stored_files(upload_manager, BLOG_IMAGES) == [old.filename]

    def test_replace_without_previous_file(self, upload_manager: UploadManager):
        new = asyncio.run(upload_manager.replace(
            BLOG_IMAGES, None, make_upload(b"first"), commit=lambda stored: None
        ))
        assert new.path.exists()
