"""Tests for image validation and local storage."""

import pytest

from storefront.shared.errors import DomainError, NotFound
from storefront.uploads.storage import delete_image, store_image, validate_folder, validate_image

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class TestValidation:
    def test_accepts_known_types(self):
        assert validate_image("photo.jpeg", "image/jpeg", 10) == ".jpg"
        assert validate_image("logo.png", "image/png", 10) == ".png"

    def test_missing_extension_is_fine(self):
        assert validate_image(None, "image/webp", 10) == ".webp"

    @pytest.mark.parametrize(
        "filename, content_type, size",
        [
            ("notes.txt", "text/plain", 10),
            ("photo.png", "image/jpeg", 10),
            ("photo.png", "image/png", 0),
        ],
    )
    def test_rejections(self, filename, content_type, size):
        with pytest.raises(DomainError):
            validate_image(filename, content_type, size)

    def test_size_limit(self):
        with pytest.raises(DomainError):
            validate_image("big.png", "image/png", 11, max_bytes=10)

    def test_folder(self):
        assert validate_folder(None) == "images"
        assert validate_folder(" Products ") == "products"
        with pytest.raises(DomainError):
            validate_folder("../etc")


class TestStorage:
    def test_store_and_delete(self, tmp_path):
        stored = store_image(PNG, "logo.png", "image/png", "banners", upload_dir=str(tmp_path), base_url="/media")

        assert stored.file_url == f"/media/banners/{stored.file_name}"
        assert (tmp_path / "banners" / stored.file_name).read_bytes() == PNG
        assert stored.file_size == len(PNG)

        delete_image("banners", stored.file_name, upload_dir=str(tmp_path))
        assert not (tmp_path / "banners" / stored.file_name).exists()

    def test_delete_missing(self, tmp_path):
        with pytest.raises(NotFound):
            delete_image("banners", "nothing.png", upload_dir=str(tmp_path))

    def test_delete_rejects_traversal(self, tmp_path):
        with pytest.raises(DomainError):
            delete_image("banners", "../secret.png", upload_dir=str(tmp_path))
