"""
Tests for upload validation and archive extraction.
"""
import base64
import io
import zipfile

import pytest

from app.deployment.upload_processor import (
    UploadValidationError,
    extract_archive,
    has_entry_point,
    is_safe_file,
    is_valid_name,
    process_upload,
)


def make_zip(entries: dict) -> str:
    """Build a base64 encoded ZIP archive from a name -> bytes mapping."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class TestIsSafeFile:
    """Test the archive entry safety filter."""

    @pytest.mark.parametrize("path", [
        "index.html",
        "about.HTM",
        "css/site.css",
        "js/app.js",
        "data/items.json",
        "img/logo.PNG",
        "fonts/inter.woff2",
        "favicon.ico",
    ])
    def test_allowed_paths(self, path):
        assert is_safe_file(path) is True

    @pytest.mark.parametrize("path", [
        "a.exe",
        "run.sh",
        "server.php",
        "README",
        "archive.tar.gz",
    ])
    def test_disallowed_extensions(self, path):
        assert is_safe_file(path) is False

    @pytest.mark.parametrize("path", [
        "../index.html",
        "assets/../../secret.js",
        "assets//app.js",
        "../../etc/passwd",
    ])
    def test_traversal_rejected(self, path):
        assert is_safe_file(path) is False

    def test_hidden_files_rejected(self):
        assert is_safe_file(".env.json") is False
        assert is_safe_file("assets/.hidden.css") is False

    def test_htaccess_still_needs_allowed_extension(self):
        """The dotfile exception does not bypass the extension allow-list."""
        assert is_safe_file(".htaccess") is False


class TestNameValidation:
    """Test deployment name rules."""

    @pytest.mark.parametrize("name", ["my-site", "site1", "a", "2024-portfolio"])
    def test_valid_names(self, name):
        assert is_valid_name(name) is True

    @pytest.mark.parametrize("name", ["My Site", "my_site", "site!", "Site", "my-site\n", ""])
    def test_invalid_names(self, name):
        assert is_valid_name(name) is False


class TestExtractArchive:
    """Test ZIP extraction and filtering."""

    def test_unsafe_entries_are_dropped(self):
        """Only index.html survives next to an executable and a traversal entry."""
        payload = make_zip({
            "index.html": b"<h1>hi</h1>",
            "a.exe": b"MZ",
            "../../etc/passwd": b"root:x:0:0",
        })

        files = extract_archive(payload)

        assert [f.filepath for f in files] == ["index.html"]
        assert base64.b64decode(files[0].content) == b"<h1>hi</h1>"

    def test_nested_files_keep_their_paths(self):
        payload = make_zip({
            "index.html": b"<html></html>",
            "css/site.css": b"body{}",
            "img/": b"",
        })

        files = extract_archive(payload)

        assert sorted(f.filepath for f in files) == ["css/site.css", "index.html"]

    def test_entry_point_match_is_case_insensitive(self):
        files = extract_archive(make_zip({"INDEX.HTML": b"<p>ok</p>"}))
        assert files[0].filepath == "INDEX.HTML"

    def test_missing_index_is_rejected(self):
        """Valid assets without an index.html are not deployable."""
        payload = make_zip({"about.html": b"<p></p>", "site.css": b""})
        with pytest.raises(UploadValidationError) as exc_info:
            extract_archive(payload)
        assert exc_info.value.reason == "missing_index"

    def test_nested_index_does_not_count(self):
        payload = make_zip({"site/index.html": b"<p></p>"})
        with pytest.raises(UploadValidationError) as exc_info:
            extract_archive(payload)
        assert exc_info.value.reason == "missing_index"

    def test_unsafe_index_does_not_count(self):
        payload = make_zip({"../index.html": b"<p></p>"})
        with pytest.raises(UploadValidationError):
            extract_archive(payload)

    def test_invalid_archive(self):
        payload = base64.b64encode(b"this is not a zip").decode("ascii")
        with pytest.raises(UploadValidationError) as exc_info:
            extract_archive(payload)
        assert exc_info.value.reason == "invalid_archive"


class TestProcessUpload:
    """Test branch selection by file name."""

    def test_raw_html_becomes_index(self):
        """A .htm upload becomes index.html with its content untouched."""
        content = base64.b64encode(b"<h1>page</h1>").decode("ascii")
        files = process_upload("page.htm", content)
        assert len(files) == 1
        assert files[0].filepath == "index.html"
        assert files[0].content == content

    def test_html_extension_is_case_insensitive(self):
        files = process_upload("Landing.HTML", "PGgxPjwvaDE+")
        assert files[0].filepath == "index.html"

    def test_zip_branch(self):
        files = process_upload("SITE.ZIP", make_zip({"index.html": b"x"}))
        assert has_entry_point(files)

    @pytest.mark.parametrize("file_name", ["site.tar.gz", "notes.txt", "index.html.exe", "zip"])
    def test_unsupported_file_type(self, file_name):
        with pytest.raises(UploadValidationError) as exc_info:
            process_upload(file_name, "AAAA")
        assert exc_info.value.reason == "unsupported_file_type"


def make_corrupt_zip() -> str:
    """A stored ZIP whose index.html content no longer matches its CRC."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
        archive.writestr("index.html", b"<h1>corrupted</h1>")
    raw = bytearray(buffer.getvalue())
    raw[raw.index(b"corrupted")] ^= 0xFF
    return base64.b64encode(bytes(raw)).decode("ascii")


class TestUnreadableEntries:
    """Test archives that open but whose entries cannot be read."""

    def test_bad_crc_is_invalid_archive(self):
        with pytest.raises(UploadValidationError) as exc_info:
            extract_archive(make_corrupt_zip())
        assert exc_info.value.reason == "invalid_archive"
        assert "index.html" in str(exc_info.value)

    def test_unreadable_unsafe_entry_is_skipped_without_reading(self):
        """Dropped entries are never read, so their damage does not matter."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
            archive.writestr("index.html", b"<p>ok</p>")
            archive.writestr("tool.exe", b"broken-payload")
        raw = bytearray(buffer.getvalue())
        raw[raw.index(b"broken-payload")] ^= 0xFF

        files = extract_archive(base64.b64encode(bytes(raw)).decode("ascii"))
        assert [f.filepath for f in files] == ["index.html"]
