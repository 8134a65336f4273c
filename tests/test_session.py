from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from emailbuilder.core.errors import StorageError
from emailbuilder.core.session import (
    DELETE_FAILED,
    SAVE_FAILED,
    TITLE_REQUIRED,
    UPLOAD_FAILED,
    EditorSession,
)
from emailbuilder.core.storage import TemplateStore
from emailbuilder.core.uploads import ImageUploader


class BrokenStore(TemplateStore):
    def save(self, title, content, image_url=""):
        raise StorageError("disk full")


@pytest.fixture
def session(tmp_path: Path) -> EditorSession:
    uploader = ImageUploader(tmp_path / "uploads")
    store = TemplateStore(tmp_path / "templates.json", uploader=uploader)
    return EditorSession(store, uploader, base_url="http://localhost:5000")


def test_save_then_refresh_observes_it(session: EditorSession) -> None:
    session.set_title("Launch")
    session.set_section("content", "<p>We launched</p>")
    record = session.save()
    assert record is not None
    assert session.error == ""
    assert [t.id for t in session.templates] == [record.id]


def test_open_restores_saved_document(session: EditorSession) -> None:
    session.set_title("Launch")
    session.set_section("header", "<h1>News</h1>")
    session.set_style("header", color="#abcdef")
    session.set_image(url="/uploads/a.png", alignment="left")
    original = session.document
    record = session.save()
    assert record is not None

    session.reset()
    assert session.document.sections["header"] == ""
    assert session.open(record) == original


def test_failed_save_keeps_document(tmp_path: Path) -> None:
    uploader = ImageUploader(tmp_path / "uploads")
    session = EditorSession(BrokenStore(tmp_path / "t.json"), uploader)
    session.set_title("Draft")
    session.set_section("content", "<p>unsaved work</p>")
    before = session.document
    assert session.save() is None
    assert session.error == SAVE_FAILED
    assert session.document is before


def test_delete_unknown_reports_error(session: EditorSession) -> None:
    assert session.delete("missing") is False
    assert session.error == DELETE_FAILED


def test_delete_removes_from_list(session: EditorSession) -> None:
    record = session.save()
    assert record is not None
    assert session.delete(record.id) is True
    assert session.templates == []
    assert session.selected is None
    assert session.error == ""


def test_upload_sets_image_url(session: EditorSession) -> None:
    url = session.upload_image(b"GIF89a", "banner.gif")
    assert url is not None
    assert session.document.image.url == url
    assert f'src="http://localhost:5000{url}"' in session.preview()


def test_upload_rejection_keeps_state(session: EditorSession) -> None:
    session.set_section("content", "<p>keep</p>")
    assert session.upload_image(b"data", "virus.exe") is None
    assert session.error == "Only image files are allowed!"
    assert session.upload_image(b"", "empty.png") is None
    assert session.error == UPLOAD_FAILED
    assert session.document.sections["content"] == "<p>keep</p>"
    assert session.document.image.url == ""


def test_export_uses_suggested_name(session: EditorSession, tmp_path: Path) -> None:
    session.set_title("Weekly Digest")
    session.set_section("content", "<p>Hi</p>")
    assert session.download_name() == "weekly-digest-template.html"
    target = session.export(tmp_path / "exports")
    assert target is not None
    assert target.name == "weekly-digest-template.html"
    assert "<p>Hi</p>" in target.read_text(encoding="utf-8")


def test_open_id_of_legacy_record(session: EditorSession) -> None:
    record = session.store.save("Old", "just some text", "/uploads/old.png")
    doc = session.open_id(record.id)
    assert doc is not None
    assert doc.title == "Old"
    assert doc.sections["content"] == "just some text"
    assert doc.image.url == "/uploads/old.png"


def test_title_can_be_cleared_while_editing(session: EditorSession) -> None:
    session.set_title("Launch")
    session.set_section("content", "<p>draft</p>")
    session.set_title("")
    assert session.title == ""
    assert session.document.title == "Launch"
    assert session.save() is None
    assert session.error == TITLE_REQUIRED
    assert session.store.list() == []

    session.set_title("Launch v2")
    record = session.save()
    assert record is not None
    assert record.title == "Launch v2"
    assert session.error == ""
