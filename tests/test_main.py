from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from emailbuilder.main import main


def _run(tmp_path: Path, *args: str) -> int:
    return main(["--data-dir", str(tmp_path / "data"), "--log-level", "WARNING", *args])


def test_save_list_export_delete(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    image = tmp_path / "hero.png"
    image.write_bytes(b"\x89PNG")
    body = tmp_path / "body.html"
    body.write_text("<p>From a file</p>", encoding="utf-8")

    assert _run(tmp_path, "save", "Spring Sale", "--header", "<h1>Hi</h1>",
                "--content", f"@{body}", "--image", str(image), "--align", "right") == 0
    template_id = capsys.readouterr().out.strip()

    assert _run(tmp_path, "list") == 0
    assert "Spring Sale" in capsys.readouterr().out

    out_dir = tmp_path / "out"
    assert _run(tmp_path, "--base-url", "http://h", "export", template_id, "-o", str(out_dir)) == 0
    html = (out_dir / "spring-sale-template.html").read_text(encoding="utf-8")
    assert "<p>From a file</p>" in html
    assert 'src="http://h/uploads/' in html
    assert "float: right" in html
    capsys.readouterr()

    assert _run(tmp_path, "delete", template_id) == 0
    assert _run(tmp_path, "delete", template_id) == 1
    assert "Failed to delete template" in capsys.readouterr().err


def test_upload_rejects_non_image(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    doc = tmp_path / "notes.txt"
    doc.write_text("hello", encoding="utf-8")
    assert _run(tmp_path, "upload", str(doc)) == 1
    assert "Only image files are allowed!" in capsys.readouterr().err


def test_export_unknown_template(tmp_path: Path) -> None:
    assert _run(tmp_path, "export", "missing") == 1
