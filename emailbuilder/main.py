from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .core.session import EditorSession
from .core.settings import SettingsManager
from .core.storage import TemplateStore
from .core.uploads import ImageUploader
from .logging_config import setup_logging


def build_session(settings: SettingsManager, base_url: Optional[str] = None) -> EditorSession:
    uploader = ImageUploader(
        settings.uploads_dir,
        url_prefix=settings.uploads_url_prefix,
        max_size=settings.max_upload_bytes,
    )
    store = TemplateStore(settings.templates_path, uploader=uploader)
    return EditorSession(store, uploader, base_url=base_url or settings.base_url)


def _read_markup(value: Optional[str]) -> str:
    """Accept inline markup or ``@path`` to read it from a file."""
    if not value:
        return ""
    if value.startswith("@"):
        return Path(value[1:]).read_text(encoding="utf-8")
    return value


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emailbuilder",
        description="Compose, store and export HTML email templates.")
    parser.add_argument("--data-dir", type=Path,
                        help="directory for settings, templates and uploads")
    parser.add_argument("--base-url", help="absolute prefix for uploaded image urls")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="list saved templates, newest first")

    save = sub.add_parser("save", help="save a new template")
    save.add_argument("title")
    for section in ("header", "content", "footer"):
        save.add_argument(f"--{section}", help=f"{section} markup, or @file")
    save.add_argument("--image", type=Path, help="image file to upload")
    save.add_argument("--image-url", help="already uploaded image url")
    save.add_argument("--align", choices=("left", "center", "right"))
    save.add_argument("--width")
    save.add_argument("--max-height")

    delete = sub.add_parser("delete", help="delete a saved template")
    delete.add_argument("template_id")

    export = sub.add_parser("export", help="write a saved template as HTML")
    export.add_argument("template_id")
    export.add_argument("-o", "--output", type=Path, default=Path.cwd())

    upload = sub.add_parser("upload", help="upload an image and print its url")
    upload.add_argument("path", type=Path)
    return parser


def _cmd_list(session: EditorSession, args: argparse.Namespace) -> int:
    templates = session.refresh()
    if session.error:
        return 1
    for record in templates:
        print(f"{record.id}  {record.created_at:%Y-%m-%d %H:%M}  {record.title}")
    return 0


def _cmd_save(session: EditorSession, args: argparse.Namespace) -> int:
    session.set_title(args.title)
    for section in ("header", "content", "footer"):
        session.set_section(section, _read_markup(getattr(args, section)))
    image_changes = {}
    if args.align:
        image_changes["alignment"] = args.align
    if args.width:
        image_changes["width"] = args.width
    if args.max_height:
        image_changes["max_height"] = args.max_height
    if args.image_url:
        image_changes["url"] = args.image_url
    if image_changes:
        session.set_image(**image_changes)
    if args.image is not None:
        if session.upload_image(args.image.read_bytes(), args.image.name) is None:
            return 1
    record = session.save()
    if record is None:
        return 1
    print(record.id)
    return 0


def _cmd_delete(session: EditorSession, args: argparse.Namespace) -> int:
    return 0 if session.delete(args.template_id) else 1


def _cmd_export(session: EditorSession, args: argparse.Namespace) -> int:
    if session.open_id(args.template_id) is None:
        return 1
    target = session.export(args.output)
    if target is None:
        return 1
    print(target)
    return 0


def _cmd_upload(session: EditorSession, args: argparse.Namespace) -> int:
    url = session.upload_image(args.path.read_bytes(), args.path.name)
    if url is None:
        return 1
    print(url)
    return 0


COMMANDS = {
    "list": _cmd_list,
    "save": _cmd_save,
    "delete": _cmd_delete,
    "export": _cmd_export,
    "upload": _cmd_upload,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    settings = SettingsManager(args.data_dir)
    setup_logging(args.log_level or settings.log_level, force=True)
    session = build_session(settings, args.base_url)
    try:
        code = COMMANDS[args.command](session, args)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    if session.error:
        print(f"error: {session.error}", file=sys.stderr)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
