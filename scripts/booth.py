"""Command-line photo booth against a running template registry."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import httpx

from src.photobox.capture import CaptureSession, OpenCVCamera
from src.photobox.client import RegistryClient
from src.photobox.config import load_config
from src.photobox.editor import Handle, editor_session
from src.photobox.exceptions import AppError, CameraUnavailableError
from src.photobox.logging import configure_logging


def _format_slot(template) -> str:
    slot = template.config.primary
    if slot is None:
        return "no slot"
    return f"slot {slot.x:g},{slot.y:g} {slot.width:g}x{slot.height:g}"


async def list_templates(client: RegistryClient) -> int:
    templates = await client.list_templates()
    if not templates:
        print("no templates registered")
        return 0
    for template in templates:
        print(f"{template.id}\t{template.name}\t{template.layout_type}\t{_format_slot(template)}")
    return 0


async def run_capture(
    client: RegistryClient,
    session: CaptureSession,
    template_id: int,
    output_dir: Path,
    *,
    confirm=input,
) -> Path | None:
    """Preview, capture on confirmation and write the composite to ``output_dir``."""
    template = await client.get_template(template_id)
    if template.config.primary is None:
        print(f"template {template_id} has no slot defined", file=sys.stderr)
        return None

    if not await session.select_template(template):
        return None
    stream = session.stream
    if stream is not None:
        box = session.preview_box((await client.fetch_image(template)).size)
        print(f"preview at {box.as_css()} (camera {stream.natural_size[0]}x{stream.natural_size[1]})")

    await asyncio.to_thread(confirm, "press Enter to take the photo ")
    await session.capture()
    target = session.download(output_dir)
    session.back()
    return target


async def create_template(
    client: RegistryClient,
    *,
    name: str,
    image: Path,
    slot: tuple[float, float, float, float] | None,
) -> int:
    with editor_session() as editor:
        editor.name = name
        editor.load_image(image.read_bytes(), filename=image.name)
        rect = editor.add_default_slot()
        if slot is not None:
            left, top, width, height = slot
            editor.move_to(left, top)
            editor.drag_handle(Handle.BOTTOM_RIGHT, width - rect.scaled_width, height - rect.scaled_height, uniform=False)
        return await editor.save(client)


def _parse_slot(raw: str) -> tuple[float, float, float, float]:
    try:
        left, top, width, height = (float(part) for part in raw.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError("slot must be x,y,width,height") from None
    return left, top, width, height


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Photobox booth client.")
    parser.add_argument("--registry", default=None, help="Registry base URL (defaults to REGISTRY_URL).")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List registered templates.")

    capture = commands.add_parser("capture", help="Take a photo in a template.")
    capture.add_argument("template_id", type=int)
    capture.add_argument("--output", type=Path, default=None, help="Download directory.")
    capture.add_argument("--camera", type=int, default=None, help="Camera index.")

    create = commands.add_parser("create", help="Register a template image with one slot.")
    create.add_argument("name")
    create.add_argument("image", type=Path)
    create.add_argument("--slot", type=_parse_slot, default=None, help="x,y,width,height in template pixels.")

    delete = commands.add_parser("delete", help="Delete a template.")
    delete.add_argument("template_id", type=int)
    return parser.parse_args(argv)


async def _dispatch(args: argparse.Namespace) -> int:
    config = load_config()
    base_url = args.registry or config.registry_url
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as http:
        client = RegistryClient(http)
        if args.command == "list":
            return await list_templates(client)
        if args.command == "create":
            template_id = await create_template(client, name=args.name, image=args.image, slot=args.slot)
            print(f"template created, id={template_id}")
            return 0
        if args.command == "delete":
            await client.delete_template(args.template_id)
            print(f"template {args.template_id} deleted")
            return 0

        camera = OpenCVCamera(args.camera if args.camera is not None else config.camera_index)
        session = CaptureSession(camera, client.fetch_image)
        try:
            target = await run_capture(client, session, args.template_id, args.output or config.media_paths.downloads)
        finally:
            session.back()
        if target is None:
            return 1
        print(f"photo saved to {target}")
        return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging()
    try:
        return asyncio.run(_dispatch(args))
    except CameraUnavailableError as exc:
        print(f"camera unavailable: {exc}", file=sys.stderr)
        return 3
    except (AppError, OSError) as exc:
        print(f"booth failed: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
