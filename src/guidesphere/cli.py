# SPDX-License-Identifier: Apache-2.0
"""Command line entry point.

Subcommands::

    guidesphere parse reply.txt
    guidesphere render reply.txt --output frames/ --frames 90
    guidesphere ask "How do I start running?"
    guidesphere conversations list
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import logging
import mimetypes
import os
import random
import sys
from pathlib import Path
from typing import Any, Sequence

from guidesphere.conversations import (
    ChatAttachment,
    ConversationLibrary,
    ConversationNotFoundError,
    JsonConversationStore,
)
from guidesphere.journey.parser import StepParser
from guidesphere.journey.rotation import RotationEngine
from guidesphere.journey.state import JourneyStateMachine, RetargetRotation
from guidesphere.llm import select_provider
from guidesphere.render import SurfaceError, available, create
from guidesphere.render.loop import RenderLoop
from guidesphere.render.starfield import Starfield
from guidesphere.scheduler import ManualScheduler
from guidesphere.session import JourneySession
from guidesphere.utils.cli_helpers import configure_logging_from_env

DEFAULT_STORE = "~/.guidesphere/conversations.json"


def _apply_verbosity(ns: Any) -> None:
    if getattr(ns, "verbose", False):
        os.environ["GUIDESPHERE_VERBOSITY"] = "debug"
    elif getattr(ns, "quiet", False):
        os.environ["GUIDESPHERE_VERBOSITY"] = "quiet"
    configure_logging_from_env()


def _read_input(path: str | None) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"Cannot read {path}: {exc}") from exc


def _read_attachment(path: str) -> ChatAttachment:
    mime = mimetypes.guess_type(path)[0] or "application/octet-stream"
    if mime.startswith("image/"):
        kind = "image"
    elif mime == "application/pdf":
        kind = "pdf"
    elif mime.startswith("audio/"):
        kind = "audio"
    else:
        raise SystemExit(f"Unsupported attachment type: {mime}")
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise SystemExit(f"Cannot read {path}: {exc}") from exc
    return ChatAttachment(
        type=kind, mime_type=mime, data=base64.b64encode(raw).decode("ascii")
    )


def _parser_for(ns: Any) -> StepParser:
    seed = getattr(ns, "seed", None)
    return StepParser(rng=random.Random(seed)) if seed is not None else StepParser()


def _library(ns: Any) -> ConversationLibrary:
    path = ns.store or os.environ.get("GUIDESPHERE_STORE") or DEFAULT_STORE
    return ConversationLibrary(JsonConversationStore(path))


def _print_steps(steps) -> None:
    print(json.dumps([s.to_dict() for s in steps], indent=2, ensure_ascii=False))


def handle_parse(ns: Any) -> int:
    _apply_verbosity(ns)
    steps = _parser_for(ns).parse(_read_input(ns.input))
    logging.debug("parsed %d step(s)", len(steps))
    _print_steps(steps)
    return 0


def handle_render(ns: Any) -> int:
    """Render frames of a journey offline with a manual clock."""

    _apply_verbosity(ns)
    slugs = available()
    if ns.surface not in slugs:
        raise SystemExit(
            f"Unknown surface '{ns.surface}'. Available: {', '.join(slugs)}"
        )
    if ns.surface not in available(writes_images=True):
        raise SystemExit(f"Surface '{ns.surface}' cannot write image files")
    try:
        surface = create(
            ns.surface, width=ns.width, height=ns.height, pixel_ratio=ns.pixel_ratio
        )
    except SurfaceError as exc:
        raise SystemExit(str(exc)) from exc

    steps = _parser_for(ns).parse(_read_input(ns.input))
    scheduler = ManualScheduler()
    machine = JourneyStateMachine()
    rotation = RotationEngine()
    starfield = Starfield.generate(seed=ns.seed)
    loop = RenderLoop(surface, scheduler, machine, rotation, starfield=starfield)
    transitions = [machine.load(steps)]
    if ns.step is not None:
        transitions.append(machine.navigate_to(ns.step - 1))
    for transition in transitions:
        for command in transition.commands:
            if isinstance(command, RetargetRotation):
                rotation.retarget(command.angle)

    out_dir = Path(ns.output)
    out_dir.mkdir(parents=True, exist_ok=True)
    loop.start()
    written = []
    for i in range(1, ns.frames + 1):
        scheduler.run_frames(1)
        if ns.every and i % ns.every == 0:
            written.append(surface.save(out_dir / f"frame_{i:04d}.png"))
    written.append(surface.save(out_dir / "frame_final.png"))
    loop.teardown()
    logging.info("Rendered %d frame(s) into %s", loop.frames_rendered, out_dir)
    logging.debug("Files: %s", ", ".join(p.name for p in written))
    return 0


def handle_ask(ns: Any) -> int:
    _apply_verbosity(ns)
    library = _library(ns)
    client = select_provider(ns.provider, ns.model)
    attachment = _read_attachment(ns.attach) if ns.attach else None

    async def _run():
        session = JourneySession(
            library,
            client,
            ManualScheduler(),
            parser=_parser_for(ns),
            goal=ns.goal,
            profile=ns.profile,
        )
        try:
            return await session.ask(
                ns.question, conversation_id=ns.conversation, attachment=attachment
            )
        finally:
            session.teardown()

    try:
        steps = asyncio.run(_run())
    except ConversationNotFoundError as exc:
        raise SystemExit(f"Unknown conversation: {exc.args[0]}") from exc
    _print_steps(steps)
    return 0


def handle_conversations(ns: Any) -> int:
    _apply_verbosity(ns)
    library = _library(ns)
    try:
        if ns.action == "list":
            items = library.search(ns.query) if ns.query else library.conversations
            for convo in items:
                marker = "*" if convo.id == library.active_id else " "
                steps, messages = len(convo.journey_steps), len(convo.messages)
                print(
                    f"{marker} {convo.id}  {convo.name}  "
                    f"({steps} steps, {messages} messages)"
                )
        elif ns.action == "new":
            convo = library.create(ns.name)
            print(convo.id)
        elif ns.action == "rename":
            library.rename(ns.id, ns.name or "")
        elif ns.action == "delete":
            library.delete(ns.id)
        elif ns.action == "show":
            _print_steps(library.get(ns.id).steps())
    except ConversationNotFoundError as exc:
        raise SystemExit(f"Unknown conversation: {exc.args[0]}") from exc
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("--quiet", action="store_true", help="Only warnings and errors")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guidesphere", description="Guided journeys on a rotating sphere."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Turn a guide reply into journey steps")
    p_parse.add_argument("input", nargs="?", default="-", help="File or '-' for stdin")
    p_parse.add_argument("--seed", type=int, default=None, help="Placement seed")
    _add_common(p_parse)
    p_parse.set_defaults(func=handle_parse)

    p_render = sub.add_parser("render", help="Render journey frames to PNG")
    p_render.add_argument("input", nargs="?", default="-", help="File or '-' for stdin")
    p_render.add_argument("--output", required=True, help="Output directory")
    p_render.add_argument("--frames", type=int, default=90)
    p_render.add_argument(
        "--every", type=int, default=0, help="Also save every Nth frame"
    )
    p_render.add_argument("--step", type=int, default=None, help="1-based active step")
    p_render.add_argument("--width", type=int, default=640)
    p_render.add_argument("--height", type=int, default=480)
    p_render.add_argument("--pixel-ratio", type=float, default=1.0)
    p_render.add_argument(
        "--surface", default="matplotlib", help="Surface slug that can save frames"
    )
    p_render.add_argument("--seed", type=int, default=None)
    _add_common(p_render)
    p_render.set_defaults(func=handle_render)

    p_ask = sub.add_parser("ask", help="Ask the guide and store the journey")
    p_ask.add_argument("question")
    p_ask.add_argument("--conversation", default=None, help="Conversation id")
    p_ask.add_argument("--store", default=None, help="Conversation store JSON path")
    p_ask.add_argument("--provider", default=None)
    p_ask.add_argument("--model", default=None)
    p_ask.add_argument("--seed", type=int, default=None)
    p_ask.add_argument("--goal", default=None, help="Goal the guide keeps in mind")
    p_ask.add_argument("--profile", default=None, help="Short user description")
    p_ask.add_argument("--attach", default=None, help="Image, PDF or audio file")
    _add_common(p_ask)
    p_ask.set_defaults(func=handle_ask)

    p_conv = sub.add_parser("conversations", help="Manage saved conversations")
    p_conv.add_argument("action", choices=["list", "new", "rename", "delete", "show"])
    p_conv.add_argument("id", nargs="?", default=None)
    p_conv.add_argument("--name", default=None)
    p_conv.add_argument("--query", default=None, help="Filter names (list)")
    p_conv.add_argument("--store", default=None, help="Conversation store JSON path")
    _add_common(p_conv)
    p_conv.set_defaults(func=handle_conversations)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(list(argv) if argv is not None else None)
    if ns.command == "conversations" and ns.action in {"rename", "delete", "show"}:
        if not ns.id:
            parser.error(f"conversations {ns.action} requires an id")
    return int(ns.func(ns))


if __name__ == "__main__":  # pragma: no cover - exercised in CLI tests
    raise SystemExit(main())
