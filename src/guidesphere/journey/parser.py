# SPDX-License-Identifier: Apache-2.0
"""Heuristic conversion of a free-form guide reply into journey steps.

Rules are tried in order and the first one that produces at least two
entries wins:

1. numbered markers (``1.``, ``2)``, ``Step 3 -``), resorted by number
2. dash bullets, in scan order
3. blank-line separated paragraphs
4. the whole text as a single "Guidance" step

The parser never raises and always returns at least one step.
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, field

from .models import JourneyStep, Position
from .projection import place_position

LOGGER = logging.getLogger(__name__)

MAX_LIST_STEPS = 6
MAX_PARAGRAPH_STEPS = 5
MIN_ENTRY_CHARS = 10
MIN_PARAGRAPH_CHARS = 30

FALLBACK_TITLE = "Guidance"
APOLOGY_TEXT = (
    "I'm sorry, I couldn't put together a journey from that response. "
    "Please try asking again."
)
APOLOGY_POSITION = Position(lat=20.0, lng=0.0)

_UNDEFINED_RE = re.compile(r"undefined", re.IGNORECASE)
_EMPHASIS_RE = re.compile(r"\*\*|__|\*|`|(?<!\w)_|_(?!\w)")
_NUMBERED_RE = re.compile(
    r"^\s*(?:step\s*(\d+)\s*[.):\-]|(\d+)\s*[.)\-])\s*(.*)$", re.IGNORECASE
)
_BULLET_RE = re.compile(r"^\s*[-–—](?![-–—])\s*(.*)$")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_NEWLINE_RUN_RE = re.compile(r"\s*\n\s*")


def normalize(raw: str | None) -> str:
    """Strip the "undefined" artifact and markdown emphasis, then trim."""

    if raw is None:
        return ""
    text = raw if isinstance(raw, str) else str(raw)
    text = _UNDEFINED_RE.sub("", text)
    text = _EMPHASIS_RE.sub("", text)
    return text.strip()


def _collapse(text: str) -> str:
    return _NEWLINE_RUN_RE.sub(" ", text).strip()


def numbered_entries(text: str) -> list[tuple[int, str]]:
    """Collect ``(number, content)`` pairs in scan order.

    Lines that follow a marker belong to it until the next marker.
    """

    blocks: list[tuple[int, list[str]]] = []
    for line in text.splitlines():
        m = _NUMBERED_RE.match(line)
        if m:
            num = int(m.group(1) or m.group(2))
            blocks.append((num, [m.group(3)]))
        elif blocks:
            blocks[-1][1].append(line)
    pairs = []
    for num, parts in blocks:
        content = _collapse("\n".join(parts))
        if len(content) > MIN_ENTRY_CHARS:
            pairs.append((num, content))
    return pairs


def bullet_entries(text: str) -> list[str]:
    out = []
    for line in text.splitlines():
        m = _BULLET_RE.match(line)
        if m:
            content = m.group(1).strip()
            if len(content) > MIN_ENTRY_CHARS:
                out.append(content)
    return out


def paragraph_entries(text: str) -> list[str]:
    out = []
    for chunk in _PARAGRAPH_SPLIT_RE.split(text):
        content = _collapse(chunk)
        if len(content) > MIN_PARAGRAPH_CHARS:
            out.append(content)
    return out


@dataclass
class StepParser:
    """Turn a raw reply into ``JourneyStep`` objects.

    ``rng`` drives the placement jitter; pass a seeded ``random.Random`` for
    reproducible positions. ``id_prefix`` namespaces the generated step ids.
    """

    rng: random.Random = field(default_factory=random.Random)
    id_prefix: str = "step"

    def parse(self, raw: str | None) -> list[JourneyStep]:
        text = normalize(raw)
        if not text:
            LOGGER.debug("empty reply after normalization; using apology step")
            return [self._make(0, FALLBACK_TITLE, APOLOGY_TEXT, APOLOGY_POSITION)]

        contents = self._structured_contents(text)
        if contents is None:
            return self._build([text], title=FALLBACK_TITLE)
        return self._build(contents)

    def _structured_contents(self, text: str) -> list[str] | None:
        numbered = numbered_entries(text)
        if len(numbered) >= 2:
            numbered.sort(key=lambda pair: pair[0])
            LOGGER.debug("numbered rule matched %d entries", len(numbered))
            return [content for _, content in numbered[:MAX_LIST_STEPS]]
        bullets = bullet_entries(text)
        if len(bullets) >= 2:
            LOGGER.debug("bullet rule matched %d entries", len(bullets))
            return bullets[:MAX_LIST_STEPS]
        paragraphs = paragraph_entries(text)
        if len(paragraphs) >= 2:
            LOGGER.debug("paragraph rule matched %d entries", len(paragraphs))
            return paragraphs[:MAX_PARAGRAPH_STEPS]
        return None

    def _build(
        self, contents: list[str], *, title: str | None = None
    ) -> list[JourneyStep]:
        total = len(contents)
        return [
            self._make(
                i,
                title or f"Step {i + 1}",
                content,
                place_position(i, total, self.rng),
            )
            for i, content in enumerate(contents)
        ]

    def _make(
        self, index: int, title: str, content: str, position: Position
    ) -> JourneyStep:
        return JourneyStep(
            id=f"{self.id_prefix}-{index + 1}",
            title=title,
            content=content,
            position=position,
        )


def parse_steps(raw: str | None, rng: random.Random | None = None) -> list[JourneyStep]:
    """Module-level shortcut for ``StepParser(rng).parse(raw)``."""

    parser = StepParser(rng=rng) if rng is not None else StepParser()
    return parser.parse(raw)
