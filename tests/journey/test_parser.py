# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import random

import pytest

from guidesphere.journey.parser import (
    APOLOGY_TEXT,
    FALLBACK_TITLE,
    MAX_LIST_STEPS,
    MAX_PARAGRAPH_STEPS,
    StepParser,
    bullet_entries,
    normalize,
    numbered_entries,
    parse_steps,
)


def _parse(raw):
    return StepParser(rng=random.Random(42)).parse(raw)


def test_numbered_reply_becomes_titled_steps():
    steps = _parse("1. Plan your week\n2. Execute daily\n3. Review results")
    assert [s.title for s in steps] == ["Step 1", "Step 2", "Step 3"]
    assert [s.content for s in steps] == [
        "Plan your week",
        "Execute daily",
        "Review results",
    ]
    assert [s.id for s in steps] == ["step-1", "step-2", "step-3"]
    assert not any(s.is_active or s.is_completed for s in steps)


def test_undefined_reply_gives_apology_step():
    steps = _parse("undefined")
    assert len(steps) == 1
    assert steps[0].content == APOLOGY_TEXT
    assert steps[0].title == FALLBACK_TITLE
    assert (steps[0].position.lat, steps[0].position.lng) == (20.0, 0.0)


@pytest.mark.parametrize("raw", [None, "", "   ", "\n\t"])
def test_empty_inputs_give_single_fallback(raw):
    steps = _parse(raw)
    assert len(steps) == 1
    assert steps[0].title == FALLBACK_TITLE
    assert steps[0].content == APOLOGY_TEXT


def test_numbered_markers_are_resorted_by_number():
    raw = "1. Alpha comes first\n3. Gamma comes third\n2. Beta comes second"
    steps = _parse(raw)
    assert [s.content for s in steps] == [
        "Alpha comes first",
        "Beta comes second",
        "Gamma comes third",
    ]
    assert [s.title for s in steps] == ["Step 1", "Step 2", "Step 3"]


def test_twenty_numbered_markers_are_capped():
    raw = "\n".join(f"{i}. Do the thing number {i}" for i in range(1, 21))
    steps = _parse(raw)
    assert len(steps) == MAX_LIST_STEPS
    assert steps[-1].content == "Do the thing number 6"


def test_single_numbered_marker_falls_through_to_bullets():
    raw = (
        "1. Here is an overview of the plan\n"
        "- Stretch for ten minutes\n"
        "- Walk around the block\n"
        "- Drink a glass of water"
    )
    steps = _parse(raw)
    assert [s.content for s in steps] == [
        "Stretch for ten minutes",
        "Walk around the block",
        "Drink a glass of water",
    ]


def test_bullets_without_space_and_rule_lines():
    raw = (
        "Try this:\n"
        "---\n"
        "-Stretch for ten minutes\n"
        "-Walk around the block\n"
        "--- \n"
        "-Drink a glass of water"
    )
    steps = _parse(raw)
    assert [s.content for s in steps] == [
        "Stretch for ten minutes",
        "Walk around the block",
        "Drink a glass of water",
    ]


def test_double_dash_lines_are_not_bullets():
    assert bullet_entries("-- not a bullet here\n--- neither is this") == []


def test_short_entries_do_not_count():
    # "Go." and "Rest." are too short to be steps on their own
    steps = _parse("1. Go.\n2. Rest.")
    assert len(steps) == 1
    assert steps[0].title == FALLBACK_TITLE


def test_step_prefix_and_continuation_lines():
    raw = (
        "Step 1: Pick a realistic goal\n"
        "that you can reach in a month.\n"
        "Step 2 - Track it every evening"
    )
    steps = _parse(raw)
    assert [s.content for s in steps] == [
        "Pick a realistic goal that you can reach in a month.",
        "Track it every evening",
    ]


def test_paragraphs_used_without_markers():
    paras = [f"Paragraph {i} talks about something long enough." for i in range(7)]
    steps = _parse("\n\n".join(paras))
    assert len(steps) == MAX_PARAGRAPH_STEPS
    assert steps[0].content == paras[0]


def test_unstructured_text_is_one_guidance_step():
    steps = _parse("Just keep going, you are doing great.")
    assert len(steps) == 1
    assert steps[0].title == FALLBACK_TITLE
    assert steps[0].content == "Just keep going, you are doing great."


def test_markdown_emphasis_and_artifacts_are_stripped():
    assert normalize("**Bold** and __under__ `code` undefined") == "Bold and under code"
    assert normalize("snake_case stays") == "snake_case stays"
    steps = _parse("1. **Plan** your week\n2. *Execute* daily")
    assert [s.content for s in steps] == ["Plan your week", "Execute daily"]


def test_numbered_entries_keep_scan_order():
    pairs = numbered_entries("2. Second thing to do\n1. First thing to do")
    assert [n for n, _ in pairs] == [2, 1]


def test_positions_spread_across_bands():
    raw = "\n".join(f"{i}. Something worth doing {i}" for i in range(1, 5))
    steps = _parse(raw)
    first, last = steps[0].position, steps[-1].position
    assert 30.0 <= first.lat <= 40.0
    assert -125.0 <= first.lng <= -115.0
    assert -40.0 <= last.lat <= -30.0
    assert 115.0 <= last.lng <= 125.0


def test_seeded_rng_is_reproducible():
    raw = "1. Plan your week\n2. Execute daily"
    a = parse_steps(raw, rng=random.Random(3))
    b = parse_steps(raw, rng=random.Random(3))
    assert a == b


def test_every_nonempty_input_gives_one_to_six_steps():
    samples = [
        "x",
        "- a\n- b",
        "1. ok\n\n\n",
        "Step 9 - the only numbered step here",
        "\n".join("- bullet point number %d" % i for i in range(10)),
    ]
    for raw in samples:
        steps = _parse(raw)
        assert 1 <= len(steps) <= MAX_LIST_STEPS
        assert all(s.content for s in steps)
