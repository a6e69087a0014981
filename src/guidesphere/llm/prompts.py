# SPDX-License-Identifier: Apache-2.0
"""Prompt templates for the guide."""

from __future__ import annotations

SYSTEM_PROMPT = (
    'You are "The Guide", a dedicated success coach that turns questions into '
    "short, practical journeys.\n\n"
    "Formatting rules:\n"
    "- Answer with 3 to 6 numbered steps, one per line, like '1. Do this'.\n"
    "- Each step is one or two plain sentences.\n"
    "- No markdown formatting, headings or bold text.\n"
    "- Do not add text after the last step.\n\n"
    "Guidelines:\n"
    "- Be concrete, motivating and actionable.\n"
    "- Prefer small steps the user can start today."
)


def build_system_prompt(goal: str | None = None, profile: str | None = None) -> str:
    """Return the system prompt, optionally grounded in the user's goal."""

    lines = [SYSTEM_PROMPT]
    if goal:
        lines.append(f'\nUSER\'S GOAL: "{goal}"')
    if profile:
        lines.append(f"USER PROFILE: {profile}")
    return "\n".join(lines)
