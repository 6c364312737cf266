"""Prompt construction for shot coaching."""

from __future__ import annotations

from typing import Iterable

from barista_log.schema import Extraction
from barista_log.views import brew_ratio

COACH_INSTRUCTIONS = (
    "You are an expert barista coach. Analyze the espresso extraction data and provide a brief, "
    "friendly 2-3 sentence summary. Include what went well and one key tip for improvement. "
    "Be concise and encouraging. Ideal espresso: ratio ~1:2, time 25-35 seconds."
)

HISTORY_CONTEXT_LIMIT = 2


def build_prompt(target: Extraction, history: Iterable[Extraction] = ()) -> str:
    """Describe ``target`` and up to two earlier shots of the same bean.

    ``history`` is used in the order given; callers normally pass it newest
    first. Entries whose bean name differs from the target's are skipped.
    """
    prompt = "Analyze this shot:\n"
    prompt += f"Bean: {target.bean_name or 'Unknown'}\n"
    prompt += f"Grind: {target.grind_setting}\n"

    if target.dose_in is not None:
        prompt += f"Dose: {target.dose_in:.1f}g\n"
    if target.yield_out is not None:
        prompt += f"Yield: {target.yield_out:.1f}g\n"

    ratio = brew_ratio(target)
    if ratio is not None:
        prompt += f"Ratio: 1:{ratio:.1f}\n"

    if target.time_seconds is not None:
        prompt += f"Time: {int(target.time_seconds)}s\n"

    if target.notes:
        prompt += f"Notes: {target.notes}\n"

    same_bean = [e for e in history if e.bean_name == target.bean_name][:HISTORY_CONTEXT_LIMIT]
    if same_bean:
        prompt += "\nRecent shots with same bean: "
        for previous in same_bean:
            prompt += f"Grind {previous.grind_setting}"
            if previous.time_seconds is not None:
                prompt += f" / {int(previous.time_seconds)}s"
            prompt += "; "

    return prompt
