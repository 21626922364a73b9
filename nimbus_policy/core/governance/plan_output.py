# nimbus_policy/core/governance/plan_output.py
"""
Heuristic scanning of human-readable plan output.

This is text matching on the summary line terraform prints
(``Plan: 1 to add, 2 to change, 3 to destroy.``), not a parser. If the tool
changes its wording the counts read as zero and ``recognized`` is False.
"""

import re

from pydantic import BaseModel, ConfigDict, Field

_ADD = re.compile(r"(\d+) to add")
_CHANGE = re.compile(r"(\d+) to change")
_DESTROY = re.compile(r"(\d+) to destroy")
_NO_CHANGES = re.compile(r"No changes\.", re.IGNORECASE)


class PlanChanges(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    add: int = Field(0, ge=0)
    change: int = Field(0, ge=0)
    destroy: int = Field(0, ge=0)
    recognized: bool = Field(False, description="A summary line was found in the text")


def _count(pattern: re.Pattern, text: str) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else 0


def analyze_plan_output(text: str) -> PlanChanges:
    """Extract add/change/destroy counts from plan output."""
    if not text:
        return PlanChanges()

    matched = [p.search(text) is not None for p in (_ADD, _CHANGE, _DESTROY)]
    recognized = any(matched) or _NO_CHANGES.search(text) is not None

    return PlanChanges(
        add=_count(_ADD, text),
        change=_count(_CHANGE, text),
        destroy=_count(_DESTROY, text),
        recognized=recognized,
    )


__all__ = ["PlanChanges", "analyze_plan_output"]
