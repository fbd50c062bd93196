"""Result shapes registered at import time for the built-in one-shot prompts."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import Field

from . import schema
from .schema import StrictModel

LABEL_CONFLICT_RESOLVE = "conflict-resolve"
LABEL_NUDGENIK = "nudgenik"
LABEL_BRANCH_SUGGEST = "branch-suggest"

Confidence = Literal["low", "medium", "high"]


class FileAction(StrictModel):
    """What the agent did to resolve a single conflicted file."""

    action: Literal["modified", "deleted"]
    description: str = ""


class ConflictResolveResult(StrictModel):
    """Report returned after the agent edited conflicted files in place."""

    all_resolved: bool
    confidence: Confidence
    summary: str
    files: Dict[str, FileAction]


class NudgeNikResult(StrictModel):
    """Classification of a coding agent's last response."""

    state: Literal[
        "Needs Authorization",
        "Needs Feature Clarification",
        "Needs User Testing",
        "Completed",
    ]
    confidence: Confidence
    evidence: List[str]
    summary: str


class BranchSuggestion(StrictModel):
    """Branch name and short nickname suggested for a new workspace."""

    branch: str = Field(pattern=r"^\s*\S")
    nickname: str


schema.register(LABEL_CONFLICT_RESOLVE, ConflictResolveResult)
schema.register(LABEL_NUDGENIK, NudgeNikResult)
schema.register(LABEL_BRANCH_SUGGEST, BranchSuggestion)


__all__ = [
    "BranchSuggestion",
    "ConflictResolveResult",
    "FileAction",
    "LABEL_BRANCH_SUGGEST",
    "LABEL_CONFLICT_RESOLVE",
    "LABEL_NUDGENIK",
    "NudgeNikResult",
]
