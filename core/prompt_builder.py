"""Prompt builder that converts a reading request into a generation prompt."""

from __future__ import annotations

import logging

from core.models import ReadingRequest
from prompts.templates import (
    NO_NOTES,
    READING_PROMPT,
    READING_STRUCTURE,
    SAFETY_INSTRUCTION,
    UNSPECIFIED_TZ,
)

logger = logging.getLogger(__name__)


def build_reading_prompt(req: ReadingRequest) -> str:
    """Build the reading prompt from the question and birth details."""
    structure = "\n".join(f"{idx}. {item}" for idx, item in enumerate(READING_STRUCTURE, start=1))

    prompt = READING_PROMPT.safe_substitute(
        structure=structure,
        safety=SAFETY_INSTRUCTION,
        question=req.question,
        name=req.full_name,
        dob=req.dob,
        tob=req.tob,
        city=req.city,
        country=req.country,
        tz=req.tz or UNSPECIFIED_TZ,
        notes=req.notes or NO_NOTES,
    )

    logger.debug("Built reading prompt (%d chars)", len(prompt))
    return prompt
