"""Prompt templates for astrology reading generation."""

from __future__ import annotations

from string import Template

# --- Reading prompt ---

READING_PROMPT = Template(
    "You are an expert natal chart interpreter. Compose a clear, empathetic reading "
    "that answers the question below, grounded in the birth details provided.\n"
    "\n"
    "Structure the reading as follows:\n"
    "$structure\n"
    "\n"
    "$safety\n"
    "\n"
    "User question: $question\n"
    "Birth details:\n"
    "- Name: $name\n"
    "- DOB: $dob\n"
    "- TOB: $tob\n"
    "- City: $city, $country\n"
    "- TZ: $tz\n"
    "- Notes: $notes"
)

READING_STRUCTURE: list[str] = [
    "A short summary that answers the question directly",
    "The key astrological themes relevant to the question",
    "Timing windows, expressed as probabilities and tendencies rather than certainties",
    "Practical guidance the reader can act on",
    "A warm closing paragraph",
]

SAFETY_INSTRUCTION = (
    "Do not give medical, legal, or financial advice. "
    "End with a one-line disclaimer that the reading is for reflection and entertainment only."
)

# --- Placeholders for optional birth details ---

UNSPECIFIED_TZ = "unspecified"
NO_NOTES = "none"

# --- Document text ---

DOCUMENT_TITLE = "Personalized Astrology Reading"

DISCLAIMER = (
    "This reading is offered for reflection and entertainment. It is not a substitute "
    "for professional medical, legal, or financial advice."
)

TEST_MODE_READING = "Test mode: reading generation was skipped for this request."
