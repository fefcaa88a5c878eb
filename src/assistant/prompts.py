"""Prompt builders for study plans and flashcards, plus reply parsing."""

from __future__ import annotations

import re
from typing import Sequence

from .session import ChatSession
from .types import ChatResponse, Flashcard

STUDY_PLAN_SYSTEM_PROMPT = (
    "You are an expert educational tutor. Provide personalized study "
    "recommendations based on the student's subject, level, goals, and "
    "available time. Be specific and actionable."
)

_FLASHCARD_PATTERN = re.compile(
    r"FRONT:\s*(?P<front>.+?)\s*\n\s*BACK:\s*(?P<back>.+?)(?=\n\s*(?:\d+[.)]\s*)?FRONT:|\Z)",
    re.IGNORECASE | re.DOTALL,
)


def study_recommendations(
    session: ChatSession,
    *,
    subject: str,
    level: str,
    goals: Sequence[str],
    minutes_available: int,
) -> ChatResponse:
    message = (
        f"Subject: {subject}\n"
        f"Level: {level}\n"
        f"Goals: {', '.join(goals) if goals else 'none given'}\n"
        f"Time Available: {minutes_available} minutes\n\n"
        "Please provide a detailed study plan with:\n"
        "1. Prioritized topics to focus on\n"
        "2. Specific study techniques\n"
        "3. Time allocation for each topic\n"
        "4. Resources or materials to use\n"
        "5. Practice exercises or activities\n"
        "6. Progress tracking suggestions"
    )
    return session.ask(message, system_prompt=STUDY_PLAN_SYSTEM_PROMPT)


def flashcard_system_prompt(topic: str, count: int) -> str:
    return (
        f'Generate {count} high-quality flashcards for the topic "{topic}". '
        "Format each flashcard as:\n"
        "FRONT: [Question or concept]\n"
        "BACK: [Answer or explanation]\n\n"
        "Make them challenging but fair, covering key concepts, definitions, "
        "and applications."
    )


def generate_flashcards(
    session: ChatSession,
    topic: str,
    count: int = 10,
) -> list[Flashcard]:
    if count < 1:
        raise ValueError("count must be at least 1")
    response = session.ask(
        f"Create {count} flashcards about {topic}",
        system_prompt=flashcard_system_prompt(topic, count),
    )
    return parse_flashcards(response.content)[:count]


def parse_flashcards(text: str) -> list[Flashcard]:
    """Extract FRONT/BACK pairs; blocks missing either side are skipped."""
    cards: list[Flashcard] = []
    for match in _FLASHCARD_PATTERN.finditer(text or ""):
        front = " ".join(match.group("front").split())
        back = " ".join(match.group("back").split())
        if front and back:
            cards.append(Flashcard(front=front, back=back))
    return cards
