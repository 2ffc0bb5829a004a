"""
Common utility functions used across services and routes.
"""

from datetime import datetime
from uuid import uuid4

from api.schemas.assessment_schemas import Question
from api.schemas.plan_schemas import Module

MIN_OPTIONS = 2


def iso_format(dt: datetime) -> str:
    """Format datetime as ISO string with Z suffix."""
    return dt.isoformat() + "Z"


def new_credential_id() -> str:
    """Short, human-readable certificate id (12 upper-case hex chars)."""
    return uuid4().hex[:12].upper()


def normalize_roadmap(weeks: object) -> list[Module]:
    """Normalize generated roadmap weeks into Modules, dropping malformed or duplicate weeks."""
    out: list[Module] = []
    if not isinstance(weeks, list):
        return out
    seen: set[int] = set()
    for w in weeks:
        if hasattr(w, "model_dump"):
            w = w.model_dump()
        if not isinstance(w, dict):
            continue
        number = w.get("week", w.get("number"))
        title = w.get("title")
        concepts = w.get("key_concepts", w.get("keyConcepts")) or []
        if isinstance(number, bool) or not isinstance(number, int) or number in seen:
            continue
        if not isinstance(title, str) or not title.strip():
            continue
        if not isinstance(concepts, list):
            concepts = []
        description = w.get("description")
        seen.add(number)
        out.append(
            Module(
                number=number,
                title=title.strip(),
                description=description.strip() if isinstance(description, str) else "",
                key_concepts=tuple(c.strip() for c in concepts if isinstance(c, str) and c.strip()),
            )
        )
    return sorted(out, key=lambda m: m.number)


def normalize_questions(questions: object) -> list[Question]:
    """Normalize generated questions; entries without a usable answer key are dropped."""
    out: list[Question] = []
    if not isinstance(questions, list):
        return out
    for q in questions:
        if hasattr(q, "model_dump"):
            q = q.model_dump()
        if not isinstance(q, dict):
            continue
        text = q.get("question")
        options = q.get("options")
        correct = q.get("correct_answer_index", q.get("correct_option_index"))
        if not isinstance(text, str) or not text.strip():
            continue
        # Blank options would shift the answer key, so the whole question goes.
        if not isinstance(options, list) or not all(isinstance(o, str) and o.strip() for o in options):
            continue
        options = [o.strip() for o in options]
        if len(options) < MIN_OPTIONS:
            continue
        if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct < len(options):
            continue
        explanation = q.get("explanation")
        out.append(
            Question(
                id=len(out) + 1,
                question=text.strip(),
                options=tuple(options),
                correct_option_index=correct,
                explanation=explanation.strip() if isinstance(explanation, str) else "",
            )
        )
    return out
