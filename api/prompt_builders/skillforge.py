"""SkillForge content prompts: roadmap, weekly quiz, final exam, concept explanation."""

from __future__ import annotations

from typing import Sequence

from api.prompt_builders.template import build_from_template

TEMPLATE_ROADMAP = """ROLE: Curriculum Designer
Build a {weeks}-week {difficulty} level study roadmap for "{topic}".

Rules:
- Number the weeks 1 to {weeks}, one entry per week, in learning order.
- Each week has a short title, a two or three sentence description and 3-5 key concepts.
- Later weeks build on earlier ones; do not repeat concepts across weeks.
"""

TEMPLATE_WEEKLY_QUIZ = (
    'Create a {count}-question multiple choice quiz for "{week_title}" in "{topic}". '
    "Focus on concepts: {concepts}. Ensure varied difficulty. "
    "Each question has exactly 4 options, one correct answer (0-based index) and a one sentence explanation."
)

TEMPLATE_FINAL_EXAM = (
    'Generate a {count}-question CUMULATIVE Final Mastery Exam for the course "{topic}". '
    "Topics covered: {module_titles}. Questions should be challenging and cover all modules. "
    "Each question has exactly 4 options, one correct answer (0-based index) and a one sentence explanation."
)

TEMPLATE_EXPLAIN_CONCEPT = (
    'Explain "{concept}" for someone learning "{topic}". '
    "Give a plain definition, one concrete example and one practical tip."
)


def build_roadmap_prompt(*, topic: str, difficulty: str, weeks: int) -> str:
    return build_from_template(TEMPLATE_ROADMAP, topic=topic, difficulty=difficulty, weeks=weeks).strip()


def build_weekly_quiz_prompt(*, topic: str, week_title: str, concepts: Sequence[str], count: int) -> str:
    return build_from_template(
        TEMPLATE_WEEKLY_QUIZ,
        topic=topic,
        week_title=week_title,
        concepts=", ".join(concepts) or week_title,
        count=count,
    )


def build_final_exam_prompt(*, topic: str, module_titles: Sequence[str], count: int) -> str:
    return build_from_template(
        TEMPLATE_FINAL_EXAM,
        topic=topic,
        module_titles=", ".join(module_titles),
        count=count,
    )


def build_explain_concept_prompt(*, concept: str, topic: str) -> str:
    return build_from_template(TEMPLATE_EXPLAIN_CONCEPT, concept=concept, topic=topic)
