"""
App prompt builders. All prompt content and templates live here; the content
generator receives fully built prompts.
"""

from api.prompt_builders.skillforge import (
    build_explain_concept_prompt,
    build_final_exam_prompt,
    build_roadmap_prompt,
    build_weekly_quiz_prompt,
)

__all__ = [
    "build_roadmap_prompt",
    "build_weekly_quiz_prompt",
    "build_final_exam_prompt",
    "build_explain_concept_prompt",
]
