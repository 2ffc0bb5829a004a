"""
Structured-output schemas for the content generator.

These are what the LLM is asked to fill; api.utils.common normalizes them into
domain Modules / Questions and drops malformed entries.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class RoadmapWeek(BaseModel):
    week: int = Field(description="Week number, starting at 1")
    title: str
    description: str = Field(description="Two or three sentences on what the week covers")
    key_concepts: List[str] = Field(description="3-5 short concept names for this week")


class GeneratedRoadmap(BaseModel):
    """Structured output: a week-by-week study roadmap."""
    topic: str
    difficulty: str
    roadmap: List[RoadmapWeek]


class GeneratedQuestion(BaseModel):
    id: int
    question: str
    options: List[str] = Field(description="Exactly 4 answer options")
    correct_answer_index: int = Field(description="0-based index into options")
    explanation: str = Field(description="One sentence on why the answer is correct")


class GeneratedQuestionSet(BaseModel):
    """Structured output: a multiple-choice question set."""
    questions: List[GeneratedQuestion]


class GeneratedConceptExplanation(BaseModel):
    concept: str
    definition: str
    example: str
    practical_tip: str
