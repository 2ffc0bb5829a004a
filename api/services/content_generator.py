"""
Content generator: roadmaps, question sets and concept explanations.

ContentGenerator is the seam the engine depends on; LLMContentGenerator is the
Ollama-backed implementation. Every failure (connection, timeout, schema
validation, or output that normalizes to nothing) surfaces as GenerationFailure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence, Type, TypeVar, Union

from pydantic import BaseModel

from api.errors import GenerationFailure
from api.prompt_builders import (
    build_explain_concept_prompt,
    build_final_exam_prompt,
    build_roadmap_prompt,
    build_weekly_quiz_prompt,
)
from api.schemas.assessment_schemas import Question
from api.schemas.generation_schemas import (
    GeneratedConceptExplanation,
    GeneratedQuestionSet,
    GeneratedRoadmap,
)
from api.schemas.plan_schemas import ConceptExplanation, Module
from api.services.assessment import FINAL_QUESTION_COUNT, WEEKLY_QUESTION_COUNT
from api.utils.common import normalize_questions, normalize_roadmap
from api.utils.logger import configure_logging, log_request
from infra.llm.base import LLM

logger = configure_logging()

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class WeeklyScope:
    """Quiz scope: one module's title and key concepts."""
    topic: str
    title: str
    concepts: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class FinalScope:
    """Exam scope: every module title of the plan."""
    topic: str
    module_titles: Sequence[str] = field(default_factory=tuple)


AssessmentScope = Union[WeeklyScope, FinalScope]


class ContentGenerator(ABC):
    """Contract for anything that can produce SkillForge content."""

    @abstractmethod
    async def generate_curriculum(self, topic: str, difficulty_tier: str) -> list[Module]:
        raise NotImplementedError

    @abstractmethod
    async def generate_assessment(self, scope: AssessmentScope) -> list[Question]:
        raise NotImplementedError

    @abstractmethod
    async def explain_concept(self, concept: str, topic: str) -> ConceptExplanation:
        raise NotImplementedError


class LLMContentGenerator(ContentGenerator):
    def __init__(self, llm: LLM, weeks: int = 4, timeout: float | None = None):
        self.llm = llm
        self.weeks = weeks
        self.timeout = timeout

    async def _ask(self, name: str, prompt: str, schema: Type[T]) -> T:
        try:
            with log_request(logger, name):
                return await self.llm.generate_structured(prompt, schema, timeout=self.timeout)
        except Exception as e:
            raise GenerationFailure(f"{name} failed: {e}", {"stage": name}) from e

    async def generate_curriculum(self, topic: str, difficulty_tier: str) -> list[Module]:
        prompt = build_roadmap_prompt(topic=topic, difficulty=difficulty_tier, weeks=self.weeks)
        generated = await self._ask("generate_roadmap", prompt, GeneratedRoadmap)
        modules = normalize_roadmap(generated.roadmap)
        if not modules:
            raise GenerationFailure("Roadmap came back without usable weeks", {"stage": "generate_roadmap"})
        return modules

    async def generate_assessment(self, scope: AssessmentScope) -> list[Question]:
        if isinstance(scope, WeeklyScope):
            name = "generate_quiz"
            prompt = build_weekly_quiz_prompt(
                topic=scope.topic,
                week_title=scope.title,
                concepts=scope.concepts,
                count=WEEKLY_QUESTION_COUNT,
            )
        else:
            name = "generate_final_exam"
            prompt = build_final_exam_prompt(
                topic=scope.topic,
                module_titles=scope.module_titles,
                count=FINAL_QUESTION_COUNT,
            )
        generated = await self._ask(name, prompt, GeneratedQuestionSet)
        questions = normalize_questions(generated.questions)
        if len(questions) < len(generated.questions):
            logger.warning("%s dropped %s malformed question(s)", name, len(generated.questions) - len(questions))
        return questions

    async def explain_concept(self, concept: str, topic: str) -> ConceptExplanation:
        prompt = build_explain_concept_prompt(concept=concept, topic=topic)
        generated = await self._ask("explain_concept", prompt, GeneratedConceptExplanation)
        return ConceptExplanation(**generated.model_dump())
