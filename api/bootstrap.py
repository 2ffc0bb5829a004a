from sqlalchemy.orm import Session

from api.config import Settings, settings as default_settings
from api.services.content_generator import ContentGenerator, LLMContentGenerator
from api.services.plan_store import LocalPlanStore, PlanStore, SqlPlanStore, select_plan_store
from infra.llm.ollama import OllamaLLM


def build_content_generator(settings: Settings = default_settings) -> ContentGenerator:
    llm = OllamaLLM(
        model=settings.ollama_model,
        base_url=settings.ollama_base_url,
        timeout=settings.llm_timeout_seconds,
    )
    return LLMContentGenerator(llm, weeks=settings.roadmap_weeks, timeout=settings.llm_timeout_seconds)


async def build_plan_store(db: Session, settings: Settings = default_settings) -> PlanStore:
    """
    sql   -> database only
    local -> JSON file only
    auto  -> database when it answers a health check, JSON file otherwise
    """
    if settings.plan_store == "local":
        return LocalPlanStore(settings.local_store_path)
    sql_store = SqlPlanStore(db)
    if settings.plan_store == "sql":
        return sql_store
    return await select_plan_store(sql_store, LocalPlanStore(settings.local_store_path))
