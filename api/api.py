from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from api.routes.plan_routes import plan_routes
from api.config import create_db
from api.errors import (
    FinalLocked,
    GenerationFailure,
    IncompleteSubmission,
    InvalidAnswer,
    InvalidTopic,
    ModuleLocked,
    PersistenceFailure,
    PlanNotFound,
    SkillForgeError,
    UnknownModule,
)
from api.utils.logger import configure_logging, set_request_id, clear_request_id
from fastapi import Request
from starlette.responses import Response, JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

app = FastAPI(title="SkillForge")
logger = configure_logging()
create_db()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS: dict[type[SkillForgeError], int] = {
    InvalidTopic: 400,
    InvalidAnswer: 400,
    IncompleteSubmission: 400,
    PlanNotFound: 404,
    UnknownModule: 404,
    ModuleLocked: 409,
    FinalLocked: 409,
    GenerationFailure: 502,
    PersistenceFailure: 503,
}


def status_for(exc: SkillForgeError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = set_request_id(request.headers.get("x-request-id") or request.query_params.get("rid"))
    try:
        logger.info("request start method=%s path=%s client=%s", request.method, request.url.path, request.client)
        response: Response = await call_next(request)
        logger.info("request end status=%s method=%s path=%s", response.status_code, request.method, request.url.path)
        response.headers["x-request-id"] = rid
        return response
    except Exception:
        logger.exception("request error method=%s path=%s", request.method, request.url.path)
        raise
    finally:
        clear_request_id()


@app.exception_handler(SkillForgeError)
async def skillforge_exception_handler(request: Request, exc: SkillForgeError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(
            "skillforge error status=%s error=%s method=%s path=%s detail=%s",
            status_code, type(exc).__name__, request.method, request.url.path, exc.message,
        )
    else:
        logger.warning(
            "skillforge error status=%s error=%s method=%s path=%s detail=%s",
            status_code, type(exc).__name__, request.method, request.url.path, exc.message,
        )
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "error": type(exc).__name__,
            "retryable": exc.retryable,
            "details": exc.details,
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.exception("http error status=%s method=%s path=%s detail=\n%s", exc.status_code, request.method, request.url.path, exc.detail)
    else:
        logger.warning("http error status=%s method=%s path=%s detail=\n%s", exc.status_code, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("validation error method=%s path=%s errors=\n%s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Never leak internal exception details to clients.
    logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


@app.get("/")
def read_root():
    return {"message": "SkillForge is Healthy"}

app.include_router(plan_routes, prefix="/skillforge")

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
