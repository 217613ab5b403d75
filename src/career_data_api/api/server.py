import logging
import secrets
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import APIRouter, Body, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field

from career_data_api import __version__
from career_data_api.core.agents.llm_client import LLMClient
from career_data_api.core.generation import generate_document, revise_document
from career_data_api.db.kinds import ENTITY_KINDS, EntityKind
from career_data_api.db.repository import CareerStore, get_career_store
from career_data_api.db.session import dispose_engine, init_db
from career_data_api.errors import (
    AuthenticationError,
    CareerDataError,
    ErrorKind,
    InternalError,
    NotFoundError,
    ValidationError,
    render_error,
)
from career_data_api.schemas import CamelModel, DeleteResult
from career_data_api.settings import get_settings
from career_data_api.utils.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

STATUS_CODES = {
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AI_SERVICE: 503,
    ErrorKind.DATABASE: 503,
    ErrorKind.INTERNAL: 500,
}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("API Server starting: initializing career DB...")
    init_db()
    logger.info("API Server ready.")
    yield
    dispose_engine()
    logger.info("API Server stopped.")


# -----------------------------
# FastAPI
# -----------------------------
app = FastAPI(title="Career Data API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"]
    if settings.cors_origins.strip() == "*"
    else [o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class GenerateRequest(CamelModel):
    job_info: Dict[str, Any] = Field(default_factory=dict)
    additional_context: Optional[str] = None
    question: Optional[str] = None
    current_answer: Optional[str] = None


class ReviseRequest(CamelModel):
    job_info: Dict[str, Any] = Field(default_factory=dict)
    feedback: Optional[str] = None
    question: Optional[str] = None
    current_answer: Optional[str] = None


# -----------------------------
# Error rendering
# -----------------------------
def _error_response(exc: BaseException, request: Request) -> JSONResponse:
    payload = render_error(exc, {"method": request.method, "path": request.url.path})
    return JSONResponse(status_code=STATUS_CODES[payload.kind], content={"error": payload.to_dict()})


@app.exception_handler(CareerDataError)
async def _career_error_handler(request: Request, exc: CareerDataError) -> JSONResponse:
    return _error_response(exc, request)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            fields.append(".".join(loc))
    error = ValidationError(f"Invalid request fields: {', '.join(fields) or 'body'}", fields)
    return _error_response(error, request)


@app.middleware("http")
async def _unhandled_error_middleware(request: Request, call_next):
    # Catches before ServerErrorMiddleware, which would log the traceback again.
    try:
        return await call_next(request)
    except Exception as exc:
        return _error_response(exc, request)


# -----------------------------
# Dependencies
# -----------------------------
def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    """Check the ``x-api-key`` header against the configured access key."""
    expected = get_settings().api_access_key
    if not expected:
        raise InternalError("API_ACCESS_KEY environment variable is not set")
    if not x_api_key:
        raise AuthenticationError("API key is required")
    if not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        raise AuthenticationError("Invalid API key")


def get_store() -> CareerStore:
    return get_career_store()


def get_llm() -> Optional[LLMClient]:
    """Model client override; None resolves the configured provider on use."""
    return None


router = APIRouter(dependencies=[Depends(require_api_key)])


# -----------------------------
# Routes
# -----------------------------
@app.get("/health")
def health():
    """Return API health metadata."""
    return {"status": "ok", "version": __version__, "llm_provider": settings.llm_provider}


@router.get("/profile")
def get_profile(store: CareerStore = Depends(get_store)):
    return store.profile.get()


@router.put("/profile")
def upsert_profile(payload: Dict[str, Any] = Body(...), store: CareerStore = Depends(get_store)):
    return store.profile.upsert(payload)


def _register_collection_routes(kind: EntityKind) -> None:
    path = f"/{kind.collection}"

    def list_records(request: Request, store: CareerStore = Depends(get_store)):
        return store.repository(kind.collection).list(dict(request.query_params))

    def get_record(entity_id: str, store: CareerStore = Depends(get_store)):
        record = store.repository(kind.collection).get_by_id(entity_id)
        if record is None:
            raise NotFoundError(kind.entity_name, entity_id)
        return record

    def create_record(payload: Dict[str, Any] = Body(...), store: CareerStore = Depends(get_store)):
        return store.repository(kind.collection).create(payload)

    def update_record(
        entity_id: str,
        payload: Dict[str, Any] = Body(...),
        store: CareerStore = Depends(get_store),
    ):
        record = store.repository(kind.collection).update(entity_id, payload)
        if record is None:
            raise NotFoundError(kind.entity_name, entity_id)
        return record

    def delete_record(entity_id: str, store: CareerStore = Depends(get_store)):
        deleted = store.repository(kind.collection).delete(entity_id)
        return DeleteResult(success=deleted, id=entity_id).model_dump()

    router.add_api_route(path, list_records, methods=["GET"], name=f"list_{kind.collection}")
    router.add_api_route(path, create_record, methods=["POST"], name=f"create_{kind.collection}")
    item = f"{path}/{{entity_id}}"
    router.add_api_route(item, get_record, methods=["GET"], name=f"get_{kind.collection}")
    router.add_api_route(item, update_record, methods=["PATCH"], name=f"update_{kind.collection}")
    router.add_api_route(item, delete_record, methods=["DELETE"], name=f"delete_{kind.collection}")


for _kind in ENTITY_KINDS.values():
    _register_collection_routes(_kind)


@router.post("/generate/{kind}")
def generate(
    kind: str,
    req: GenerateRequest,
    store: CareerStore = Depends(get_store),
    llm: Optional[LLMClient] = Depends(get_llm),
):
    result = generate_document(
        kind,
        req.job_info,
        req.additional_context,
        question=req.question,
        current_answer=req.current_answer,
        store=store,
        llm=llm,
    )
    return result.to_dict()


@router.post("/revise/{kind}")
def revise(
    kind: str,
    req: ReviseRequest,
    store: CareerStore = Depends(get_store),
    llm: Optional[LLMClient] = Depends(get_llm),
):
    result = revise_document(
        kind,
        req.job_info,
        req.feedback,
        question=req.question,
        current_answer=req.current_answer,
        store=store,
        llm=llm,
    )
    return result.to_dict()


app.include_router(router)


def main() -> None:
    """Run the API server entrypoint."""
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
