"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the Eduverse backend.
Controllers are intentionally thin: they accept validated requests,
delegate to services, and let `StatusTranslator` turn the outcome into a
response envelope.

Endpoints implemented:
- GET /health
- POST /api/auth/login
- GET /api/pathway/
- GET /api/pathway/{pathwayId}
- POST /api/auth/pathway/pathway/
- PUT /api/auth/pathway/{pathwayId}
- DELETE /api/auth/pathway/{pathwayId}
- GET /api/auth/admin/
- GET /api/auth/admin/{adminId}
- POST /api/auth/admin/
- PUT /api/auth/admin/{adminId}
- DELETE /api/auth/admin/{adminId}
"""

from fastapi import FastAPI, Depends, HTTPException, Path, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlmodel import Session
from typing import Annotated, Optional
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import services, models
from .auth import get_current_admin
from .responses import StatusTranslator, envelope, get_translator
from .schemas import AdminIn, AdminOut, LoginIn, Page, PathwayIn, PathwayOut, TokenOut
from .config import settings

# Largest value a SQLite INTEGER column or LIMIT/OFFSET accepts.
DB_INT_MAX = 2**63 - 1
RecordId = Annotated[int, Path(ge=1, le=DB_INT_MAX)]

app = FastAPI(title="Eduverse API")
logger = logging.getLogger("eduverse.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    if request.url.path.startswith("/api"):
        logger.info(
            "request_done %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report body/query validation failures as a 400 envelope."""
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return envelope(400, "Validation failed", error="; ".join(problems))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    response = envelope(exc.status_code, str(exc.detail), error=str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def _render_page(view):
    """Return a renderer turning a service page dict into a `Page` of views."""
    def render(page: dict) -> Page:
        return Page[view](
            items=[view.model_validate(item) for item in page['items']],
            limit=page['limit'],
            offset=page['offset'],
            total=page['total'],
        )
    return render


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


@app.post('/api/auth/login')
def login(payload: LoginIn, db: Session = Depends(get_session), translator: StatusTranslator = Depends(get_translator)):
    """Authenticate an admin and return a short-lived JWT token.

    The returned token contains `admin_id` and `username` and is signed
    using the configured JWT secret.
    """
    token = services.AdminService(db).authenticate(payload.username, payload.password)
    if not token:
        raise HTTPException(status_code=401, detail='invalid credentials')
    return translator.success("Login successful", TokenOut(access_token=token))


@app.get('/api/pathway/')
def list_pathways(
    limit: Optional[int] = Query(default=None, ge=1, le=DB_INT_MAX),
    offset: int = Query(default=0, ge=0, le=DB_INT_MAX),
    db: Session = Depends(get_session),
    translator: StatusTranslator = Depends(get_translator),
):
    """List pathways ordered by id, one page at a time.

    `limit` defaults to `PAGE_DEFAULT_LIMIT` and is clamped to
    `PAGE_MAX_LIMIT`.
    """
    svc = services.PathwayService(db)
    return translator.translate(
        lambda: svc.list_page(limit, offset),
        success_message="Pathways retrieved successfully",
        failure_message="Failed to list pathways",
        render=_render_page(PathwayOut),
    )


@app.get('/api/pathway/{pathway_id}')
def get_pathway(pathway_id: RecordId, db: Session = Depends(get_session), translator: StatusTranslator = Depends(get_translator)):
    svc = services.PathwayService(db)
    return translator.translate(
        lambda: svc.get(pathway_id),
        success_message="Pathway retrieved successfully",
        failure_message="Failed to get pathway",
        not_found_message=f"Pathway not found with ID: {pathway_id}",
        render=PathwayOut.model_validate,
    )


@app.post('/api/auth/pathway/pathway/')
def create_pathway(
    payload: PathwayIn,
    db: Session = Depends(get_session),
    admin: models.Admin = Depends(get_current_admin),
    translator: StatusTranslator = Depends(get_translator),
):
    """Create a new pathway; the name must not already exist."""
    svc = services.PathwayService(db)
    return translator.translate(
        lambda: svc.create(payload),
        success_message="Pathway created successfully",
        failure_message="Failed to create pathway",
        data="created",
    )


@app.put('/api/auth/pathway/{pathway_id}')
def update_pathway(
    pathway_id: RecordId,
    payload: PathwayIn,
    db: Session = Depends(get_session),
    admin: models.Admin = Depends(get_current_admin),
    translator: StatusTranslator = Depends(get_translator),
):
    """Update a pathway's information."""
    svc = services.PathwayService(db)
    return translator.translate(
        lambda: svc.update(payload, pathway_id),
        success_message="Pathway updated successfully",
        failure_message="Failed to update pathway",
        not_found_message=f"Pathway not found with ID: {pathway_id}",
        data="updated",
    )


@app.delete('/api/auth/pathway/{pathway_id}')
def delete_pathway(
    pathway_id: RecordId,
    db: Session = Depends(get_session),
    admin: models.Admin = Depends(get_current_admin),
    translator: StatusTranslator = Depends(get_translator),
):
    """Delete a pathway by id. Repeated deletes keep answering 404."""
    svc = services.PathwayService(db)
    return translator.translate(
        lambda: svc.delete(pathway_id),
        success_message="Pathway deleted successfully",
        failure_message="Failed to delete pathway",
        not_found_message=f"Pathway not found with ID: {pathway_id}",
        data="deleted",
    )


@app.get('/api/auth/admin/')
def list_admins(
    limit: Optional[int] = Query(default=None, ge=1, le=DB_INT_MAX),
    offset: int = Query(default=0, ge=0, le=DB_INT_MAX),
    db: Session = Depends(get_session),
    admin: models.Admin = Depends(get_current_admin),
    translator: StatusTranslator = Depends(get_translator),
):
    """Paginated admin listing ordered by id."""
    svc = services.AdminService(db)
    return translator.translate(
        lambda: svc.list_page(limit, offset),
        success_message="Admins retrieved successfully",
        failure_message="Failed to list admins",
        render=_render_page(AdminOut),
    )


@app.get('/api/auth/admin/{admin_id}')
def get_admin(
    admin_id: RecordId,
    db: Session = Depends(get_session),
    admin: models.Admin = Depends(get_current_admin),
    translator: StatusTranslator = Depends(get_translator),
):
    svc = services.AdminService(db)
    return translator.translate(
        lambda: svc.get(admin_id),
        success_message="Admin retrieved successfully",
        failure_message="Failed to get admin",
        not_found_message=f"Admin not found with ID: {admin_id}",
        render=AdminOut.model_validate,
    )


@app.post('/api/auth/admin/')
def create_admin(
    payload: AdminIn,
    db: Session = Depends(get_session),
    admin: models.Admin = Depends(get_current_admin),
    translator: StatusTranslator = Depends(get_translator),
):
    svc = services.AdminService(db)
    return translator.translate(
        lambda: svc.create(payload),
        success_message="Admin created successfully",
        failure_message="Failed to create admin",
        data="created",
    )


@app.put('/api/auth/admin/{admin_id}')
def update_admin(
    admin_id: RecordId,
    payload: AdminIn,
    db: Session = Depends(get_session),
    admin: models.Admin = Depends(get_current_admin),
    translator: StatusTranslator = Depends(get_translator),
):
    svc = services.AdminService(db)
    return translator.translate(
        lambda: svc.update(payload, admin_id),
        success_message="Admin updated successfully",
        failure_message="Failed to update admin",
        not_found_message=f"Admin not found with ID: {admin_id}",
        data="updated",
    )


@app.delete('/api/auth/admin/{admin_id}')
def delete_admin(
    admin_id: RecordId,
    db: Session = Depends(get_session),
    admin: models.Admin = Depends(get_current_admin),
    translator: StatusTranslator = Depends(get_translator),
):
    svc = services.AdminService(db)
    return translator.translate(
        lambda: svc.delete(admin_id),
        success_message="Admin deleted successfully",
        failure_message="Failed to delete admin",
        not_found_message=f"Admin not found with ID: {admin_id}",
        data="deleted",
    )
