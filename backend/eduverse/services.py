"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories.
Services are intentionally thin: they enforce uniqueness and existence
rules, persist aggregates via repositories and report the outcome as a
`ServiceResult`. Expected rejections are returned, never raised; only
genuinely unexpected failures escape as exceptions.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Callable, Optional, Tuple
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session
import jwt
from . import models, repositories
from .config import settings
from .errors import ErrorKind, ServiceResult
from .schemas import AdminIn, PathwayIn

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

logger = logging.getLogger("eduverse.services")


def clamp_page(limit: Optional[int], offset: int) -> Tuple[int, int]:
    """Normalise paging arguments.

    A missing `limit` falls back to `PAGE_DEFAULT_LIMIT` and anything
    above `PAGE_MAX_LIMIT` is clamped down to it. Non-positive limits and
    negative offsets raise ValueError.
    """
    if limit is None:
        limit = settings.PAGE_DEFAULT_LIMIT
    if limit < 1:
        raise ValueError("limit must be >= 1")
    if offset < 0:
        raise ValueError("offset must be >= 0")
    return min(limit, settings.PAGE_MAX_LIMIT), offset


def _persist(session: Session, write: Callable, *args) -> ServiceResult:
    """Run a repository write and fold database failures into a result."""
    try:
        return ServiceResult.success(write(*args))
    except IntegrityError as e:
        session.rollback()
        return ServiceResult.failure(ErrorKind.INTEGRITY_VIOLATION, str(e.orig))
    except SQLAlchemyError as e:
        session.rollback()
        return ServiceResult.failure(ErrorKind.UNKNOWN, str(e))


class PathwayService:
    """Create, update, delete and list pathways."""
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.PathwayRepository(session)

    def create(self, dto: PathwayIn) -> ServiceResult:
        """Create a pathway unless its name is already taken."""
        if self.repo.exists_by_name(dto.name):
            return ServiceResult.failure(ErrorKind.DUPLICATE_KEY, f"Pathway with name '{dto.name}' already exists")
        pathway = models.Pathway(name=dto.name, description=dto.description)
        return _persist(self.session, self.repo.create, pathway)

    def update(self, dto: PathwayIn, pathway_id: int) -> ServiceResult:
        """Replace the fields of pathway `pathway_id`.

        Renaming onto the name of another pathway is rejected as a
        duplicate; keeping the current name is allowed.
        """
        pathway = self.repo.get(pathway_id)
        if pathway is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Pathway {pathway_id} does not exist")
        if self.repo.exists_by_name(dto.name, exclude_id=pathway_id):
            return ServiceResult.failure(ErrorKind.DUPLICATE_KEY, f"Pathway with name '{dto.name}' already exists")
        pathway.name = dto.name
        pathway.description = dto.description
        pathway.updated_at = datetime.now(timezone.utc)
        return _persist(self.session, self.repo.update, pathway)

    def delete(self, pathway_id: int) -> ServiceResult:
        pathway = self.repo.get(pathway_id)
        if pathway is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Pathway {pathway_id} does not exist")
        result = _persist(self.session, self.repo.delete, pathway)
        if result.ok:
            logger.info("pathway deleted id=%s", pathway_id)
        return result

    def get(self, pathway_id: int) -> ServiceResult:
        pathway = self.repo.get(pathway_id)
        if pathway is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Pathway {pathway_id} does not exist")
        return ServiceResult.success(pathway)

    def list_page(self, limit: Optional[int], offset: int) -> ServiceResult:
        """Return `{items, limit, offset, total}` for one page of pathways."""
        limit, offset = clamp_page(limit, offset)
        return ServiceResult.success({
            'items': self.repo.paginate(limit, offset),
            'limit': limit,
            'offset': offset,
            'total': self.repo.count(),
        })


class AdminService:
    """Admin account management and authentication."""
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.AdminRepository(session)

    def create(self, dto: AdminIn) -> ServiceResult:
        """Create an admin with a hashed password.

        Returns a DUPLICATE_KEY result when the username is taken; a
        clashing email surfaces as an integrity violation from the
        database constraint.
        """
        if self.repo.exists_by_username(dto.username):
            return ServiceResult.failure(ErrorKind.DUPLICATE_KEY, f"Admin with username '{dto.username}' already exists")
        admin = models.Admin(username=dto.username, email=dto.email, password_hash=PWD_CTX.hash(dto.password))
        return _persist(self.session, self.repo.create, admin)

    def update(self, dto: AdminIn, admin_id: int) -> ServiceResult:
        admin = self.repo.get(admin_id)
        if admin is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Admin {admin_id} does not exist")
        if self.repo.exists_by_username(dto.username, exclude_id=admin_id):
            return ServiceResult.failure(ErrorKind.DUPLICATE_KEY, f"Admin with username '{dto.username}' already exists")
        admin.username = dto.username
        admin.email = dto.email
        admin.password_hash = PWD_CTX.hash(dto.password)
        return _persist(self.session, self.repo.update, admin)

    def delete(self, admin_id: int) -> ServiceResult:
        """Delete an admin; the last remaining admin cannot be removed."""
        admin = self.repo.get(admin_id)
        if admin is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Admin {admin_id} does not exist")
        if self.repo.count() <= 1:
            return ServiceResult.failure(ErrorKind.INTEGRITY_VIOLATION, "Cannot delete the last remaining admin")
        return _persist(self.session, self.repo.delete, admin)

    def get(self, admin_id: int) -> ServiceResult:
        admin = self.repo.get(admin_id)
        if admin is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Admin {admin_id} does not exist")
        return ServiceResult.success(admin)

    def list_page(self, limit: Optional[int], offset: int) -> ServiceResult:
        """Return `{items, limit, offset, total}` for one page of admins."""
        limit, offset = clamp_page(limit, offset)
        return ServiceResult.success({
            'items': self.repo.paginate(limit, offset),
            'limit': limit,
            'offset': offset,
            'total': self.repo.count(),
        })

    def authenticate(self, username: str, password: str) -> Optional[str]:
        """Verify credentials and return a signed JWT token on success.

        Returns `None` if authentication fails.
        """
        admin = self.repo.get_by_username(username)
        if not admin:
            return None
        if not PWD_CTX.verify(password, admin.password_hash):
            return None
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS)
        payload = {"admin_id": admin.id, "username": admin.username, "exp": int(expire.timestamp())}
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
