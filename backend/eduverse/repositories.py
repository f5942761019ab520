"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (admins,
pathways). Repositories return SQLModel objects and perform
commits/refreshes where appropriate. They do not validate paging
arguments; callers clamp them first.
"""

from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func
from . import models


class AdminRepository:
    """CRUD operations for `Admin` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, admin: models.Admin) -> models.Admin:
        """Persist a new admin and return the managed instance."""
        self.session.add(admin)
        self.session.commit()
        self.session.refresh(admin)
        return admin

    def get(self, admin_id: int) -> Optional[models.Admin]:
        """Get an `Admin` by primary key."""
        return self.session.get(models.Admin, admin_id)

    def get_by_username(self, username: str) -> Optional[models.Admin]:
        """Return an `Admin` by username or `None` if not found."""
        stmt = select(models.Admin).where(models.Admin.username == username)
        return self.session.exec(stmt).first()

    def exists_by_username(self, username: str, exclude_id: Optional[int] = None) -> bool:
        """Return True if another admin already uses `username`."""
        stmt = select(models.Admin.id).where(models.Admin.username == username)
        if exclude_id is not None:
            stmt = stmt.where(models.Admin.id != exclude_id)
        return self.session.exec(stmt).first() is not None

    def update(self, admin: models.Admin) -> models.Admin:
        self.session.add(admin)
        self.session.commit()
        self.session.refresh(admin)
        return admin

    def delete(self, admin: models.Admin) -> None:
        self.session.delete(admin)
        self.session.commit()

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(models.Admin)).one()

    def paginate(self, limit: int, offset: int) -> List[models.Admin]:
        """Return one page of admins ordered ascending by id.

        An offset past the last row yields an empty list.
        """
        stmt = select(models.Admin).order_by(models.Admin.id).offset(offset).limit(limit)
        return self.session.exec(stmt).all()


class PathwayRepository:
    """CRUD operations for `Pathway` records."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, pathway: models.Pathway) -> models.Pathway:
        """Persist a new pathway and return the managed instance."""
        self.session.add(pathway)
        self.session.commit()
        self.session.refresh(pathway)
        return pathway

    def get(self, pathway_id: int) -> Optional[models.Pathway]:
        """Fetch a pathway by id."""
        return self.session.get(models.Pathway, pathway_id)

    def get_by_name(self, name: str) -> Optional[models.Pathway]:
        stmt = select(models.Pathway).where(models.Pathway.name == name)
        return self.session.exec(stmt).first()

    def exists_by_name(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """Return True if a pathway other than `exclude_id` is called `name`."""
        stmt = select(models.Pathway.id).where(models.Pathway.name == name)
        if exclude_id is not None:
            stmt = stmt.where(models.Pathway.id != exclude_id)
        return self.session.exec(stmt).first() is not None

    def update(self, pathway: models.Pathway) -> models.Pathway:
        self.session.add(pathway)
        self.session.commit()
        self.session.refresh(pathway)
        return pathway

    def delete(self, pathway: models.Pathway) -> None:
        self.session.delete(pathway)
        self.session.commit()

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(models.Pathway)).one()

    def paginate(self, limit: int, offset: int) -> List[models.Pathway]:
        """Return one page of pathways ordered ascending by id."""
        stmt = select(models.Pathway).order_by(models.Pathway.id).offset(offset).limit(limit)
        return self.session.exec(stmt).all()
