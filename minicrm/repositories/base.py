"""
Base repository with generic CRUD operations.
"""
import uuid
from typing import TypeVar, Generic, Type, Optional, List

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.core.pagination import paginate_query
from minicrm.models.timestamps import utc_now

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with CRUD operations.
    Inherit and specify the model class.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _scoped(self, workspace_id: Optional[uuid.UUID], filters: Optional[dict]):
        query = select(self.model)

        # Filter by workspace if model has workspace_id
        if workspace_id and hasattr(self.model, 'workspace_id'):
            query = query.where(self.model.workspace_id == workspace_id)

        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)
        return query

    def _ordered(self, query, order_by: str, order_desc: bool):
        if hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)
        return query

    async def create(self, obj_in: dict) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID."""
        return await self.session.get(self.model, id)

    async def get_in_workspace(self, id: uuid.UUID, workspace_id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID only if it belongs to the workspace."""
        db_obj = await self.get(id)
        if db_obj is None or getattr(db_obj, "workspace_id", None) != workspace_id:
            return None
        return db_obj

    async def list(
        self,
        workspace_id: Optional[uuid.UUID] = None,
        filters: Optional[dict] = None,
        order_by: str = "created_at",
        order_desc: bool = False
    ) -> List[ModelType]:
        """List all records with optional filters."""
        query = self._ordered(self._scoped(workspace_id, filters), order_by, order_desc)
        result = await self.session.exec(query)
        return list(result.all())

    async def list_paginated(
        self,
        workspace_id: Optional[uuid.UUID] = None,
        filters: Optional[dict] = None,
        page: int = 1,
        limit: int = 20,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> dict:
        """List records with pagination."""
        query = self._ordered(self._scoped(workspace_id, filters), order_by, order_desc)
        return await paginate_query(self.session, query, page, limit)

    async def update(self, id: uuid.UUID, obj_in: dict) -> Optional[ModelType]:
        """
        Update a record.
        Keys present in obj_in are written as given, None included.
        """
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        # Update timestamp if exists
        if hasattr(db_obj, 'updated_at'):
            db_obj.updated_at = utc_now()

        self.session.add(db_obj)
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def delete(self, id: uuid.UUID) -> bool:
        """Delete a record."""
        db_obj = await self.get(id)
        if not db_obj:
            return False

        await self.session.delete(db_obj)
        await self.session.commit()
        return True
