"""
Lead repository with search, plus custom field and custom value repositories.
"""
import uuid
from typing import Optional, List, Dict

from sqlmodel import select, or_, func
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.dialects import postgresql, sqlite

from minicrm.models.lead import Lead, LeadCustomField, LeadCustomValue
from minicrm.repositories.base import BaseRepository
from minicrm.models.timestamps import utc_now
from minicrm.schemas.lead import LeadFilter
from minicrm.core.pagination import paginate_query, create_paginated_response


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)

    async def search(
        self,
        workspace_id: uuid.UUID,
        filters: Optional[LeadFilter] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """Search leads with filtering."""
        query = select(Lead).where(Lead.workspace_id == workspace_id)

        if filters:
            if filters.stage_id:
                query = query.where(Lead.stage_id == filters.stage_id)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Lead.name.ilike(search_term),
                        Lead.email.ilike(search_term),
                        Lead.company.ilike(search_term),
                        Lead.job_title.ilike(search_term),
                        Lead.source.ilike(search_term),
                        Lead.notes.ilike(search_term)
                    )
                )

        query = query.order_by(Lead.created_at.desc())

        if filters and filters.campaign_id:
            # campaign_ids is a JSON list; filter in Python to stay dialect neutral
            result = await self.session.exec(query)
            campaign_id = str(filters.campaign_id)
            matching = [lead for lead in result.all() if campaign_id in (lead.campaign_ids or [])]
            offset = (page - 1) * limit
            return create_paginated_response(matching[offset:offset + limit], len(matching), page, limit)

        return await paginate_query(self.session, query, page, limit)

    async def count_by_stage(self, workspace_id: uuid.UUID) -> Dict[uuid.UUID, int]:
        """Number of leads per stage id."""
        query = select(Lead.stage_id, func.count()).where(
            Lead.workspace_id == workspace_id
        ).group_by(Lead.stage_id)
        result = await self.session.exec(query)
        return {stage_id: count for stage_id, count in result.all()}

    async def reassign_stage(self, old_stage_id: uuid.UUID, new_stage_id: uuid.UUID) -> None:
        result = await self.session.exec(select(Lead).where(Lead.stage_id == old_stage_id))
        for lead in result.all():
            lead.stage_id = new_stage_id
            lead.updated_at = utc_now()
            self.session.add(lead)
        await self.session.commit()


class LeadCustomFieldRepository(BaseRepository[LeadCustomField]):
    """Repository for LeadCustomField operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadCustomField, session)

    async def get_for_workspace(self, workspace_id: uuid.UUID) -> List[LeadCustomField]:
        """Custom field definitions in creation order."""
        return await self.list(workspace_id, order_by="created_at")


class LeadCustomValueRepository(BaseRepository[LeadCustomValue]):
    """Repository for LeadCustomValue operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LeadCustomValue, session)

    async def get_for_lead(self, lead_id: uuid.UUID) -> List[LeadCustomValue]:
        # populate_existing: rows may have been rewritten by upsert_many
        query = select(LeadCustomValue).where(
            LeadCustomValue.lead_id == lead_id
        ).execution_options(populate_existing=True)
        result = await self.session.exec(query)
        return list(result.all())

    async def upsert_many(self, lead_id: uuid.UUID, values: Dict[uuid.UUID, Optional[str]]) -> None:
        """Insert or update values, one row per (lead_id, field_id)."""
        if not values:
            return

        dialect = self.session.bind.dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert

        for field_id, value in values.items():
            stmt = insert(LeadCustomValue).values(
                id=uuid.uuid4(),
                lead_id=lead_id,
                field_id=field_id,
                value=value,
                created_at=utc_now()
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["lead_id", "field_id"],
                set_={"value": stmt.excluded.value}
            )
            await self.session.execute(stmt)
        await self.session.commit()

    async def delete_for_field(self, field_id: uuid.UUID) -> None:
        result = await self.session.exec(
            select(LeadCustomValue).where(LeadCustomValue.field_id == field_id)
        )
        for row in result.all():
            await self.session.delete(row)
        await self.session.commit()

    async def delete_for_lead(self, lead_id: uuid.UUID) -> None:
        for row in await self.get_for_lead(lead_id):
            await self.session.delete(row)
        await self.session.commit()
