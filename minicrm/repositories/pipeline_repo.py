"""
Pipeline stage and stage required field repositories.
"""
import uuid
from typing import List

from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.models.pipeline import PipelineStage, StageRequiredField
from minicrm.repositories.base import BaseRepository


class PipelineStageRepository(BaseRepository[PipelineStage]):
    """Repository for PipelineStage operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(PipelineStage, session)

    async def get_ordered(self, workspace_id: uuid.UUID) -> List[PipelineStage]:
        """Stages of a workspace in pipeline order."""
        return await self.list(workspace_id, order_by="sort_order")

    async def next_sort_order(self, workspace_id: uuid.UUID) -> int:
        query = select(func.max(PipelineStage.sort_order)).where(
            PipelineStage.workspace_id == workspace_id
        )
        result = await self.session.exec(query)
        current = result.one()
        return 0 if current is None else current + 1

    async def bulk_create(self, workspace_id: uuid.UUID, names: List[str]) -> List[PipelineStage]:
        """Create stages in the given order."""
        stages = [
            PipelineStage(workspace_id=workspace_id, name=name, sort_order=index)
            for index, name in enumerate(names)
        ]
        self.session.add_all(stages)
        await self.session.commit()
        for stage in stages:
            await self.session.refresh(stage)
        return stages


class StageRequiredFieldRepository(BaseRepository[StageRequiredField]):
    """Repository for StageRequiredField operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(StageRequiredField, session)

    async def get_keys(self, stage_id: uuid.UUID) -> List[str]:
        """Required field keys of a stage."""
        query = select(StageRequiredField.field_key).where(
            StageRequiredField.stage_id == stage_id
        ).order_by(StageRequiredField.created_at)
        result = await self.session.exec(query)
        return list(result.all())

    async def replace_keys(
        self,
        workspace_id: uuid.UUID,
        stage_id: uuid.UUID,
        field_keys: List[str]
    ) -> List[StageRequiredField]:
        """Replace the required field set of a stage."""
        existing = await self.session.exec(
            select(StageRequiredField).where(StageRequiredField.stage_id == stage_id)
        )
        for row in existing.all():
            await self.session.delete(row)
        await self.session.flush()

        rows = [
            StageRequiredField(workspace_id=workspace_id, stage_id=stage_id, field_key=key)
            for key in dict.fromkeys(field_keys)
        ]
        self.session.add_all(rows)
        await self.session.commit()
        for row in rows:
            await self.session.refresh(row)
        return rows

    async def delete_for_stage(self, stage_id: uuid.UUID) -> None:
        existing = await self.session.exec(
            select(StageRequiredField).where(StageRequiredField.stage_id == stage_id)
        )
        for row in existing.all():
            await self.session.delete(row)
        await self.session.commit()

    async def delete_for_key(self, workspace_id: uuid.UUID, field_key: str) -> None:
        """Drop a field from every stage of a workspace."""
        existing = await self.session.exec(
            select(StageRequiredField).where(
                StageRequiredField.workspace_id == workspace_id,
                StageRequiredField.field_key == field_key
            )
        )
        for row in existing.all():
            await self.session.delete(row)
        await self.session.commit()
