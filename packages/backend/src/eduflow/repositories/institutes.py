"""Institute repository."""

from typing import Any, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eduflow.db.models import Institute
from eduflow.repositories.base import to_uuid


class InstituteRepository(Protocol):
    async def create(self, name: str, type: str, owner_id: str) -> Any: ...

    async def get(self, institute_id: str) -> Optional[Any]: ...

    async def list(self) -> list[Any]: ...

    async def delete(self, institute: Any) -> None: ...


class SqlInstituteRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, name: str, type: str, owner_id: str) -> Institute:
        institute = Institute(name=name, type=type, owner_id=to_uuid(owner_id))
        self.db.add(institute)
        await self.db.commit()
        await self.db.refresh(institute)
        return institute

    async def get(self, institute_id: str) -> Optional[Institute]:
        iid = to_uuid(institute_id)
        if iid is None:
            return None
        return await self.db.get(Institute, iid)

    async def list(self) -> list[Institute]:
        result = await self.db.execute(select(Institute).order_by(Institute.name))
        return list(result.scalars().all())

    async def delete(self, institute: Institute) -> None:
        await self.db.delete(institute)
        await self.db.commit()
