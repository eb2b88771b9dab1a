"""User repository — credential lookups and institute membership."""

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eduflow.db.models import User
from eduflow.repositories.base import coerce_filters, to_uuid


class UserRepository(Protocol):
    async def get(self, user_id: str) -> Optional[Any]: ...

    async def get_by_email(self, email: str) -> Optional[Any]: ...

    async def create(
        self,
        email: str,
        name: str,
        password_hash: str,
        role: str = "student",
        institute_id: Optional[str] = None,
    ) -> Any: ...

    async def update_last_login(self, user_id: str, when: datetime) -> None: ...

    async def assign_institute(
        self, user_id: str, institute_id: str, role: str
    ) -> Optional[Any]: ...

    async def list(self, filters: Mapping[str, Any]) -> list[Any]: ...


class SqlUserRepository:
    """UserRepository backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Optional[User]:
        uid = to_uuid(user_id)
        if uid is None:
            return None
        return await self.db.get(User, uid)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def create(
        self,
        email: str,
        name: str,
        password_hash: str,
        role: str = "student",
        institute_id: Optional[str] = None,
    ) -> User:
        user = User(
            email=email,
            name=name,
            password_hash=password_hash,
            role=role,
            institute_id=to_uuid(institute_id),
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def update_last_login(self, user_id: str, when: datetime) -> None:
        await self.db.execute(
            update(User).where(User.id == to_uuid(user_id)).values(last_login_at=when)
        )
        await self.db.commit()

    async def assign_institute(
        self, user_id: str, institute_id: str, role: str
    ) -> Optional[User]:
        """Bind an unaffiliated user. Returns None if the user is missing
        or already belongs to an institute."""
        uid = to_uuid(user_id)
        result = await self.db.execute(
            update(User)
            .where(User.id == uid, User.institute_id.is_(None))
            .values(institute_id=to_uuid(institute_id), role=role)
        )
        await self.db.commit()
        if result.rowcount == 0:
            return None
        return await self.db.get(User, uid, populate_existing=True)

    async def list(self, filters: Mapping[str, Any]) -> list[User]:
        result = await self.db.execute(
            select(User).filter_by(**coerce_filters(filters)).order_by(User.name)
        )
        return list(result.scalars().all())
