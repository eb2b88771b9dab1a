"""Course repository.

Learn: The repository never decides tenancy itself. It takes whatever
filter the service built with scope_filter() and runs it verbatim, so a
service that forgets to scope is caught by validate_ownership() instead
of silently leaking rows.
"""

from typing import Any, Mapping, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eduflow.db.models import Course
from eduflow.repositories.base import coerce_filters, to_uuid


class CourseRepository(Protocol):
    async def create(self, institute_id: str, **fields: Any) -> Any: ...

    async def find_one(self, filters: Mapping[str, Any]) -> Optional[Any]: ...

    async def list(self, filters: Mapping[str, Any]) -> list[Any]: ...

    async def update(self, course: Any, fields: Mapping[str, Any]) -> Any: ...

    async def delete(self, course: Any) -> None: ...


class SqlCourseRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, institute_id: str, **fields: Any) -> Course:
        course = Course(institute_id=to_uuid(institute_id), **fields)
        self.db.add(course)
        await self.db.commit()
        await self.db.refresh(course)
        return course

    async def find_one(self, filters: Mapping[str, Any]) -> Optional[Course]:
        result = await self.db.execute(
            select(Course).filter_by(**coerce_filters(filters)).limit(1)
        )
        return result.scalars().first()

    async def list(self, filters: Mapping[str, Any]) -> list[Course]:
        result = await self.db.execute(
            select(Course)
            .filter_by(**coerce_filters(filters))
            .order_by(Course.created_at.desc())
        )
        return list(result.scalars().all())

    async def update(self, course: Course, fields: Mapping[str, Any]) -> Course:
        for key, value in fields.items():
            setattr(course, key, value)
        await self.db.commit()
        await self.db.refresh(course)
        return course

    async def delete(self, course: Course) -> None:
        await self.db.delete(course)
        await self.db.commit()
