"""FastAPI providers for the repositories.

Learn: Routes and services depend on these functions, never on the SQL
classes directly. Tests swap in in-memory repositories through
app.dependency_overrides[get_user_repository] and friends.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eduflow.db.engine import get_db
from eduflow.repositories.courses import SqlCourseRepository
from eduflow.repositories.institutes import SqlInstituteRepository
from eduflow.repositories.users import SqlUserRepository


def get_user_repository(db: AsyncSession = Depends(get_db)) -> SqlUserRepository:
    return SqlUserRepository(db)


def get_institute_repository(
    db: AsyncSession = Depends(get_db),
) -> SqlInstituteRepository:
    return SqlInstituteRepository(db)


def get_course_repository(db: AsyncSession = Depends(get_db)) -> SqlCourseRepository:
    return SqlCourseRepository(db)
