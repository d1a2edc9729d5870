"""Provider singletons picked from configuration.

With DATABASE_URL set, PostgreSQL repos serve outlines, progress and
roles; without it the in-memory repos below do (dev and tests seed
them directly).  Outlines always go through the read-through cache.
"""

from __future__ import annotations

from courseflow.core.config import SETTINGS
from courseflow.db.engine import async_session_factory
from courseflow.repos.cached_course_repo import CachedCourseRepo
from courseflow.repos.course_repo import CourseRepo, InMemoryCourseRepo
from courseflow.repos.pg_course_repo import PgCourseRepo
from courseflow.repos.pg_progress_repo import PgProgressRepo
from courseflow.repos.pg_user_repo import PgUserRepo
from courseflow.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from courseflow.repos.user_repo import InMemoryUserRepo, UserRepo
from courseflow.services.cache import cache_service

memory_courses = InMemoryCourseRepo()
memory_progress = InMemoryProgressRepo()
memory_users = InMemoryUserRepo()

if async_session_factory is not None:
    _course_source: CourseRepo = PgCourseRepo(async_session_factory)
    progress_repo: ProgressRepo = PgProgressRepo(async_session_factory)
    user_repo: UserRepo = PgUserRepo(async_session_factory)
else:
    _course_source = memory_courses
    progress_repo = memory_progress
    user_repo = memory_users

course_repo = CachedCourseRepo(
    _course_source, cache_service, ttl_seconds=SETTINGS.outline_cache_ttl
)
