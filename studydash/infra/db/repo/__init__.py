"""SQLite repositories. Each takes a Database and opens one connection per call."""

from studydash.infra.db.repo.courses_sqlite import CoursesSqliteRepo
from studydash.infra.db.repo.sync_logs_sqlite import SyncLogsSqliteRepo
from studydash.infra.db.repo.tasks_sqlite import TasksSqliteRepo
from studydash.infra.db.repo.users_sqlite import UsersSqliteRepo

__all__ = [
    "CoursesSqliteRepo",
    "SyncLogsSqliteRepo",
    "TasksSqliteRepo",
    "UsersSqliteRepo",
]
