"""Project persistence over SQLAlchemy."""

from collections.abc import Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from storybeat.db.models import ProjectRecord
from storybeat.domain.models import Project
from storybeat.logging import get_logger

logger = get_logger(__name__)


class ProjectRepository:
    """Stores whole-project snapshots, one row per project."""

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        if session_factory is None:
            from storybeat.db.session import SessionLocal

            session_factory = SessionLocal
        self.session_factory = session_factory

    def save(self, project: Project) -> None:
        """Insert or overwrite the snapshot of a project."""
        snapshot = project.to_dict()
        with self.session_factory() as session:
            record = session.get(ProjectRecord, str(project.id))
            if record is None:
                record = ProjectRecord(id=str(project.id), created_at=project.created_at)
                session.add(record)
            record.title = project.title
            record.status = str(project.status)
            record.topic = project.config.topic
            record.snapshot = snapshot
            record.updated_at = project.updated_at
            session.commit()

        logger.debug("project_saved", project_id=str(project.id), status=str(project.status))

    def get(self, project_id: UUID | str) -> Project | None:
        with self.session_factory() as session:
            record = session.get(ProjectRecord, str(project_id))
            if record is None:
                return None
            return Project.from_dict(record.snapshot)

    def list(self, limit: int = 50) -> list[Project]:
        """Most recently updated projects first."""
        with self.session_factory() as session:
            records = session.scalars(
                select(ProjectRecord).order_by(ProjectRecord.updated_at.desc()).limit(limit)
            ).all()
            return [Project.from_dict(r.snapshot) for r in records]

    def delete(self, project_id: UUID | str) -> bool:
        with self.session_factory() as session:
            record = session.get(ProjectRecord, str(project_id))
            if record is None:
                return False
            session.delete(record)
            session.commit()

        logger.info("project_deleted", project_id=str(project_id))
        return True
