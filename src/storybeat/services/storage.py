"""Local media storage for narration audio."""

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID, uuid4

from storybeat.config import settings
from storybeat.logging import get_logger

logger = get_logger(__name__)

MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
}


@dataclass
class StoredMedia:
    """Metadata for a stored media file."""

    id: UUID
    file_path: Path
    file_size_bytes: int
    mime_type: str
    checksum: str
    created_at: datetime

    @property
    def url(self) -> str:
        return f"file://{self.file_path.absolute()}"


class StorageService:
    """Stores generated media on the local filesystem.

    Files are laid out per project: ``<base>/audio/<project_id>/<beat_id>_<n>.mp3``.
    """

    def __init__(self, base_path: Path | str | None = None, create_dirs: bool = True) -> None:
        """Initialize storage service.

        Args:
            base_path: Base directory for local storage. Defaults to the configured storage_path
            create_dirs: Whether to create directories if they don't exist
        """
        self.base_path = Path(base_path or settings.storage_path)

        if create_dirs:
            (self.base_path / "audio").mkdir(parents=True, exist_ok=True)

    def _compute_checksum(self, data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()

    def store_audio(
        self,
        data: bytes,
        project_id: UUID,
        beat_id: UUID,
        output_format: str = "mp3",
    ) -> StoredMedia:
        """Write narration audio for a beat.

        Each call writes a new file, so regenerated narration never
        overwrites audio still referenced elsewhere.
        """
        directory = self.base_path / "audio" / str(project_id)
        directory.mkdir(parents=True, exist_ok=True)

        media_id = uuid4()
        file_path = directory / f"{beat_id}_{media_id.hex[:8]}.{output_format}"
        file_path.write_bytes(data)

        stored = StoredMedia(
            id=media_id,
            file_path=file_path,
            file_size_bytes=len(data),
            mime_type=MIME_TYPES.get(output_format, "application/octet-stream"),
            checksum=self._compute_checksum(data),
            created_at=datetime.now(UTC),
        )

        logger.debug(
            "storage_audio_written",
            project_id=str(project_id),
            beat_id=str(beat_id),
            file_path=str(file_path),
            file_size=stored.file_size_bytes,
        )
        return stored

    def delete_project_media(self, project_id: UUID) -> int:
        """Remove all stored audio of a project, returning the number of files removed."""
        directory = self.base_path / "audio" / str(project_id)
        if not directory.exists():
            return 0

        removed = 0
        for path in directory.iterdir():
            try:
                path.unlink(missing_ok=True)
                removed += 1
            except OSError as e:
                logger.error("storage_delete_failed", path=str(path), error=str(e))
        if not any(directory.iterdir()):
            directory.rmdir()
        return removed
