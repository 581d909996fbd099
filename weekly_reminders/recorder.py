import base64
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from weekly_reminders import crud
from weekly_reminders.crud.settings import KNOWLEDGE_SHEET_KEY
from weekly_reminders.models import Document
from weekly_reminders.schemas import DocumentCreate, GeneratedArtifact
from weekly_reminders.storage import LocalBlobStore

logger = logging.getLogger(__name__)


class IngestionRecorder:
    """
    Makes scraper and generator output durable.

    Artifacts are replaced, never merged: the delete of the previous
    (year group, week) rows and the insert of the new ones share one commit,
    so readers never see a mixture of old and new reminders.
    """

    def __init__(self, db: Session, blob_store: Optional[LocalBlobStore] = None):
        self.db = db
        self.blob_store = blob_store

    def persist_document(self, document: DocumentCreate) -> Document:
        blob = None
        if self.blob_store and document.content_base64 and not document.storage_key:
            content = base64.b64decode(document.content_base64)
            blob = self.blob_store.put(content, document.filename, document.mime_type)
            document = document.model_copy(update={"storage_key": blob.key, "storage_url": blob.url})

        try:
            stored = crud.create_document(self.db, document)
        except Exception:
            self.db.rollback()
            if blob is not None:
                self.blob_store.delete(blob.key)
            raise
        logger.info("Stored %s %s (%s bytes)", document.type, document.filename, document.file_size)
        return stored

    def replace_artifacts(self, year_group_id: str, week_start_date: date, artifact: GeneratedArtifact) -> None:
        try:
            removed = crud.delete_artifacts(self.db, year_group_id, week_start_date)
            crud.add_artifacts(self.db, year_group_id, week_start_date, artifact)
            if artifact.updated_knowledge_sheet:
                crud.set_setting(self.db, KNOWLEDGE_SHEET_KEY, artifact.updated_knowledge_sheet, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(
            "Replaced %d reminders with %d for group %s, week %s",
            removed, len(artifact.daily_reminders), year_group_id, week_start_date
        )

    def deactivate_document(self, document_id: str) -> Optional[Document]:
        return crud.deactivate_document(self.db, document_id)
