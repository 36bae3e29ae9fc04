# onboarding/services/document/classification_ingestion_service.py
"""
Feeds document-classifier guesses into the document slots.

A file is mapped when the classifier is at least ``threshold`` percent
sure and the label is not "Other"; the label becomes the slot's type
key as-is, whether or not the administrator registered it. Everything
else is left for the student to upload manually.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from onboarding.integrations.blob_store import BlobStore
from onboarding.integrations.document_classifier import DocumentClassifier
from onboarding.models.enums import ClassificationOutcome
from onboarding.schemas.documents import ClassificationBatchResult, ClassificationFileResult
from onboarding.services.base.base_service import BaseProfileService
from onboarding.services.common import UnitOfWork, errors
from onboarding.services.document.slot_rules import apply_upload
from onboarding.services.settings.settings_registry import SettingsRegistry

OTHER_LABEL = "Other"
DEFAULT_THRESHOLD = 70


@dataclass(frozen=True)
class IncomingFile:
    """A file already written to the blob store, awaiting classification."""

    file_name: str
    file_ref: str
    content: bytes
    content_type: str = "application/octet-stream"


class ClassificationIngestionService(BaseProfileService):

    def __init__(
        self,
        session_factory: Callable[[], Session],
        registry: SettingsRegistry,
        classifier: DocumentClassifier,
        blob_store: Optional[BlobStore] = None,
        threshold: int = DEFAULT_THRESHOLD,
    ) -> None:
        super().__init__(session_factory, registry, blob_store)
        self._classifier = classifier
        self._threshold = threshold

    def ingest_batch(
        self, student_id: str, files: Sequence[IncomingFile]
    ) -> ClassificationBatchResult:
        """
        Classify each file and apply the upload rule for confident guesses.

        The profile is loaded once and committed once at the end, and only
        if at least one file was mapped. A failure on one file is reported
        as an ``error`` outcome and does not affect the others. When the
        batch itself fails, every incoming file is released before the
        error propagates.
        """
        results: List[ClassificationFileResult] = []
        unused_refs: List[str] = []
        any_mapped = False

        try:
            with UnitOfWork(self._session_factory, auto_commit=False) as uow:
                profile = self._load_profile(uow, student_id)

                for incoming in files:
                    result = self._ingest_one(uow, profile, incoming)
                    results.append(result)
                    if result.outcome == ClassificationOutcome.MAPPED:
                        any_mapped = True
                    else:
                        unused_refs.append(incoming.file_ref)

                if any_mapped:
                    self._persist(uow, profile)
                    uow.commit()
                else:
                    uow.rollback()
        except errors.ServiceError:
            self._logger.warning(
                "Classification batch failed, releasing stored files",
                extra={"student_id": student_id, "files": len(files)},
            )
            for incoming in files:
                self._release_unreferenced(incoming.file_ref)
            raise

        # Files that did not land in a slot are not referenced anywhere
        for file_ref in unused_refs:
            self._release_unreferenced(file_ref)

        self._logger.info(
            "Classification batch processed",
            extra={
                "student_id": student_id,
                "files": len(files),
                "mapped": sum(r.outcome == ClassificationOutcome.MAPPED for r in results),
            },
        )
        return ClassificationBatchResult(results=results, mapped=any_mapped)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _ingest_one(self, uow: UnitOfWork, profile, incoming: IncomingFile) -> ClassificationFileResult:
        try:
            guess = self._classifier.classify(
                incoming.file_name, incoming.content, incoming.content_type
            )
        except errors.ClassifierError as e:
            self._logger.warning(
                f"Classification failed: {e.message}",
                extra={"student_id": profile.student_id, "file_name": incoming.file_name},
            )
            return self._error_result(incoming, f"Could not classify: {e.message}")
        except Exception as e:
            self._logger.error(
                f"Classifier raised unexpectedly: {e}",
                extra={"student_id": profile.student_id, "file_name": incoming.file_name},
                exc_info=True,
            )
            return self._error_result(incoming, "Could not classify: classifier failure")

        if guess.confidence < self._threshold or guess.label == OTHER_LABEL:
            return ClassificationFileResult(
                file_name=incoming.file_name,
                outcome=ClassificationOutcome.UNMAPPED,
                document_type=guess.label,
                confidence=guess.confidence,
                message="Could not identify this document; please upload it manually",
            )

        try:
            change = apply_upload(profile, guess.label, incoming.file_ref, incoming.file_name)
        except errors.ConflictError as e:
            return ClassificationFileResult(
                file_name=incoming.file_name,
                outcome=ClassificationOutcome.ERROR,
                document_type=guess.label,
                confidence=guess.confidence,
                message=e.message,
            )

        self._release_after_commit(uow, change.released_ref)
        return ClassificationFileResult(
            file_name=incoming.file_name,
            outcome=ClassificationOutcome.MAPPED,
            document_type=guess.label,
            confidence=guess.confidence,
            file_ref=incoming.file_ref,
            message=f"Identified as {guess.label}",
        )

    def _release_unreferenced(self, file_ref: str) -> None:
        if self._blob_store is None:
            return
        try:
            self._blob_store.release(file_ref)
        except OSError as e:
            self._logger.warning(f"Could not release blob: {e}", extra={"file_ref": file_ref})

    @staticmethod
    def _error_result(incoming: IncomingFile, message: str) -> ClassificationFileResult:
        return ClassificationFileResult(
            file_name=incoming.file_name,
            outcome=ClassificationOutcome.ERROR,
            message=message,
        )
