"""
Group Image Cropper v1.0 - Ingestion Module
============================================
Batch admission of dropped or selected files

Stages run in a fixed order and each may end the batch early:
limit -> type/size/extension -> duplicates -> truncation -> validation.
Notices are collected per batch and flushed together afterwards.
"""

import threading
from typing import List, Optional, Sequence
import config
from logger import get_logger
from models import FileBlob
from notices import Notice, NoticeKind, NoticeSink, build_notice
from session import Session, SessionFullError
from translations import get_texts
from validators import ImageValidator, RejectReason, ValidationError, check_file

logger = get_logger(__name__)

def log_notices(notices: List[Notice]):
    """Default sink: write notices to the log"""
    for n in notices:
        logger.info(f"[{n.severity.value}] {n.title}: {n.description}")

class IngestionPipeline:
    """
    Admits batches of files into a session.

    ``admit`` is debounced: a call waits ``debounce`` seconds and a newer
    call in that window replaces it. Only one batch runs at a time; a
    call arriving while a batch runs is dropped.
    """

    def __init__(
        self,
        session: Session,
        validator: Optional[ImageValidator] = None,
        notify: Optional[NoticeSink] = None,
        T: Optional[dict] = None,
        debounce: float = config.TIMING['DEBOUNCE'],
        notice_delay: float = config.TIMING['TOAST_DELAY']
    ):
        self.session = session
        self.validator = validator or ImageValidator(session.resources)
        self.notify = notify or log_notices
        self.T = T or get_texts(config.DEFAULT_LANGUAGE)
        self.debounce = debounce
        self.notice_delay = notice_delay

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._busy = False
        self._flushes = 0
        self._idle = threading.Event()
        self._idle.set()

    # === SCHEDULING ===

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    def _update_idle(self):
        if self._timer is None and not self._busy and self._flushes == 0:
            self._idle.set()
        else:
            self._idle.clear()

    def admit(self, files: Sequence[FileBlob]) -> bool:
        """
        Schedule a batch for admission

        Returns:
            False if the call was dropped (empty or a batch is running)
        """
        if not files:
            return False

        files = list(files)
        with self._lock:
            if self._busy:
                logger.info(f"Admission busy, dropped {len(files)} files")
                return False

            if self._timer is not None:
                self._timer.cancel()
                logger.debug("Pending admission replaced")

            timer = threading.Timer(self.debounce, lambda: self._run(files, timer))
            timer.daemon = True
            self._timer = timer
            self._update_idle()

        timer.start()
        return True

    def cancel(self):
        """Cancel a scheduled batch that has not started yet"""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._update_idle()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until no batch is scheduled, running or waiting to flush"""
        return self._idle.wait(timeout)

    def _run(self, files: List[FileBlob], timer: threading.Timer):
        with self._lock:
            if self._timer is not timer:
                return
            self._timer = None
            self._busy = True
            self._update_idle()

        notices: List[Notice] = []
        try:
            notices = self.process_batch(files)
        except Exception as e:
            logger.error(f"Batch admission failed: {e}", exc_info=True)
            notices.append(build_notice(NoticeKind.INVALID_IMAGE, self.T, count=len(files)))
        finally:
            with self._lock:
                self._busy = False
                self._flushes += 1
                self._update_idle()

        flush = threading.Timer(self.notice_delay, self._flush, args=(notices,))
        flush.daemon = True
        flush.start()

    def _flush(self, notices: List[Notice]):
        try:
            if notices:
                self.notify(notices)
        except Exception as e:
            logger.error(f"Notice delivery failed: {e}", exc_info=True)
        finally:
            with self._lock:
                self._flushes -= 1
                self._update_idle()

    # === ADMISSION ===

    def _notice(self, kind: NoticeKind, **params) -> Notice:
        return build_notice(kind, self.T, **params)

    def process_batch(self, files: Sequence[FileBlob]) -> List[Notice]:
        """
        Run one batch through every admission stage

        Args:
            files: Candidate files in input order

        Returns:
            Notices in stage order
        """
        messages: List[Notice] = []
        files = list(files)
        logger.info(f"Admission started: {len(files)} files, {len(self.session)} in session")

        # 1. Limit
        remaining_slots = self.session.remaining_slots
        if remaining_slots == 0:
            messages.append(self._notice(NoticeKind.LIMIT, count=len(files)))
            return messages

        # 2. Type, size and extension
        image_files: List[FileBlob] = []
        for f in files:
            try:
                check_file(f.name, f.mime_type, f.size)
            except ValidationError as e:
                logger.info(f"Rejected {f.name}: {e}")
                if e.reason == RejectReason.FILE_SIZE:
                    messages.append(self._notice(NoticeKind.FILE_SIZE, filename=f.name))
                elif e.reason == RejectReason.MIME_MISMATCH:
                    messages.append(self._notice(
                        NoticeKind.MIME_MISMATCH, filename=f.name, mime_type=f.mime_type
                    ))
                continue
            image_files.append(f)

        invalid_type_count = len(files) - len(image_files)
        if invalid_type_count > 0:
            messages.append(self._notice(NoticeKind.INVALID_TYPE, count=invalid_type_count))
            if not image_files:
                return messages

        # 3. Duplicates, against the session and earlier files of this batch
        seen = self.session.filenames
        non_duplicates: List[FileBlob] = []
        for f in image_files:
            if f.name in seen:
                logger.info(f"Duplicate ignored: {f.name}")
                continue
            seen.add(f.name)
            non_duplicates.append(f)

        duplicate_count = len(image_files) - len(non_duplicates)
        if duplicate_count > 0:
            messages.append(self._notice(NoticeKind.DUPLICATE, count=duplicate_count))
            if not non_duplicates:
                return messages

        # 4. Truncate to free slots
        to_process = non_duplicates[:remaining_slots]
        ignored_due_to_limit = max(0, len(non_duplicates) - remaining_slots)

        # 5. Validate in order, growing the gallery as we go
        added = 0
        invalid_size_count = 0
        invalid_image_count = 0
        for f in to_process:
            try:
                result = self.validator.validate(f.name, f.data)
                if not result.valid:
                    if result.reason in (RejectReason.TOO_SMALL, RejectReason.TOO_LARGE):
                        invalid_size_count += 1
                    else:
                        invalid_image_count += 1
                    logger.info(f"Rejected {f.name}: {result.reason.value}")
                    continue

                self.session.add(f, result.width, result.height)
                added += 1
            except SessionFullError:
                ignored_due_to_limit += 1
            except Exception as e:
                logger.error(f"Error processing image {f.name}: {e}", exc_info=True)
                invalid_image_count += 1

        # 6. Aggregates
        if invalid_size_count > 0:
            messages.append(self._notice(NoticeKind.INVALID_DIMENSIONS, count=invalid_size_count))
        if invalid_image_count > 0:
            messages.append(self._notice(NoticeKind.INVALID_IMAGE, count=invalid_image_count))
        if ignored_due_to_limit > 0:
            messages.append(self._notice(
                NoticeKind.LIMIT, added=added, ignored=ignored_due_to_limit
            ))

        logger.info(
            f"Admission finished: {added} added, {invalid_size_count} bad dimensions, "
            f"{invalid_image_count} corrupt, {ignored_due_to_limit} over limit"
        )
        return messages
