"""
Repair Save Orchestrator
========================

Sequences one save request:

    authorize -> [resolve folder -> compute name -> upload] -> append row

The bracketed attachment steps are soft: any failure there becomes a
warning plus a failure marker in the sheet's file column, and the row is
still written. A refused public-sharing grant keeps the file link in the
row and only adds a warning. The row append is hard: if it fails, the request fails and
nothing is compensated (an already uploaded file stays in Drive).
"""
from __future__ import annotations

from typing import Optional

from repair.drive_upload import upload_file
from repair.errors import RecorderFailure, UploadFailure
from repair.folders import resolve_or_create_folder
from repair.models import RepairReport, SaveResult, UploadedFile
from repair.naming import compute_filename
from repair.sheets_recorder import SheetsRecorder

UPLOAD_FAILED_MARKER = "อัปโหลดล้มเหลว"


def build_upload_warning(message: str) -> str:
    """User-facing warning for a row saved without its attachment."""
    return f"บันทึกข้อมูลลงตารางแล้ว แต่ (ไฟล์อัปโหลดไม่สำเร็จ: {message})"


def build_share_warning(message: str) -> str:
    """User-facing warning for a stored file that could not be shared."""
    return f"บันทึกข้อมูลและไฟล์แล้ว แต่ (ตั้งค่าการแชร์ลิงก์ไม่สำเร็จ: {message})"


class RepairSaveOrchestrator:
    """Save a repair report to Sheets and its attachment to Drive."""

    def __init__(self, settings, provider, recorder: Optional[SheetsRecorder] = None, logger=None):
        """
        Args:
            settings: Frozen config.Settings.
            provider: AuthorizedClientProvider for Drive and Sheets.
            recorder: SheetsRecorder; built from settings when omitted.
            logger: RepairLogger (optional).
        """
        self.settings = settings
        self.provider = provider
        self.recorder = recorder or SheetsRecorder(
            spreadsheet_id=settings.sheet_id,
            include_details_ai=settings.include_details_ai,
            timezone=settings.timezone,
        )
        self.logger = logger

    def save(self, report: RepairReport, upload: Optional[UploadedFile] = None,
             session_id: Optional[str] = None) -> SaveResult:
        """
        Persist one report.

        Returns:
            SaveResult, with a warning when the attachment could not be stored.

        Raises:
            ConfigurationError, AuthorizationError: client could not be built.
            RecorderFailure: the sheet row was not written.
        """
        if self.logger:
            self.logger.log_save_start(report.substation, report.doc_number, upload is not None)

        try:
            self.settings.require_sheet_id()
            client = self.provider.get_client(session_id)

            file_reference = ""
            warning = None
            file_name = None
            folder_id = None

            if upload is not None:
                try:
                    folder_id, file_name, ref = self._store_attachment(client, report, upload)
                    file_reference = ref.web_view_link
                    if ref.share_error:
                        warning = build_share_warning(ref.share_error)
                        if self.logger:
                            self.logger.warning(f"Drive sharing failed: {ref.share_error}", component="SaveOrchestrator")
                except UploadFailure as e:
                    warning = build_upload_warning(str(e))
                    file_reference = UPLOAD_FAILED_MARKER
                    if self.logger:
                        self.logger.warning(f"Drive upload failed: {e}", component="SaveOrchestrator")
                finally:
                    self._cleanup(upload)

            row = self.recorder.build_row(report, file_reference)
            try:
                target_range = self.recorder.append_row(client, row)
            except RecorderFailure:
                if self.logger:
                    self.logger.error("Sheet append failed", component="SaveOrchestrator", exc_info=True)
                raise

            if self.logger:
                self.logger.log_sheets_append(target_range, len(row))

            if warning:
                return SaveResult(
                    status=SaveResult.SUCCESS_WITH_WARNING,
                    warning=warning,
                    file_link=file_reference if file_reference != UPLOAD_FAILED_MARKER else None,
                    folder_id=folder_id,
                    file_name=file_name,
                )
            return SaveResult(
                status=SaveResult.SUCCESS,
                file_link=file_reference or None,
                folder_id=folder_id,
                file_name=file_name,
            )
        finally:
            if upload is not None:
                self._cleanup(upload)

    def _store_attachment(self, client, report: RepairReport, upload: UploadedFile):
        """Folder -> name -> upload. Every failure is raised as UploadFailure."""
        try:
            root_folder_id = self.settings.require_root_folder_id()
            folder_id = resolve_or_create_folder(report.substation, root_folder_id, client, logger=self.logger)
            file_name = compute_filename(report, upload.original_name)
            ref = upload_file(
                client,
                upload.path,
                upload.media_type,
                file_name,
                folder_id,
                share_publicly=self.settings.share_publicly,
            )
        except UploadFailure:
            raise
        except Exception as e:
            raise UploadFailure(str(e)) from e

        if self.logger:
            self.logger.log_upload(file_name, folder_id, ref.web_view_link)
        return folder_id, file_name, ref

    def _cleanup(self, upload: UploadedFile):
        try:
            upload.cleanup()
        except OSError as e:
            if self.logger:
                self.logger.warning(f"Could not delete temp file {upload.path}: {e}", component="SaveOrchestrator")
