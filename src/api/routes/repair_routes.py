"""
Repair routes - save a reviewed report, extract a draft from a document.
"""
import json
import os
import tempfile
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from api.dependencies import (
    get_extractor, get_logger, get_orchestrator, get_session_id, get_settings,
)
from api.models import ErrorResponse, SaveResponse
from repair.models import RepairReport, UploadedFile

router = APIRouter()

CHUNK_SIZE = 1024 * 1024


def parse_report(data: Optional[str]) -> RepairReport:
    """Decode the `data` form field (JSON-encoded RepairReport)."""
    if not data:
        raise ValueError("Missing report data")
    payload = json.loads(data)
    if not isinstance(payload, dict):
        raise ValueError("Report data must be a JSON object")
    return RepairReport.model_validate(payload)


async def spool_upload(file: UploadFile, temp_dir: str) -> UploadedFile:
    """Copy an incoming upload to a temp file owned by this request."""
    suffix = os.path.splitext(file.filename or "")[1]
    fd, path = tempfile.mkstemp(prefix="repair_upload_", suffix=suffix, dir=temp_dir)
    size = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                await run_in_threadpool(out.write, chunk)
                size += len(chunk)
    except BaseException:
        os.remove(path)
        raise
    finally:
        await file.close()

    return UploadedFile(
        path=path,
        media_type=file.content_type or "application/octet-stream",
        original_name=file.filename or "",
        size=size,
    )


def error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message},
    )


@router.post(
    "/save",
    response_model=SaveResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
    summary="Save a repair report",
)
async def save_repair(
    data: Optional[str] = Form(None, description="JSON-encoded RepairReport"),
    file: Optional[UploadFile] = File(None, description="Scanned document or photo"),
    settings=Depends(get_settings),
    orchestrator=Depends(get_orchestrator),
    session_id: Optional[str] = Depends(get_session_id),
    logger=Depends(get_logger),
):
    """
    Append the report to the sheet and store the attachment in Drive.

    - **200** `{success: true}`: row written (and file stored, if any)
    - **200** `{success: true, warning}`: row written, file upload failed
    - **500** `{error}`: row not written
    """
    upload = None
    try:
        report = parse_report(data)
        if file is not None and file.filename:
            upload = await spool_upload(file, settings.temp_folder)
        result = await run_in_threadpool(orchestrator.save, report, upload, session_id)
    except Exception as e:
        logger.error(f"Error saving repair data: {e}", component="API", exc_info=True)
        return error_response(str(e))
    finally:
        if upload is not None:
            try:
                upload.cleanup()
            except OSError as e:
                logger.warning(f"Could not delete temp file {upload.path}: {e}", component="API")

    return result.to_response()


@router.post(
    "/extract",
    responses={500: {"model": ErrorResponse}},
    summary="Extract a report draft from a document",
)
async def extract_repair(
    file: UploadFile = File(..., description="Scanned document or photo"),
    extractor=Depends(get_extractor),
    logger=Depends(get_logger),
):
    """
    Run AI extraction on an uploaded document and return the pre-filled
    report (camelCase keys). Nothing is persisted.
    """
    try:
        content = await file.read()
        report = await run_in_threadpool(extractor.extract, content, file.content_type)
    except Exception as e:
        logger.error(f"AI extraction failed: {e}", component="API", exc_info=True)
        return error_response(str(e))
    finally:
        await file.close()

    return report.to_wire()
