"""
Google Drive File Uploader
==========================

Streams a request's temp file into a substation folder and returns a
shareable link for the sheet row.

- Content is sent with a resumable MediaFileUpload, read from disk in chunks.
- Uploads are never retried; any storage error surfaces as UploadFailure.
- A failed public-sharing grant does not fail the upload; it is reported
  on the returned UploadedFileRef.
- Deleting the temp file is the caller's job.
"""
from __future__ import annotations

from googleapiclient.http import MediaFileUpload

from repair.errors import UploadFailure
from repair.models import UploadedFileRef

VIEW_LINK_TEMPLATE = "https://drive.google.com/file/d/{file_id}/view?usp=sharing"


def upload_file(
    client,
    path: str,
    media_type: str,
    name: str,
    parent_id: str,
    share_publicly: bool = True,
) -> UploadedFileRef:
    """
    Upload a local file into a Drive folder.

    Args:
        client: AuthorizedClient (uses its ``drive`` service).
        path: Local path of the temp file.
        media_type: Declared content type of the upload.
        name: File name to store in Drive.
        parent_id: Target folder id.
        share_publicly: Grant anyone-with-the-link read access.

    Returns:
        UploadedFileRef with the Drive id and a web-viewable link;
        ``share_error`` is set when the public grant was refused.

    Raises:
        UploadFailure: the file could not be stored.
    """
    try:
        drive = client.drive

        file_metadata = {
            "name": name,
            "parents": [parent_id],
        }
        media = MediaFileUpload(
            path,
            mimetype=media_type or "application/octet-stream",
            resumable=True,
        )

        uploaded = drive.files().create(
            body=file_metadata,
            media_body=media,
            fields="id, webViewLink",
            supportsAllDrives=True,
        ).execute(num_retries=0)

        file_id = uploaded.get("id")
        if not file_id:
            raise UploadFailure("Drive did not return a file id")

        web_link = uploaded.get("webViewLink") or VIEW_LINK_TEMPLATE.format(file_id=file_id)

    except UploadFailure:
        raise
    except Exception as e:
        raise UploadFailure(str(e)) from e

    share_error = None
    if share_publicly:
        # The file is already stored; a sharing failure keeps its link
        try:
            drive.permissions().create(
                fileId=file_id,
                body={"type": "anyone", "role": "reader"},
                supportsAllDrives=True,
            ).execute()
        except Exception as e:
            share_error = str(e)

    return UploadedFileRef(id=file_id, web_view_link=web_link, share_error=share_error)
