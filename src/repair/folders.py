"""
Per-substation folder lookup in Google Drive.

Uniqueness of folder names under the root is only enforced by the
lookup-before-create below. Two first-time saves for the same substation
racing each other can both miss the lookup and create two folders.
"""
from __future__ import annotations

from repair.naming import escape_drive_query_value, normalize_group_key

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def build_folder_query(name: str, root_folder_id: str) -> str:
    return (
        f"name = '{escape_drive_query_value(name)}' "
        f"and mimeType = '{FOLDER_MIME_TYPE}' "
        f"and '{escape_drive_query_value(root_folder_id)}' in parents "
        f"and trashed = false"
    )


def find_folder(drive, name: str, root_folder_id: str):
    """Return the id of a non-trashed folder called `name` directly under the root, or None."""
    response = drive.files().list(
        q=build_folder_query(name, root_folder_id),
        fields="files(id, name)",
        spaces="drive",
        pageSize=10,
        supportsAllDrives=True,
        includeItemsFromAllDrives=True,
    ).execute()
    files = response.get("files", [])
    if files:
        return files[0]["id"]
    return None


def create_folder(drive, name: str, root_folder_id: str) -> str:
    metadata = {
        "name": name,
        "mimeType": FOLDER_MIME_TYPE,
        "parents": [root_folder_id],
    }
    created = drive.files().create(
        body=metadata,
        fields="id",
        supportsAllDrives=True,
    ).execute()
    return created["id"]


def resolve_or_create_folder(group_key: str, root_folder_id: str, client, logger=None) -> str:
    """
    Find or create the folder for a substation under `root_folder_id`.

    Args:
        group_key: Substation name as written on the report.
        root_folder_id: Drive id of the shared root folder.
        client: AuthorizedClient (uses its ``drive`` service).

    Returns:
        Drive id of the folder.
    """
    name = normalize_group_key(group_key)
    folder_id = find_folder(client.drive, name, root_folder_id)
    if folder_id:
        if logger:
            logger.debug(f"Using existing folder '{name}' ({folder_id})", component="Folders")
        return folder_id

    folder_id = create_folder(client.drive, name, root_folder_id)
    if logger:
        logger.info(f"Created folder '{name}' ({folder_id})", component="Folders")
    return folder_id
