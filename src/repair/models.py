"""
Data model for repair reports and the per-request uploaded file.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RepairStatus(str, Enum):
    IN_PROGRESS = "อยู่ระหว่างดำเนินการ"
    RESOLVED = "แก้ไขเสร็จแล้ว"


class RepairReport(BaseModel):
    """
    One equipment-repair report as submitted by the form.

    Every field may be empty. Content is not validated here: the form is
    responsible for that, and the sheet row is written as given.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    substation: str = ""
    doc_number: str = Field("", alias="docNumber")
    equipment_id: str = Field("", alias="equipmentId")
    details: str = ""
    details_ai: str = Field("", alias="detailsAI")
    responsible: str = ""
    status: str = RepairStatus.IN_PROGRESS.value
    signed_date: str = Field("", alias="signedDate")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, Enum):
            return str(value.value)
        return str(value)

    def to_wire(self) -> dict:
        """Serialize with the camelCase keys the form uses."""
        return self.model_dump(by_alias=True)


@dataclass
class UploadedFile:
    """
    A file received with a save request, spooled to a temp path.

    The temp path belongs to exactly one request; ``cleanup`` removes it once
    and is a no-op on later calls.
    """
    path: str
    media_type: str = "application/octet-stream"
    original_name: str = ""
    size: int = 0
    _removed: bool = field(default=False, repr=False)

    def cleanup(self) -> bool:
        """Delete the temp file. Returns True if this call removed it."""
        if self._removed:
            return False
        try:
            os.remove(self.path)
        except FileNotFoundError:
            self._removed = True
            return False
        self._removed = True
        return True

    @property
    def removed(self) -> bool:
        return self._removed


@dataclass(frozen=True)
class UploadedFileRef:
    """A file stored in Drive."""
    id: str
    web_view_link: str
    share_error: Optional[str] = None


@dataclass
class SaveResult:
    """Outcome of a save that reached the sheet."""
    SUCCESS = "success"
    SUCCESS_WITH_WARNING = "success_with_warning"

    status: str
    warning: Optional[str] = None
    file_link: Optional[str] = None
    folder_id: Optional[str] = None
    file_name: Optional[str] = None

    @property
    def has_warning(self) -> bool:
        return self.status == self.SUCCESS_WITH_WARNING

    def to_response(self) -> dict:
        body = {"success": True}
        if self.warning:
            body["warning"] = self.warning
        return body
