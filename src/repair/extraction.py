"""
Document extraction using Google Gemini
Turns a scanned repair notice (PDF or photo) into a RepairReport draft
that the user reviews before saving
"""
from __future__ import annotations

import json
import re
from typing import Dict, Optional

import google.generativeai as genai

from repair.errors import ConfigurationError, ExtractionError
from repair.models import RepairReport, RepairStatus

EXTRACTION_FIELDS = (
    "substation",
    "docNumber",
    "equipmentId",
    "details",
    "detailsAI",
    "responsible",
    "signedDate",
)

EXTRACTION_PROMPT = """
Extract repair information from this document in Thai.
Return a JSON object with these fields:
- substation: ดึงข้อมูลจากหัวข้อ "เรื่อง" โดยเอาข้อความที่อยู่หลังคำว่า "สถานีไฟฟ้า" (เช่น ถ้าเรื่องคือ "แจ้งอุปกรณ์ชำรุด สถานีไฟฟ้าสมุทรสาคร 10" ให้เอาแค่ "สมุทรสาคร 10")
- docNumber: เลขที่ ก3 กปบ. (เช่น 123/2567)
- equipmentId: รหัสอุปกรณ์ที่ชำรุด (หากมีหลายบรรทัดหรือหลายรายการ ให้รวมเข้าด้วยกันและคั่นด้วยเครื่องหมายจุลภาค ",")
- details: รายละเอียดการชำรุด (ดึงข้อความต้นฉบับมาจาก PDF โดยตรง ไม่ต้องแก้ไขคำ)
- detailsAI: รายละเอียดการชำรุด (นำข้อมูลจาก details มาเรียบเรียงใหม่เป็นภาษาราชการที่สุภาพและเป็นทางการ ไม่ใช้ภาษาพูด)
- responsible: หน่วยงานที่รับผิดชอบ
- signedDate: วันที่ผู้บริหารเซ็น (ระบุเป็น วว/ดด/ปปปป)

If a field is not found, leave it as an empty string.
Return ONLY the JSON object.
"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def parse_extraction_response(text: str) -> Dict[str, str]:
    """Parse the model's JSON answer, tolerating markdown code fences."""
    cleaned = _CODE_FENCE.sub("", (text or "").strip()).strip()
    if not cleaned:
        return {}
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        raise ExtractionError(f"AI returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExtractionError("AI response is not a JSON object")
    return {key: _as_text(data.get(key)) for key in EXTRACTION_FIELDS}


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value if v is not None)
    return str(value)


class DocumentExtractor:
    """Gemini-backed extractor for repair notices"""

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash", model=None):
        """
        Args:
            api_key: Google AI Studio key.
            model_name: Gemini model to call.
            model: Pre-built model object (tests).
        """
        if model is None:
            if not api_key:
                raise ConfigurationError("GOOGLE_API_KEY is not set")
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(
                model_name,
                generation_config={"response_mime_type": "application/json"},
            )
        self.model = model
        self.model_name = model_name

    def extract(self, data: bytes, mime_type: Optional[str]) -> RepairReport:
        """
        Extract report fields from document bytes.

        Returns:
            RepairReport with status forced to in-progress.
        """
        if not data:
            raise ExtractionError("Uploaded file is empty")
        try:
            response = self.model.generate_content([
                {"mime_type": mime_type or "application/pdf", "data": data},
                EXTRACTION_PROMPT,
            ])
            text = response.text if response.text else ""
        except Exception as e:
            raise ExtractionError(f"AI extraction failed: {str(e)}") from e

        fields = parse_extraction_response(text)
        fields["status"] = RepairStatus.IN_PROGRESS.value
        return RepairReport.model_validate(fields)
