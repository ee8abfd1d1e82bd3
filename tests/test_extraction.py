"""
Tests for Gemini document extraction (model is mocked).
"""
import os
import sys
import unittest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from repair.errors import ConfigurationError, ExtractionError
from repair.extraction import EXTRACTION_PROMPT, DocumentExtractor, parse_extraction_response
from repair.models import RepairStatus


class TestParseResponse(unittest.TestCase):
    def test_plain_json(self):
        fields = parse_extraction_response('{"substation": "บางพลี", "docNumber": "9/2568"}')
        self.assertEqual(fields["substation"], "บางพลี")
        self.assertEqual(fields["docNumber"], "9/2568")
        self.assertEqual(fields["details"], "")

    def test_code_fences_are_stripped(self):
        text = '```json\n{"equipmentId": "CB-01"}\n```'
        self.assertEqual(parse_extraction_response(text)["equipmentId"], "CB-01")

    def test_nulls_numbers_and_lists_become_text(self):
        fields = parse_extraction_response('{"details": null, "docNumber": 123, "equipmentId": ["A", "B"]}')
        self.assertEqual(fields["details"], "")
        self.assertEqual(fields["docNumber"], "123")
        self.assertEqual(fields["equipmentId"], "A, B")

    def test_unknown_keys_are_dropped(self):
        fields = parse_extraction_response('{"substation": "x", "confidence": 0.9}')
        self.assertNotIn("confidence", fields)

    def test_empty_response(self):
        self.assertEqual(parse_extraction_response(""), {})

    def test_invalid_json(self):
        with self.assertRaises(ExtractionError):
            parse_extraction_response("not json at all")

    def test_non_object_json(self):
        with self.assertRaises(ExtractionError):
            parse_extraction_response('["a", "b"]')


class TestDocumentExtractor(unittest.TestCase):
    def setUp(self):
        self.model = MagicMock()
        self.extractor = DocumentExtractor(api_key="", model=self.model)

    def test_extract_builds_report(self):
        self.model.generate_content.return_value = MagicMock(
            text='{"substation": "สมุทรสาคร 10", "docNumber": "123/2567", "detailsAI": "ชำรุด"}'
        )

        report = self.extractor.extract(b"%PDF-1.4", "application/pdf")

        self.assertEqual(report.substation, "สมุทรสาคร 10")
        self.assertEqual(report.doc_number, "123/2567")
        self.assertEqual(report.details_ai, "ชำรุด")
        self.assertEqual(report.status, RepairStatus.IN_PROGRESS.value)

        parts = self.model.generate_content.call_args[0][0]
        self.assertEqual(parts[0], {"mime_type": "application/pdf", "data": b"%PDF-1.4"})
        self.assertEqual(parts[1], EXTRACTION_PROMPT)

    def test_status_is_always_in_progress(self):
        self.model.generate_content.return_value = MagicMock(text='{"status": "แก้ไขเสร็จแล้ว"}')
        report = self.extractor.extract(b"img", "image/jpeg")
        self.assertEqual(report.status, RepairStatus.IN_PROGRESS.value)

    def test_missing_mime_type_defaults_to_pdf(self):
        self.model.generate_content.return_value = MagicMock(text="{}")
        self.extractor.extract(b"data", None)
        parts = self.model.generate_content.call_args[0][0]
        self.assertEqual(parts[0]["mime_type"], "application/pdf")

    def test_empty_file_is_rejected(self):
        with self.assertRaises(ExtractionError):
            self.extractor.extract(b"", "application/pdf")
        self.model.generate_content.assert_not_called()

    def test_model_error_becomes_extraction_error(self):
        self.model.generate_content.side_effect = RuntimeError("429 Resource has been exhausted")
        with self.assertRaises(ExtractionError) as ctx:
            self.extractor.extract(b"data", "application/pdf")
        self.assertIn("429 Resource has been exhausted", str(ctx.exception))

    def test_missing_api_key(self):
        with self.assertRaises(ConfigurationError) as ctx:
            DocumentExtractor(api_key="")
        self.assertEqual(str(ctx.exception), "GOOGLE_API_KEY is not set")


if __name__ == "__main__":
    unittest.main()
