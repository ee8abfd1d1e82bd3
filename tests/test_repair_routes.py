"""
Tests for the /api/repair endpoints using FastAPI's TestClient.
Google services are fakes; the Gemini extractor is a mock.
"""
import io
import json
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
sys.path.insert(0, os.path.dirname(__file__))

from fastapi import UploadFile
from fastapi.testclient import TestClient

from google_fakes import FakeDrive, FakeProvider, FakeSheetsClient, FakeSpreadsheet
from api.dependencies import get_extractor
from api.main import create_app
from api.routes.repair_routes import CHUNK_SIZE, spool_upload
from config import Settings
from repair.errors import ConfigurationError, ExtractionError
from repair.models import RepairReport
from repair.save_orchestrator import UPLOAD_FAILED_MARKER


class RouteTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp(prefix="repair_route_tests_")
        self.settings = Settings(
            sheet_id="sheet-1",
            drive_root_folder_id="root-1",
            temp_folder=self.tmp_dir,
        )
        self.drive = FakeDrive()
        self.spreadsheet = FakeSpreadsheet()
        self.provider = FakeProvider(drive=self.drive, sheets=FakeSheetsClient(self.spreadsheet))
        self.app = create_app(settings=self.settings, provider=self.provider, logger=MagicMock())
        self.client = TestClient(self.app)

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def temp_files_left(self):
        return [n for n in os.listdir(self.tmp_dir) if n.startswith("repair_upload_")]


class TestSaveEndpoint(RouteTestCase):
    def test_save_without_file(self):
        data = {"substation": "บางพลี 2", "docNumber": "5/2568", "status": "อยู่ระหว่างดำเนินการ"}
        response = self.client.post("/api/repair/save", data={"data": json.dumps(data)})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})
        row = self.spreadsheet.appended[0]["values"][0]
        self.assertEqual(row[1], "บางพลี 2")
        self.assertEqual(row[2], "5/2568")
        self.assertEqual(row[-1], "")

    def test_save_with_file(self):
        data = {"substation": "สถานีไฟฟ้าสมุทรสาคร 10", "docNumber": "123/2567"}
        response = self.client.post(
            "/api/repair/save",
            data={"data": json.dumps(data)},
            files={"file": ("scan.pdf", b"%PDF-1.4 content", "application/pdf")},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(self.drive.created_folders[0]["name"], "สมุทรสาคร 10")
        self.assertEqual(self.drive.uploads[0]["body"]["name"], "123-2567_สมุทรสาคร 10.pdf")
        self.assertTrue(self.spreadsheet.appended[0]["values"][0][-1].startswith("https://drive.google.com/"))
        self.assertEqual(self.temp_files_left(), [])

    def test_upload_failure_returns_warning(self):
        self.drive.fail_upload = "Rate limit exceeded"
        response = self.client.post(
            "/api/repair/save",
            data={"data": json.dumps({"substation": "บางพลี"})},
            files={"file": ("photo.jpg", b"\xff\xd8\xff", "image/jpeg")},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertIn("Rate limit exceeded", body["warning"])
        self.assertEqual(self.spreadsheet.appended[0]["values"][0][-1], UPLOAD_FAILED_MARKER)
        self.assertEqual(self.temp_files_left(), [])

    def test_sheet_failure_returns_500(self):
        self.spreadsheet.fail_append = "Requested entity was not found"
        response = self.client.post(
            "/api/repair/save",
            data={"data": json.dumps({"substation": "บางพลี"})},
            files={"file": ("photo.jpg", b"\xff\xd8\xff", "image/jpeg")},
        )

        self.assertEqual(response.status_code, 500)
        self.assertIn("Requested entity was not found", response.json()["error"])
        self.assertEqual(self.temp_files_left(), [])

    def test_authorization_failure_returns_500(self):
        self.provider.error = ConfigurationError("Google Service Account credentials not configured.")
        response = self.client.post("/api/repair/save", data={"data": "{}"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Google Service Account credentials not configured."})

    def test_malformed_data_returns_500(self):
        response = self.client.post("/api/repair/save", data={"data": "{not json"})
        self.assertEqual(response.status_code, 500)
        self.assertIn("error", response.json())
        self.assertEqual(self.spreadsheet.appended, [])

    def test_missing_data_returns_500(self):
        response = self.client.post("/api/repair/save", data={})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Missing report data"})

    def test_unknown_fields_and_nulls_are_accepted(self):
        data = {"substation": None, "extra": "ignored", "status": "custom"}
        response = self.client.post("/api/repair/save", data={"data": json.dumps(data)})

        self.assertEqual(response.status_code, 200)
        row = self.spreadsheet.appended[0]["values"][0]
        self.assertEqual(row[1], "")
        self.assertIn("custom", row)


class TestExtractEndpoint(RouteTestCase):
    def test_extract_returns_camel_case_report(self):
        extractor = MagicMock()
        extractor.extract.return_value = RepairReport(
            substation="สมุทรสาคร 10", docNumber="123/2567", detailsAI="ข้อความทางการ"
        )
        self.app.dependency_overrides[get_extractor] = lambda: extractor

        response = self.client.post(
            "/api/repair/extract",
            files={"file": ("scan.pdf", b"%PDF-1.4", "application/pdf")},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["substation"], "สมุทรสาคร 10")
        self.assertEqual(body["docNumber"], "123/2567")
        self.assertEqual(body["detailsAI"], "ข้อความทางการ")
        extractor.extract.assert_called_once_with(b"%PDF-1.4", "application/pdf")

    def test_extraction_error_returns_500(self):
        extractor = MagicMock()
        extractor.extract.side_effect = ExtractionError("AI extraction failed: boom")
        self.app.dependency_overrides[get_extractor] = lambda: extractor

        response = self.client.post(
            "/api/repair/extract",
            files={"file": ("scan.pdf", b"%PDF-1.4", "application/pdf")},
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "AI extraction failed: boom"})

    def test_missing_api_key_returns_500(self):
        response = self.client.post(
            "/api/repair/extract",
            files={"file": ("scan.pdf", b"%PDF-1.4", "application/pdf")},
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "GOOGLE_API_KEY is not set"})


class TestHealthEndpoint(RouteTestCase):
    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["components"]["sheet"], "configured")
        self.assertEqual(body["components"]["extraction"], "missing")


class TestSpoolUpload(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp(prefix="repair_spool_tests_")

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    async def test_large_upload_is_copied_in_chunks(self):
        content = b"%PDF" + b"x" * (CHUNK_SIZE * 2 + 17)
        incoming = UploadFile(file=io.BytesIO(content), filename="scan.pdf")

        upload = await spool_upload(incoming, self.tmp_dir)

        self.assertEqual(upload.size, len(content))
        self.assertEqual(upload.original_name, "scan.pdf")
        self.assertTrue(upload.path.endswith(".pdf"))
        with open(upload.path, "rb") as f:
            self.assertEqual(f.read(), content)
        self.assertTrue(upload.cleanup())


if __name__ == "__main__":
    unittest.main()
