"""
In-memory stand-ins for the Drive v3 service and gspread objects.
No network calls; every request is recorded for assertions.
"""
import itertools
import os
import sys

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC_DIR = os.path.join(PROJECT_ROOT, 'src')
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from auth_providers.base import AuthorizedClient
from repair.folders import FOLDER_MIME_TYPE, build_folder_query


class FakeRequest:
    def __init__(self, fn):
        self._fn = fn

    def execute(self, num_retries=0):
        return self._fn()


class FakeFiles:
    def __init__(self, drive):
        self.drive = drive

    def list(self, q=None, fields=None, **kwargs):
        self.drive.list_calls.append(q)

        def run():
            if self.drive.fail_list:
                raise Exception(self.drive.fail_list)
            matches = [
                {"id": folder_id, "name": name}
                for (parent, name), folder_id in self.drive.folders.items()
                if build_folder_query(name, parent) == q
            ]
            return {"files": matches}
        return FakeRequest(run)

    def create(self, body=None, media_body=None, fields=None, **kwargs):
        def run():
            if body.get("mimeType") == FOLDER_MIME_TYPE:
                if self.drive.fail_create_folder:
                    raise Exception(self.drive.fail_create_folder)
                folder_id = f"folder-{next(self.drive._ids)}"
                self.drive.folders[(body["parents"][0], body["name"])] = folder_id
                self.drive.created_folders.append(dict(body))
                return {"id": folder_id}

            if self.drive.fail_upload:
                raise Exception(self.drive.fail_upload)
            file_id = f"file-{next(self.drive._ids)}"
            self.drive.uploads.append({
                "id": file_id,
                "body": dict(body),
                "mimetype": getattr(media_body, "mimetype", lambda: None)(),
            })
            result = {"id": file_id}
            if self.drive.return_link:
                result["webViewLink"] = f"https://drive.google.com/file/d/{file_id}/view"
            return result
        return FakeRequest(run)


class FakePermissions:
    def __init__(self, drive):
        self.drive = drive

    def create(self, fileId=None, body=None, **kwargs):
        def run():
            if self.drive.fail_permission:
                raise Exception(self.drive.fail_permission)
            self.drive.granted.append({"fileId": fileId, "body": body})
            return {"id": "perm-1"}
        return FakeRequest(run)


class FakeDrive:
    def __init__(self):
        self.folders = {}
        self.created_folders = []
        self.uploads = []
        self.granted = []
        self.list_calls = []
        self.fail_list = None
        self.fail_create_folder = None
        self.fail_upload = None
        self.fail_permission = None
        self.return_link = True
        self._ids = itertools.count(1)

    def files(self):
        return FakeFiles(self)

    def permissions(self):
        return FakePermissions(self)


class FakeSpreadsheet:
    def __init__(self, titles=("Sheet1",)):
        self.titles = list(titles)
        self.appended = []
        self.fail_metadata = None
        self.fail_append = None

    def fetch_sheet_metadata(self, params=None):
        if self.fail_metadata:
            raise Exception(self.fail_metadata)
        return {"sheets": [{"properties": {"title": t, "index": i}} for i, t in enumerate(self.titles)]}

    def values_append(self, range, params=None, body=None):
        if self.fail_append:
            raise Exception(self.fail_append)
        self.appended.append({"range": range, "params": params, "values": body["values"]})
        return {"updates": {"updatedRows": len(body["values"])}}


class FakeSheetsClient:
    def __init__(self, spreadsheet=None):
        self.spreadsheet = spreadsheet or FakeSpreadsheet()
        self.opened = []

    def open_by_key(self, key):
        self.opened.append(key)
        return self.spreadsheet


class FakeProvider:
    mode = "service_account"
    scopes = []

    def __init__(self, drive=None, sheets=None, error=None):
        self.drive = drive or FakeDrive()
        self.sheets = sheets or FakeSheetsClient()
        self.error = error
        self.calls = []

    def get_client(self, session_id=None):
        self.calls.append(session_id)
        if self.error:
            raise self.error
        return AuthorizedClient(credentials=None, drive=self.drive, sheets=self.sheets)

    def is_authenticated(self, session_id=None):
        return self.error is None
