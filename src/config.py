"""
Configuration module for the Substation Repair Recorder
Environment-agnostic: Works locally, in Docker, and on Google Cloud
Loads environment variables once and freezes them into a Settings object
"""
import os
import json
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

from repair.errors import ConfigurationError

# Get project root directory (parent of src/)
PROJECT_ROOT = Path(__file__).parent.parent

# Load environment variables from .env file (if exists - local dev only)
env_file = PROJECT_ROOT / '.env'
if env_file.exists():
    load_dotenv(env_file)

# ═══════════════════════════════════════════════════════════════════
# ENVIRONMENT DETECTION
# ═══════════════════════════════════════════════════════════════════

def detect_environment() -> str:
    """
    Detect which environment we're running in

    Returns:
        'cloud_run', 'kubernetes', 'docker', or 'local'
    """
    # Cloud Run sets K_SERVICE
    if os.getenv('K_SERVICE'):
        return 'cloud_run'

    # Kubernetes sets KUBERNETES_SERVICE_HOST
    if os.getenv('KUBERNETES_SERVICE_HOST'):
        return 'kubernetes'

    # Docker typically has /.dockerenv file
    if Path('/.dockerenv').exists():
        return 'docker'

    if os.getenv('GOOGLE_CLOUD_PROJECT') or os.getenv('GCP_PROJECT'):
        return 'cloud_run'

    return 'local'

RUNTIME_ENVIRONMENT = detect_environment()

# ═══════════════════════════════════════════════════════════════════
# WRITABLE PATHS - Handle containerized environments
# ═══════════════════════════════════════════════════════════════════

def get_writable_path(folder_name: str) -> str:
    """Get a writable path that works in all environments"""
    env_path = os.getenv(folder_name.upper() + '_FOLDER')
    if env_path:
        if os.path.isabs(env_path):
            path = Path(env_path)
        else:
            path = PROJECT_ROOT / env_path
    else:
        path = PROJECT_ROOT / folder_name

    # In containers, /app might be read-only; use /tmp as fallback
    if not path.exists():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except (PermissionError, OSError):
            path = Path(tempfile.gettempdir()) / 'repair_recorder' / folder_name
            path.mkdir(parents=True, exist_ok=True)

    return str(path)

# ═══════════════════════════════════════════════════════════════════
# CONFIGURATION VALUES
# ═══════════════════════════════════════════════════════════════════

# Google authorization strategy: service_account | refresh_token | session
GOOGLE_AUTH_MODE = os.getenv('GOOGLE_AUTH_MODE', 'service_account').strip().lower()

# Service account credentials (one of: file path, JSON string, email + key)
GOOGLE_SHEETS_CREDENTIALS_FILE = os.getenv('GOOGLE_SHEETS_CREDENTIALS_FILE', '')
GOOGLE_SHEETS_CREDENTIALS_JSON = os.getenv('GOOGLE_SHEETS_CREDENTIALS_JSON', '')
GOOGLE_SERVICE_ACCOUNT_EMAIL = os.getenv('GOOGLE_SERVICE_ACCOUNT_EMAIL', '')
# Private keys pasted into env vars usually carry literal "\n" sequences
GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY = os.getenv('GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY', '').replace('\\n', '\n')

# OAuth client (refresh_token and session modes)
GOOGLE_CLIENT_ID = os.getenv('GOOGLE_CLIENT_ID', '')
GOOGLE_CLIENT_SECRET = os.getenv('GOOGLE_CLIENT_SECRET', '')
GOOGLE_REFRESH_TOKEN = os.getenv('GOOGLE_REFRESH_TOKEN', '')
GOOGLE_USE_FULL_DRIVE_SCOPE = os.getenv('GOOGLE_USE_FULL_DRIVE_SCOPE', 'false').lower() == 'true'

# Targets
GOOGLE_SHEET_ID = os.getenv('GOOGLE_SHEET_ID', '')
GOOGLE_DRIVE_ROOT_FOLDER_ID = os.getenv('GOOGLE_DRIVE_ROOT_FOLDER_ID', '')
APP_BASE_URL = os.getenv('APP_BASE_URL', 'http://localhost:3000').rstrip('/')

# Google Gemini Configuration (document extraction)
GOOGLE_API_KEY = os.getenv('GOOGLE_API_KEY') or os.getenv('GEMINI_API_KEY', '')
GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-2.5-flash')

# Sheet / Drive behaviour
SHEET_INCLUDE_DETAILS_AI = os.getenv('SHEET_INCLUDE_DETAILS_AI', 'true').lower() == 'true'
DRIVE_SHARE_PUBLICLY = os.getenv('DRIVE_SHARE_PUBLICLY', 'true').lower() == 'true'
REPORT_TIMEZONE = os.getenv('REPORT_TIMEZONE', 'Asia/Bangkok')

# Session mode
SESSION_SECRET = os.getenv('SESSION_SECRET', '')
SESSION_TTL_MINUTES = int(os.getenv('SESSION_TTL_MINUTES', '480'))
SESSION_COOKIE_NAME = os.getenv('SESSION_COOKIE_NAME', 'repair_session')

# API server configuration
API_PORT = int(os.getenv('API_PORT', '3000'))
API_HOST = os.getenv('API_HOST', '0.0.0.0')

# Cloud Run sets PORT to the single port it routes traffic to
_cloud_run_port = os.getenv('PORT')
if _cloud_run_port:
    API_PORT = int(_cloud_run_port)

API_CORS_ORIGINS = os.getenv('API_CORS_ORIGINS', 'http://localhost:3000').split(',')

# Monitoring Configuration
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE_MAX_MB = int(os.getenv('LOG_FILE_MAX_MB', '10'))
LOG_FILE_BACKUP_COUNT = int(os.getenv('LOG_FILE_BACKUP_COUNT', '5'))
LOG_FOLDER = get_writable_path('logs')
TEMP_FOLDER = get_writable_path('temp')

AUTH_MODES = ('service_account', 'refresh_token', 'session')


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup and read-only afterwards."""
    auth_mode: str = 'service_account'
    credentials_file: str = ''
    credentials_json: str = ''
    service_account_email: str = ''
    service_account_private_key: str = ''
    client_id: str = ''
    client_secret: str = ''
    refresh_token: str = ''
    use_full_drive_scope: bool = False
    sheet_id: str = ''
    drive_root_folder_id: str = ''
    base_url: str = 'http://localhost:3000'
    google_api_key: str = ''
    gemini_model: str = 'gemini-2.5-flash'
    include_details_ai: bool = True
    share_publicly: bool = True
    timezone: str = 'Asia/Bangkok'
    session_secret: str = ''
    session_ttl_minutes: int = 480
    session_cookie_name: str = 'repair_session'
    api_host: str = '0.0.0.0'
    api_port: int = 3000
    cors_origins: List[str] = field(default_factory=lambda: ['http://localhost:3000'])
    log_level: str = 'INFO'
    log_folder: str = 'logs'
    log_file_max_mb: int = 10
    log_file_backup_count: int = 5
    temp_folder: str = field(default_factory=tempfile.gettempdir)
    runtime_environment: str = 'local'

    @property
    def redirect_uri(self) -> str:
        return f"{self.base_url}/api/auth/callback"

    def require_sheet_id(self) -> str:
        if not self.sheet_id:
            raise ConfigurationError("GOOGLE_SHEET_ID is not set")
        return self.sheet_id

    def require_root_folder_id(self) -> str:
        if not self.drive_root_folder_id:
            raise ConfigurationError("GOOGLE_DRIVE_ROOT_FOLDER_ID is not set")
        return self.drive_root_folder_id


def _resolve_credentials_file() -> str:
    """
    Resolve a service-account key file path.
    Relative paths are taken from the project root; config/credentials.json
    is used when nothing else is configured.
    """
    creds_file = GOOGLE_SHEETS_CREDENTIALS_FILE
    if creds_file:
        if not os.path.isabs(creds_file):
            creds_file = str(PROJECT_ROOT / creds_file)
        return creds_file

    default_path = PROJECT_ROOT / 'config' / 'credentials.json'
    if default_path.exists():
        return str(default_path)
    return ''


def build_settings() -> Settings:
    """Freeze the module-level values into a Settings object."""
    return Settings(
        auth_mode=GOOGLE_AUTH_MODE,
        credentials_file=_resolve_credentials_file(),
        credentials_json=GOOGLE_SHEETS_CREDENTIALS_JSON,
        service_account_email=GOOGLE_SERVICE_ACCOUNT_EMAIL,
        service_account_private_key=GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY,
        client_id=GOOGLE_CLIENT_ID,
        client_secret=GOOGLE_CLIENT_SECRET,
        refresh_token=GOOGLE_REFRESH_TOKEN,
        use_full_drive_scope=GOOGLE_USE_FULL_DRIVE_SCOPE,
        sheet_id=GOOGLE_SHEET_ID,
        drive_root_folder_id=GOOGLE_DRIVE_ROOT_FOLDER_ID,
        base_url=APP_BASE_URL,
        google_api_key=GOOGLE_API_KEY,
        gemini_model=GEMINI_MODEL,
        include_details_ai=SHEET_INCLUDE_DETAILS_AI,
        share_publicly=DRIVE_SHARE_PUBLICLY,
        timezone=REPORT_TIMEZONE,
        session_secret=SESSION_SECRET,
        session_ttl_minutes=SESSION_TTL_MINUTES,
        session_cookie_name=SESSION_COOKIE_NAME,
        api_host=API_HOST,
        api_port=API_PORT,
        cors_origins=[o.strip() for o in API_CORS_ORIGINS if o.strip()],
        log_level=LOG_LEVEL,
        log_folder=LOG_FOLDER,
        log_file_max_mb=LOG_FILE_MAX_MB,
        log_file_backup_count=LOG_FILE_BACKUP_COUNT,
        temp_folder=TEMP_FOLDER,
        runtime_environment=RUNTIME_ENVIRONMENT,
    )


def validate_config(settings: Optional[Settings] = None) -> bool:
    """Validate that all required configuration is present for the chosen auth mode"""
    settings = settings or build_settings()
    errors = []

    if settings.auth_mode not in AUTH_MODES:
        errors.append(
            f"GOOGLE_AUTH_MODE must be one of {', '.join(AUTH_MODES)} (got '{settings.auth_mode}')"
        )

    if not settings.sheet_id:
        errors.append("GOOGLE_SHEET_ID is not set")

    if not settings.drive_root_folder_id:
        errors.append("GOOGLE_DRIVE_ROOT_FOLDER_ID is not set")

    if settings.auth_mode == 'service_account':
        has_file = bool(settings.credentials_file)
        if has_file and not os.path.exists(settings.credentials_file):
            errors.append(f"Google credentials file not found: {settings.credentials_file}")
        if settings.credentials_json:
            try:
                json.loads(settings.credentials_json)
            except ValueError:
                errors.append("GOOGLE_SHEETS_CREDENTIALS_JSON is not valid JSON")
        has_pair = bool(settings.service_account_email and settings.service_account_private_key)
        uses_adc = settings.runtime_environment in ('cloud_run', 'kubernetes')
        if not (has_file or settings.credentials_json or has_pair or uses_adc):
            errors.append(
                "No service account credentials found. Set one of:\n"
                "  - GOOGLE_SHEETS_CREDENTIALS_FILE (path to JSON file)\n"
                "  - GOOGLE_SHEETS_CREDENTIALS_JSON (JSON string)\n"
                "  - GOOGLE_SERVICE_ACCOUNT_EMAIL + GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY"
            )

    if settings.auth_mode in ('refresh_token', 'session'):
        if not settings.client_id:
            errors.append("GOOGLE_CLIENT_ID is not set")
        if not settings.client_secret:
            errors.append("GOOGLE_CLIENT_SECRET is not set")

    if settings.auth_mode == 'session' and not settings.session_secret:
        errors.append("SESSION_SECRET is not set")

    if errors:
        raise ConfigurationError("Configuration errors:\n" + "\n".join(errors))

    return True


if __name__ == "__main__":
    try:
        validate_config()
        print("[OK] Configuration validated successfully")
    except ConfigurationError as e:
        print(f"[FAIL] Configuration validation failed:\n{e}")
