#!/usr/bin/env python3
"""
Launcher script for the Repair Recorder API
Handles path setup, validates configuration and starts uvicorn
"""
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

import uvicorn

import config
from api.main import create_app
from repair.errors import ConfigurationError
from utils.logger import get_logger


def main():
    settings = config.build_settings()
    logger = get_logger(
        log_level=settings.log_level,
        log_dir=settings.log_folder,
        max_mb=settings.log_file_max_mb,
        backup_count=settings.log_file_backup_count,
    )

    try:
        config.validate_config(settings)
    except ConfigurationError as e:
        logger.critical(f"Configuration validation failed:\n{e}", component="Main")
        sys.exit(1)

    if settings.auth_mode == "refresh_token" and not settings.refresh_token:
        logger.warning(
            f"GOOGLE_REFRESH_TOKEN is not set. Visit {settings.base_url}/api/auth/init to obtain one.",
            component="Main",
        )

    app = create_app(settings=settings, logger=logger)
    logger.info(f"REST API running on http://{settings.api_host}:{settings.api_port}", component="Main")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="info")


if __name__ == "__main__":
    main()
