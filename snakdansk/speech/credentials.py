"""Google Cloud service account credentials from config."""

import logging

from google.oauth2 import service_account

from ..config import SnakDanskConfig

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def load_google_credentials(config: SnakDanskConfig) -> service_account.Credentials:
    """Load credentials from a key file, or from the inline email/private key settings.

    Raises:
        ValueError: If neither form is configured
        FileNotFoundError: If the configured key file does not exist
    """
    credentials_path = config.get_google_credentials_path()
    if credentials_path:
        logger.info(f"Loading Google credentials from: {credentials_path}")
        return service_account.Credentials.from_service_account_file(credentials_path, scopes=SCOPES)

    info = config.get_google_credentials_info()
    logger.info(f"Loading Google credentials for: {info['client_email']}")
    return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
