"""
Gmail authentication utilities.

Loads the OAuth client config and the cached user token from environment
variables (GMAIL_OAUTH_JSON / GMAIL_TOKEN_JSON) or from files, and keeps the
token file up to date after a refresh or a fresh login.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from core.config import DEFAULT_SCOPES

logger = logging.getLogger(__name__)


def _load_json(env_var: str, path: Optional[Path]) -> Optional[dict]:
    raw = os.getenv(env_var)
    source = env_var
    if not raw and path and path.exists():
        raw = path.read_text(encoding="utf-8")
        source = str(path)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid JSON in {source}.") from exc


def load_client_config(credentials_file: Optional[Path] = None) -> dict:
    config = _load_json("GMAIL_OAUTH_JSON", credentials_file)
    if not config:
        raise RuntimeError(
            "Missing Gmail OAuth client config. "
            f"Set GMAIL_OAUTH_JSON or place the client secrets at {credentials_file}."
        )
    return config


def store_token_info(creds: Credentials, token_file: Optional[Path]) -> None:
    if token_file is None:
        logger.warning("No token file configured; the refreshed token is not saved")
        return
    token_file.parent.mkdir(parents=True, exist_ok=True)
    token_file.write_text(creds.to_json(), encoding="utf-8")
    logger.debug(f"Saved Gmail token to {token_file}")


def get_credentials(
    scopes: Optional[list] = None,
    credentials_file: Optional[str] = None,
    token_file: Optional[str] = None,
) -> Credentials:
    scopes = scopes or DEFAULT_SCOPES
    credentials_path = Path(credentials_file).expanduser() if credentials_file else None
    token_path = Path(token_file).expanduser() if token_file else None

    token_info = _load_json("GMAIL_TOKEN_JSON", token_path)
    creds = None
    if token_info:
        creds = Credentials.from_authorized_user_info(token_info, scopes=scopes)

    # If there are no (valid) credentials available, let the user log in.
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            client_config = load_client_config(credentials_path)
            flow = InstalledAppFlow.from_client_config(client_config, scopes)
            creds = flow.run_local_server(port=0)
        store_token_info(creds, token_path)

    return creds


def build_gmail_service(
    scopes: Optional[list] = None,
    credentials_file: Optional[str] = None,
    token_file: Optional[str] = None,
):
    creds = get_credentials(
        scopes=scopes,
        credentials_file=credentials_file,
        token_file=token_file,
    )
    return build("gmail", "v1", credentials=creds, cache_discovery=False)
