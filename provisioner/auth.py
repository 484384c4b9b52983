"""Credential loading and Google API service construction.

Two modes are supported:

``service_account``
    Credentials come from a service account JSON key (``credentials.json`` in
    the working directory by default).  The key is validated and its private
    key normalised before use.

``oauth``
    Installed-app OAuth flow using a client secret file.  The resulting token
    is cached and refreshed on later runs.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from provisioner.errors import CredentialsError, RemoteOperationError
from provisioner.google_credentials import load_service_account_data

logger = logging.getLogger(__name__)

SCOPES: Sequence[str] = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
)

AUTH_MODE_SERVICE_ACCOUNT = "service_account"
AUTH_MODE_OAUTH = "oauth"
AUTH_MODES = (AUTH_MODE_SERVICE_ACCOUNT, AUTH_MODE_OAUTH)

__all__ = [
    "AUTH_MODES",
    "AUTH_MODE_OAUTH",
    "AUTH_MODE_SERVICE_ACCOUNT",
    "GoogleServices",
    "SCOPES",
    "build_services",
    "load_credentials",
    "load_oauth_credentials",
    "load_service_account_credentials",
]


@dataclass
class GoogleServices:
    sheets: object
    drive: object


def load_service_account_credentials(path: Path, scopes: Sequence[str] = SCOPES):
    if not path.exists():
        raise CredentialsError(f"Service account file not found: {path}")
    payload = load_service_account_data(path)
    try:
        credentials = service_account.Credentials.from_service_account_info(payload, scopes=list(scopes))
    except ValueError as exc:
        raise CredentialsError(f"Invalid service account credentials: {exc}") from exc
    logger.info("Authentication client created for %s", payload.get("client_email"))
    return credentials


def load_oauth_credentials(secret_path: Path, token_path: Optional[Path], scopes: Sequence[str] = SCOPES):
    """Return user credentials, running the browser flow when no valid token exists.

    Failures while reading the cached token, refreshing it or completing the
    browser flow are raised as :class:`CredentialsError`.
    """

    if not secret_path.exists():
        raise CredentialsError(f"Client secret file not found: {secret_path}")

    credentials = None
    if token_path and token_path.exists():
        try:
            credentials = Credentials.from_authorized_user_file(str(token_path), list(scopes))
        except ValueError as exc:
            raise CredentialsError(f"Cached OAuth token {token_path} is invalid: {exc}") from exc

    if not credentials or not credentials.valid:
        if credentials and credentials.expired and credentials.refresh_token:
            logger.info("Refreshing cached OAuth token")
            try:
                credentials.refresh(Request())
            except (GoogleAuthError, OSError) as exc:
                raise CredentialsError(f"Could not refresh OAuth token: {exc}") from exc
        else:
            try:
                flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), list(scopes))
                credentials = flow.run_local_server(port=0)
            except (ValueError, OSError, GoogleAuthError, OAuth2Error) as exc:
                raise CredentialsError(f"OAuth authorization failed: {exc}") from exc
        if token_path:
            try:
                os.makedirs(token_path.parent, exist_ok=True)
                with token_path.open("w", encoding="utf-8") as handle:
                    handle.write(credentials.to_json())
            except OSError as exc:
                raise CredentialsError(f"Could not cache OAuth token at {token_path}: {exc}") from exc
            logger.debug("OAuth token cached at %s", token_path)
    return credentials


def load_credentials(
    mode: str,
    *,
    credential_path: Path,
    client_secret_path: Optional[Path] = None,
    token_path: Optional[Path] = None,
):
    if mode == AUTH_MODE_SERVICE_ACCOUNT:
        return load_service_account_credentials(credential_path)
    if mode == AUTH_MODE_OAUTH:
        if client_secret_path is None:
            raise CredentialsError("OAuth mode requires a client secret file")
        return load_oauth_credentials(client_secret_path, token_path)
    raise CredentialsError(f"Unknown auth mode: {mode!r} (expected one of {', '.join(AUTH_MODES)})")


def build_services(credentials) -> GoogleServices:
    """Construct the Sheets v4 and Drive v3 services for ``credentials``."""

    try:
        sheets = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        drive = build("drive", "v3", credentials=credentials, cache_discovery=False)
    except Exception as exc:  # pragma: no cover - HTTP / discovery error guard
        raise RemoteOperationError(f"Could not build Google API services: {exc}") from exc
    return GoogleServices(sheets=sheets, drive=drive)
