"""Google OAuth authentication handling."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from ..config.settings import CredentialsConfig
from ..errors import AuthenticationError

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


class GoogleDriveAuth:
    """Handle authentication for the Google Drive API."""

    def __init__(self, config: CredentialsConfig):
        """Initialize Google Drive authentication.

        Args:
            config: Locations of the client secrets and stored token, plus scopes
        """
        self.config = config
        self.scopes = list(config.scopes)
        self._credentials: Optional[Credentials] = None
        self._service = None

    def _load_json(self, path: Path, what: str) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            raise AuthenticationError(f"{what} file not found: {path}")
        except (OSError, json.JSONDecodeError) as e:
            raise AuthenticationError(f"Could not read {what} file {path}: {e}")

    def load_client_config(self) -> Dict[str, Any]:
        """Load the OAuth client section from the downloaded credentials file.

        Returns:
            The ``installed`` (desktop) or ``web`` client mapping

        Raises:
            AuthenticationError: If the file is missing, unreadable or has neither section
        """
        data = self._load_json(self.config.credentials_path, "Credentials")
        client = data.get("installed") or data.get("web")
        if not client or "client_id" not in client or "client_secret" not in client:
            raise AuthenticationError(
                f"Credentials file {self.config.credentials_path} has no OAuth client section"
            )
        return client

    def _credentials_from_token(self, token: Dict[str, Any], client: Dict[str, Any]) -> Credentials:
        """Build credentials from a stored token.

        Accepts both the google-auth layout (``token``) and the raw OAuth
        response layout (``access_token``).
        """
        access_token = token.get("token") or token.get("access_token")
        refresh_token = token.get("refresh_token")
        if not access_token and not refresh_token:
            raise AuthenticationError(
                f"Token file {self.config.token_path} contains no access or refresh token"
            )

        return Credentials(
            token=access_token,
            refresh_token=refresh_token,
            token_uri=token.get("token_uri") or client.get("token_uri") or DEFAULT_TOKEN_URI,
            client_id=token.get("client_id") or client["client_id"],
            client_secret=token.get("client_secret") or client["client_secret"],
            scopes=token.get("scopes") or self.scopes,
            expiry=self._token_expiry(token),
        )

    @staticmethod
    def _token_expiry(token: Dict[str, Any]) -> Optional[datetime]:
        """Read the access token expiry as a naive UTC datetime.

        ``expiry`` is the ISO timestamp google-auth writes; ``expiry_date``
        is milliseconds since the epoch in the raw OAuth layout.
        """
        try:
            if token.get("expiry"):
                # Same parsing as Credentials.from_authorized_user_info
                return datetime.strptime(token["expiry"].rstrip("Z").split(".")[0],
                                         "%Y-%m-%dT%H:%M:%S")
            if token.get("expiry_date"):
                return datetime.fromtimestamp(int(token["expiry_date"]) / 1000,
                                              tz=timezone.utc).replace(tzinfo=None)
        except (TypeError, ValueError) as e:
            logger.warning(f"⚠️ Ignoring unreadable token expiry: {e}")
        return None

    def _save_token(self, credentials: Credentials):
        """Save token to disk."""
        token_path = self.config.token_path
        token_path.parent.mkdir(parents=True, exist_ok=True)
        with open(token_path, 'w', encoding='utf-8') as f:
            f.write(credentials.to_json())

    def get_credentials(self) -> Credentials:
        """Get usable credentials, refreshing the access token when needed.

        Returns:
            Authorized user credentials

        Raises:
            AuthenticationError: If the stored token is missing, invalid or cannot be refreshed
        """
        if self._credentials is not None and self._credentials.valid:
            return self._credentials

        client = self.load_client_config()
        token = self._load_json(self.config.token_path, "Token")
        credentials = self._credentials_from_token(token, client)

        if not credentials.valid and credentials.refresh_token:
            logger.info("🔄 Access token expired, refreshing...")
            try:
                credentials.refresh(Request())
            except RefreshError as e:
                raise AuthenticationError(f"Token refresh failed: {e}")
            self._save_token(credentials)
            logger.info("✅ Token refreshed")
        elif not credentials.valid:
            raise AuthenticationError(
                f"Token in {self.config.token_path} has expired and has no refresh token"
            )

        self._credentials = credentials
        return credentials

    def get_drive_service(self):
        """Get authenticated Drive v3 service."""
        if self._service is None:
            self._service = build("drive", "v3", credentials=self.get_credentials(),
                                  cache_discovery=False)
        return self._service

    def run_setup_flow(self, open_browser: bool = True, port: int = 0) -> Credentials:
        """Run the interactive installed-app flow and store the resulting token.

        Args:
            open_browser: Whether to open the consent page automatically
            port: Local port for the redirect listener (0 picks a free one)

        Returns:
            Freshly authorized credentials
        """
        # Validate the secrets file first so the error names the real problem
        self.load_client_config()

        flow = InstalledAppFlow.from_client_secrets_file(
            str(self.config.credentials_path), scopes=self.scopes
        )
        credentials = flow.run_local_server(port=port, open_browser=open_browser,
                                            access_type="offline", prompt="consent")
        self._save_token(credentials)
        logger.info(f"✅ Token saved to: {self.config.token_path}")

        self._credentials = credentials
        self._service = None
        return credentials
