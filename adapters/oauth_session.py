"""OAuth2 password-grant session for the PIM REST API."""
from __future__ import annotations

import logging
from typing import Optional

import requests
from oauthlib.oauth2 import LegacyApplicationClient, OAuth2Error
from requests.auth import HTTPBasicAuth
from requests_oauthlib import OAuth2Session

from app.config import Config
from ports.resource_client import NetworkError, UnauthorizedError

logger = logging.getLogger(__name__)

TOKEN_URI = "api/oauth/v1/token"


def create_authenticated_session(config: Config, token: Optional[dict] = None) -> OAuth2Session:
    """
    Create a requests session authenticated against the PIM.

    Uses stored token if given, otherwise requests one with the password
    grant. Expired access tokens are refreshed automatically with the
    refresh token.

    Args:
        config: Application configuration (base URI and API credentials).
        token: Previously issued token (access_token, refresh_token, expires_in).

    Returns:
        OAuth2Session ready to be passed to HttpResourceClient.

    Raises:
        UnauthorizedError: If the token request is rejected.
    """
    token_url = f"{config.base_uri.rstrip('/')}/{TOKEN_URI}"

    session = OAuth2Session(
        client=LegacyApplicationClient(client_id=config.client_id),
        token=token,
        auto_refresh_url=token_url,
        auto_refresh_kwargs={"client_id": config.client_id, "client_secret": config.secret},
        token_updater=_on_token_refreshed,
    )

    if token is None:
        try:
            logger.info(f"Requesting access token for {config.username}")
            session.fetch_token(
                token_url=token_url,
                username=config.username,
                password=config.password,
                auth=HTTPBasicAuth(config.client_id, config.secret),
                timeout=config.timeout,
            )
            logger.info("Authentication successful")
        except OAuth2Error as e:
            raise UnauthorizedError(
                f"Authentication failed: {e.description or e.error}",
                status_code=e.status_code,
                response_body={"error": e.error, "error_description": e.description},
            ) from e
        except requests.RequestException as e:
            raise NetworkError(f"Token request to {token_url} failed: {e}") from e

    return session


def _on_token_refreshed(token: dict) -> None:
    logger.debug(f"Access token refreshed, expires in {token.get('expires_in')}s")
