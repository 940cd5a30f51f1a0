"""
auth/oauth.py -- Authlib Google sign-in configuration.

Reads configuration from core.config.get_settings() at module load. Google
is registered only when both client ID and secret are configured; otherwise
the /auth/google routes answer 404.

Security notes:
  [H1] Email verification is mandatory. extract_google_profile() raises
       ValueError unless the id_token says email_verified=true. An unverified
       address could belong to someone else, and AuthService.oauth_login()
       links Google identities to existing accounts by email.

  OAuth state parameter (CSRF protection) is handled by authlib automatically
  via Starlette SessionMiddleware.

Only the identity is used: Google's own access/refresh tokens are discarded
after the callback. Refreshing provider tokens is out of scope.

Layer rule: no imports from api/ or content/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging

from authlib.integrations.starlette_client import OAuth

from auth.models import OAuthProfile
from core.config import get_settings

logger = logging.getLogger("inkwell.auth.oauth")

oauth = OAuth()

_cfg = get_settings()

if _cfg.google_oauth_enabled:
    oauth.register(
        name="google",
        client_id=_cfg.google_client_id,
        client_secret=_cfg.google_client_secret,
        server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
        client_kwargs={"scope": "openid email profile"},
    )
    logger.info("Google OAuth provider registered")


def extract_google_profile(token: dict) -> OAuthProfile:
    """Build an OAuthProfile from the token dict authlib returns after code exchange.

    [H1] Raises ValueError if userinfo is missing, the email is unverified, or
    the sub/email claims are absent. The caller turns that into a failed login.
    """
    userinfo = token.get("userinfo")
    if not userinfo:
        raise ValueError("google OAuth: no userinfo in token response")

    if not userinfo.get("email_verified", False):
        raise ValueError(
            "google OAuth: email is not verified. "
            "The provider must confirm email ownership before login is allowed."
        )

    email = userinfo.get("email")
    subject_id = userinfo.get("sub")
    if not email or not subject_id:
        raise ValueError("google OAuth: missing email or sub claim in userinfo")

    return OAuthProfile(
        google_id=str(subject_id),
        email=email,
        name=userinfo.get("name") or email.split("@")[0],
        avatar=userinfo.get("picture"),
    )
