"""APIUS bearer scheme for the Authorization header.

Clients present the session token as::

    Authorization: APIUS token=AQIC5wM2LY4SfcwGgIvSF9oEp5y7rZl...

and the gateway answers a rejected token with::

    WWW-Authenticate: APIUS realm="apius"
"""
from __future__ import annotations
from typing import Optional

from .models import APIUS_SCHEME, AuthChallenge

TOKEN_PREFIX = "token="


class ChallengeCodec:
    """Encode challenges and decode credentials for the APIUS scheme.

    Args:
        realm: Realm advertised in challenges; omitted when None/empty
    """

    scheme = APIUS_SCHEME

    def __init__(self, realm: Optional[str] = None):
        self.realm = realm or None

    def encode_challenge(self) -> str:
        """Value for a ``WWW-Authenticate`` header."""
        if self.realm:
            escaped = self.realm.replace("\\", "\\\\").replace('"', '\\"')
            return f'{self.scheme} realm="{escaped}"'
        return self.scheme

    def decode_credential(self, raw_value: str) -> AuthChallenge:
        """Decode the credential part of an APIUS Authorization value.

        Strips only the first ``token=``; the remainder is kept verbatim
        because provisioner tokens may contain ``=`` themselves.
        """
        return AuthChallenge(token=raw_value.replace(TOKEN_PREFIX, "", 1), realm=self.realm, scheme=self.scheme)

    def parse_authorization(self, header: Optional[str]) -> Optional[AuthChallenge]:
        """Decode a full Authorization header.

        Returns:
            AuthChallenge, or None when the header is absent, uses another
            scheme, or carries an empty token
        """
        if not header:
            return None
        scheme, _, credential = header.strip().partition(" ")
        if scheme.lower() != self.scheme.lower():
            return None
        challenge = self.decode_credential(credential.strip())
        if not challenge.token:
            return None
        return challenge
