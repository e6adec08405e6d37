"""
Credential Resolution
=====================

Selects the API key used for one push invocation.

Account identifiers are normalized (trimmed, lowercased, everything
outside [a-z0-9_-] removed) before lookup, both when bindings are
configured and when a request names an account.

Resolution order:
    1. Non-empty account id -> its exact binding, or fail naming the
       expected binding key (KLAVIYO_API_KEY_<ID>)
    2. Empty account id -> the default key, if configured
    3. Empty account id -> the first configured binding
    4. Otherwise fail

Bindings are read-only configuration shared by concurrent invocations.
"""

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from frameslice.errors import CredentialNotFoundError


logger = logging.getLogger(__name__)


BINDING_KEY_PREFIX = "KLAVIYO_API_KEY_"
DEFAULT_ACCOUNT_ID = "default"

_INVALID_ID_CHARS = re.compile(r"[^a-z0-9_-]")
_INVALID_KEY_CHARS = re.compile(r"[^A-Z0-9]")


@dataclass(frozen=True, slots=True)
class ResolvedCredential:
    """
    Credential selected for one invocation.

    Attributes:
        account_id: Normalized account id, or "default"
        api_key: Secret used for upload
        source: Name of the binding the key came from
    """

    account_id: str
    api_key: str
    source: str

    def __repr__(self) -> str:
        return f"ResolvedCredential(account_id={self.account_id!r}, source={self.source!r})"


def normalize_account_id(raw: Optional[str]) -> str:
    """Trim, lowercase and strip characters outside [a-z0-9_-]."""
    value = str(raw or "").strip().lower()
    return _INVALID_ID_CHARS.sub("", value)


def binding_key(account_id: str) -> str:
    """Name of the binding (environment variable) for an account."""
    return BINDING_KEY_PREFIX + _INVALID_KEY_CHARS.sub("_", str(account_id or "").upper())


def resolve_credential(
    raw_account_id: Optional[str],
    bindings: Mapping[str, str],
    default_key: Optional[str] = None,
    default_source: str = "KLAVIYO_API_KEY",
) -> ResolvedCredential:
    """
    Resolve the credential for an invocation.

    Args:
        raw_account_id: Account id from the request (may be empty)
        bindings: Normalized account id -> API key, in configured order
        default_key: Fallback key used when no account is named
        default_source: Binding name reported for the fallback key

    Returns:
        ResolvedCredential

    Raises:
        CredentialNotFoundError: If no binding matches
    """
    account_id = normalize_account_id(raw_account_id)

    if account_id:
        key = bindings.get(account_id)
        if not key:
            expected = binding_key(account_id)
            raise CredentialNotFoundError(
                f'No API key configured for accountId "{account_id}". Expected env: {expected}'
            )
        return ResolvedCredential(account_id=account_id, api_key=key, source=binding_key(account_id))

    if default_key:
        return ResolvedCredential(
            account_id=DEFAULT_ACCOUNT_ID,
            api_key=default_key,
            source=default_source,
        )

    for first_id, key in bindings.items():
        if key:
            logger.info(f"No accountId given, falling back to first configured account: {first_id}")
            return ResolvedCredential(account_id=first_id, api_key=key, source=binding_key(first_id))

    raise CredentialNotFoundError(
        "No Klaviyo API key found. Configure KLAVIYO_API_KEY or KLAVIYO_API_KEY_<ACCOUNT_ID>."
    )
