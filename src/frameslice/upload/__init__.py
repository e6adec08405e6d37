"""
Upload Module
=============

Credential selection and the remote image API.

Components:
    - resolve_credential: Account id -> API key for one invocation
    - ImageUploader: Protocol for upload backends
    - KlaviyoImageUploader: Klaviyo Images API (production)
    - MockImageUploader: Deterministic URLs for local runs and tests
"""

from frameslice.upload.client import (
    ImageUploader,
    KlaviyoImageUploader,
    MockImageUploader,
)
from frameslice.upload.credentials import (
    ResolvedCredential,
    binding_key,
    normalize_account_id,
    resolve_credential,
)

__all__ = [
    "ImageUploader",
    "KlaviyoImageUploader",
    "MockImageUploader",
    "ResolvedCredential",
    "binding_key",
    "normalize_account_id",
    "resolve_credential",
]
