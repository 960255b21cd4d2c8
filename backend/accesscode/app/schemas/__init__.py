"""Pydantic payloads exchanged with callers of the credential service."""

from .credentials import CredentialRequest, CredentialResponse

__all__ = ["CredentialRequest", "CredentialResponse"]
