"""Request and response payloads for the credential service."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..formatting import describe_scheme, format_timestamp_ms
from ..guard import IssuanceOutcome
from ..models import GeneratedCredential, SchemeTag, VerificationMatch


class CredentialRequest(BaseModel):
    """Parameters for minting one credential.

    Only the fields of the chosen ``auth_type`` are read. ``start_time`` and
    ``end_time`` are accepted as an alternative to ``hours``/``minutes``
    (duration) and to the ``end_*`` fields (period).
    """

    auth_type: SchemeTag = Field(alias="authType")
    admin_secret: Optional[str] = Field(default=None, alias="adminSecret")
    times: Optional[int] = None
    hours: Optional[int] = None
    minutes: Optional[int] = None
    end_year: Optional[int] = Field(default=None, alias="endYear")
    end_month: Optional[int] = Field(default=None, alias="endMonth")
    end_day: Optional[int] = Field(default=None, alias="endDay")
    end_hour: Optional[int] = Field(default=None, alias="endHour")
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class CredentialResponse(BaseModel):
    """Outbound view of an issued code.

    A reused code keeps ``message`` and ``label`` unset when its scheme can
    no longer be recovered, e.g. after it expired.
    """

    code: str
    expires_at: Optional[str] = Field(default=None, alias="expiresAt")
    message: Optional[str] = None
    auth_type: SchemeTag = Field(alias="authType")
    label: Optional[str] = None
    reused: bool = False

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_credential(
        cls,
        credential: GeneratedCredential,
        *,
        auth_type: SchemeTag | None = None,
        reused: bool = False,
    ) -> "CredentialResponse":
        return cls(
            code=credential.code,
            expires_at=credential.expires_at,
            message=credential.message,
            auth_type=auth_type or credential.scheme.tag,
            label=describe_scheme(credential.scheme),
            reused=reused,
        )

    @classmethod
    def from_outcome(
        cls,
        outcome: IssuanceOutcome,
        auth_type: SchemeTag,
        *,
        match: VerificationMatch | None = None,
    ) -> "CredentialResponse":
        """Build a response for a guarded issuance.

        ``match`` describes a reused code whose credential was not minted by
        this call.
        """

        if outcome.credential is not None:
            return cls.from_credential(
                outcome.credential, auth_type=auth_type, reused=outcome.reused
            )
        if match is None:
            return cls(code=outcome.code, auth_type=auth_type, reused=outcome.reused)
        expires_at = format_timestamp_ms(match.expires_at_ms)
        return cls(
            code=outcome.code,
            expires_at=expires_at,
            message=f"Previously issued code, valid until {expires_at}",
            auth_type=auth_type,
            label=describe_scheme(match.scheme),
            reused=outcome.reused,
        )


__all__ = ["CredentialRequest", "CredentialResponse"]
