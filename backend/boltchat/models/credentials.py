"""Credential models for the settings surface."""

from pydantic import BaseModel, ConfigDict


class Credential(BaseModel):
    """Snapshot of the completion API credential."""

    model_config = ConfigDict(frozen=True)

    value: str = ""

    @property
    def present(self) -> bool:
        return bool(self.value)


class CredentialStatus(BaseModel):
    """What the settings screen is allowed to see: never the raw value."""

    present: bool
    masked: str = ""


class CredentialUpdate(BaseModel):
    """Body of ``PUT /api/settings/credential``."""

    value: str
