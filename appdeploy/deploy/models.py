"""Device models."""

from pydantic import BaseModel, ConfigDict


class DeviceRecord(BaseModel):
    """One deployment target reported by ``WinAppDeployCmd devices``."""

    model_config = ConfigDict(frozen=True)

    index: int  # position in the latest enumeration, not a stable id
    name: str
    type: str = "device"
    ip: str
    guid: str

    @property
    def display_text(self) -> str:
        """Text used for listing and for emulator matching."""
        return f"{self.index}. {self.name} ({self.type})"

    def __str__(self) -> str:
        return self.display_text
