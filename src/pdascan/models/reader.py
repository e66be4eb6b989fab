"""Reader service output configuration."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class KeyboardEmulationType(StrEnum):
    """How the reader service delivers decoded data.

    With ``DEFAULT`` the service types the barcode into the focused
    input as key strokes; ``NONE`` leaves broadcasts as the only output.
    """

    DEFAULT = "default"
    NONE = "none"


class ReaderOutputConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    enable_keyboard_emulation: KeyboardEmulationType = KeyboardEmulationType.DEFAULT
