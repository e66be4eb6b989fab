"""Handle to the vendor reader service.

The real service is a closed SDK.  :class:`ReaderManager` captures the
two calls the relay needs; :class:`InMemoryReaderManager` keeps the
configuration locally for hosts without the SDK and for tests.
"""

from __future__ import annotations

import abc
import logging

from pdascan.models.reader import KeyboardEmulationType, ReaderOutputConfiguration

_logger = logging.getLogger(__name__)


class ReaderManager(abc.ABC):
    @abc.abstractmethod
    def get_output_configuration(self) -> ReaderOutputConfiguration:
        """Read the reader's current output configuration."""

    @abc.abstractmethod
    def set_output_configuration(self, config: ReaderOutputConfiguration) -> None:
        """Apply *config*.  Implementations raise :class:`~pdascan.exceptions.ReaderError`."""

    def disable_keyboard_emulation(self) -> ReaderOutputConfiguration:
        """Route decoded data to broadcasts only and return the applied configuration."""
        current = self.get_output_configuration()
        updated = current.model_copy(update={"enable_keyboard_emulation": KeyboardEmulationType.NONE})
        self.set_output_configuration(updated)
        return updated


class InMemoryReaderManager(ReaderManager):
    def __init__(self, initial: ReaderOutputConfiguration | None = None) -> None:
        self._config = initial or ReaderOutputConfiguration()

    def get_output_configuration(self) -> ReaderOutputConfiguration:
        return self._config

    def set_output_configuration(self, config: ReaderOutputConfiguration) -> None:
        _logger.debug("Reader output configuration set keyboard_emulation=%s", config.enable_keyboard_emulation)
        self._config = config
