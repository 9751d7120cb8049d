"""Exceptions raised by the people detection pipeline."""
from __future__ import annotations


class PeopleDetectionError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(PeopleDetectionError):
    """Settings, label table or model files are missing or invalid."""


class MalformedOutputError(PeopleDetectionError):
    """A network output tensor does not have the expected layout."""


class TransportError(PeopleDetectionError):
    """The bus device could not be opened or configured."""


class TransportWriteError(TransportError):
    """A payload was not fully written to the bus."""
