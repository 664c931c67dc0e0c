"""Exception types raised by foliokit."""

from __future__ import annotations


class FolioError(Exception):
    """Base class for errors raised by the checker and build tasks."""


class MissingFileError(FolioError, FileNotFoundError):
    """A configured page or stylesheet does not exist under the site root."""


class BuildError(FolioError):
    """A build task could not read, copy or write the files it needs."""


class ConfigError(FolioError, ValueError):
    """The configuration file is malformed or names unknown settings."""


class ServerError(FolioError):
    """The preview server could not start."""
