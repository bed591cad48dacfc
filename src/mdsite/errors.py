"""Exception types raised by the build pipeline"""


class MdsiteError(Exception):
    """Base class for every error that should abort a build with a message."""


class ConfigError(MdsiteError, ValueError):
    """Site or docs configuration is missing, malformed, or inconsistent."""


class BuildError(MdsiteError, RuntimeError):
    """A build step failed; the message names the offending source."""
