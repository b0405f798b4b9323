class AccessLogError(Exception):
    """Base class for every error surfaced to callers."""


class ConfigError(AccessLogError, ValueError):
    """Invalid option values or an unsupported source/destination URL."""


class LogIOError(AccessLogError, OSError):
    """Input could not be read or output could not be written."""
