"""Exception hierarchy for Age of Focus."""


class AgeOfFocusError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(AgeOfFocusError, ValueError):
    """A ``SessionConfig`` (or the settings that build one) is invalid."""


class InvalidSessionState(AgeOfFocusError, ValueError):
    """A snapshot handed to ``restore()`` breaks a session invariant."""


class ActionError(AgeOfFocusError, ValueError):
    """A focus action refers to a resource the game model doesn't have."""
