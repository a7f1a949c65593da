# app/errors.py


class TouchTyperError(Exception):
    """Base class for errors the CLI reports to the user."""


class ConfigError(TouchTyperError):
    pass


class TextSourceError(TouchTyperError):
    pass


class GenerationError(TextSourceError):
    """A text source failed to produce a passage."""


class GenerationTimeout(GenerationError):
    pass


class StatsError(TouchTyperError):
    pass
