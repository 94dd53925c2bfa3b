"""Exception types raised by arborlight."""


class ArborlightError(Exception):
    """Base class for arborlight errors."""


class MorphStateError(ArborlightError):
    """An event was applied to the morph engine in a phase that does not accept it."""
