class DirectoryError(Exception):
    """Base class for organizational unit management errors."""


class InvalidDN(DirectoryError, ValueError):
    """DN is empty or not shaped the way the operation requires."""


class PolicyViolation(DirectoryError):
    """DN lies outside the authorized search base."""


class AlreadyExists(DirectoryError):
    """Create target is already present in the directory."""


class MissingParent(DirectoryError):
    """Required ancestor is absent and auto-creation is disabled."""


class Inconsistency(DirectoryError):
    """Search returned an impossible number of entries."""


class TransportError(DirectoryError):
    """Connection, bind or protocol-level failure reported by the directory."""
