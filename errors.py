"""
Exception hierarchy for the WeiDU mod packager.

Malformed declarations inside mod files are never errors: they are treated as
absent values. Everything here aborts the run with exit code 1.
"""


class PackagerError(Exception):
    """Base class for all failures that end a packaging run."""


class InputError(PackagerError):
    """Invalid command line token or unsupported parameter value."""


class DiscoveryError(PackagerError):
    """No usable .tp2 file was found under the scan root."""


class CollaboratorError(PackagerError):
    """An external collaborator (fetcher, archive writer) failed."""


class FetchError(CollaboratorError):
    pass


class ArchiveError(CollaboratorError):
    pass
