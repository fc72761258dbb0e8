class EtuoviImportError(Exception):
    """Base class for every failure of an Etuovi import.

    ``status_code`` is the HTTP status the host application should answer with.
    """

    kind = "error"
    status_code = 500
    transient = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUrlError(EtuoviImportError):
    kind = "invalid-input"
    status_code = 400

    def __init__(self, message: str = "URL must be a valid etuovi.com property listing URL"):
        super().__init__(message)


class ListingNotFoundError(EtuoviImportError):
    kind = "not-found"
    status_code = 404

    def __init__(self, message: str = "Property listing not found"):
        super().__init__(message)


class ListingBlockedError(EtuoviImportError):
    kind = "blocked"
    status_code = 503
    transient = True

    def __init__(self, message: str = "Access to etuovi.com was blocked. Please try again later."):
        super().__init__(message)


class FetchTimeoutError(EtuoviImportError):
    kind = "timeout"
    status_code = 503
    transient = True

    def __init__(self, message: str = "Request to etuovi.com timed out. Please try again."):
        super().__init__(message)


class SourceUnavailableError(EtuoviImportError):
    kind = "unavailable"
    status_code = 503
    transient = True

    def __init__(self, message: str = "Failed to fetch property data from etuovi.com"):
        super().__init__(message)


class StructureChangedError(EtuoviImportError):
    """The page was fetched but the expected data could not be found in it."""

    kind = "structure-changed"
    status_code = 500

    def __init__(
        self,
        message: str = "Could not extract data from listing. The page structure may have changed.",
    ):
        super().__init__(message)
