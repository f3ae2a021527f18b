"""Error types raised by the catalog core."""

REBUILD_REMEDIATION = "Run 'picturedb refresh' to rebuild derived statistics."


class CatalogError(Exception):
    """Base class for catalog errors."""


class NotFoundError(CatalogError):
    """Raised when a record is required but no record exists for an id or path."""


class DuplicatePathError(CatalogError):
    """Raised when a directory path is already registered."""

    def __init__(self, path: str, existing_id: int | None = None, existing_title: str | None = None):
        self.path = path
        self.existing_id = existing_id
        self.existing_title = existing_title
        if existing_id is None:
            message = f"Path {path} is already registered."
        else:
            message = f'Path {path} is already registered: id={existing_id} title="{existing_title}"'
        super().__init__(message)


class IOFailureError(CatalogError):
    """Raised when listing, removing or stat-ing files fails."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class MissingDirectoryError(IOFailureError):
    """Raised when a catalog path does not exist on disk."""

    def __init__(self, path: str):
        super().__init__(path, "Directory does not exist")


class DriftDetectedError(CatalogError):
    """Raised when the combined view no longer covers every catalog record."""

    def __init__(self, catalog_count: int, view_count: int):
        self.catalog_count = catalog_count
        self.view_count = view_count
        self.remediation = REBUILD_REMEDIATION
        super().__init__(
            f"pictures and pictures_ex are out of sync "
            f"({catalog_count} records, {view_count} with statistics). {REBUILD_REMEDIATION}"
        )
