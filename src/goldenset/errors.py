"""
Exception classes for goldenset.

Allocation, sampling, statistics and deduplication never raise for size or
coverage shortfalls; they return smaller results instead. The errors below
belong to the boundaries: configuration, record validation, the live store
and the published version storage.
"""


class GoldensetError(Exception):
    """Base exception for all goldenset errors.

    Catching this exception will catch every error raised deliberately by the
    package. The CLI turns it into a logged message and exit status 1.
    """
    pass


class ConfigurationError(GoldensetError):
    """Raised when the YAML configuration is invalid or incomplete."""
    pass


class RecordValidationError(GoldensetError):
    """Raised when a record fails boundary validation.

    Attributes:
        issues: One entry per problem, formatted as ``"<path>: <message>"``
                where path is dotted (``input.text``) or ``<root>``.
    """

    def __init__(self, issues: list[str]):
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))


class NotFoundError(GoldensetError):
    """Raised when a dataset version (or stored record) does not exist."""

    def __init__(self, name: str, message: str | None = None):
        self.name = name
        super().__init__(message or f"Dataset version not found: {name}")


class VersionParseError(GoldensetError):
    """Raised when a published version holds malformed records.

    The diff engine surfaces this with the offending version name; no partial
    diff is produced.
    """

    def __init__(self, name: str, path: str, line: int, error: str):
        self.name = name
        self.path = path
        self.line = line
        self.error = error
        super().__init__(
            f"Failed to parse version '{name}' ({path}, line {line}): {error}"
        )


class VersionExistsError(GoldensetError):
    """Raised when publishing to a version name that is already taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Dataset version already exists: {name}")


class InconsistentReferenceError(GoldensetError):
    """Raised when labels reference interactions outside the published set."""

    def __init__(self, interaction_ids: list[str]):
        self.interaction_ids = list(interaction_ids)
        preview = ", ".join(self.interaction_ids[:5])
        super().__init__(
            f"Found {len(self.interaction_ids)} labels for interactions not in "
            f"sample (e.g. {preview})"
        )


class UnsupportedFormatError(GoldensetError):
    """Raised when an export format is requested that is not implemented."""
    pass
