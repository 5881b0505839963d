# umrah_core/errors.py


class UmrahGuideError(Exception):
    """Base class for errors raised by the guide and its tooling."""


class ContentLoadError(UmrahGuideError):
    """A content document could not be parsed into its table."""

    def __init__(self, document: str, reason: str):
        self.document = document
        self.reason = reason
        super().__init__(f"Failed to load {document}: {reason}")


class UnknownFileKeyError(UmrahGuideError, KeyError):
    def __init__(self, file_key: str):
        self.file_key = file_key
        super().__init__(f"Unknown data file '{file_key}'")

    def __str__(self):
        return self.args[0]


class EntryNotFoundError(UmrahGuideError, KeyError):
    def __init__(self, file_key: str, entry_id: str):
        self.file_key = file_key
        self.entry_id = entry_id
        super().__init__(f"Entry '{entry_id}' not found in {file_key}")

    def __str__(self):
        return self.args[0]


class ThemeNotFoundError(UmrahGuideError, KeyError):
    def __init__(self, theme_id: str):
        self.theme_id = theme_id
        super().__init__(f"Theme '{theme_id}' not found")

    def __str__(self):
        return self.args[0]


class RoundNotFoundError(UmrahGuideError, KeyError):
    """No round with this number exists for the ritual kind and mode."""

    def __init__(self, round_key: str):
        self.round_key = round_key
        super().__init__(f"Round '{round_key}' is not in rounds.json")

    def __str__(self):
        return self.args[0]


class EditorClientError(UmrahGuideError):
    """Raised by EditorClient for transport errors and unexpected responses."""

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)
