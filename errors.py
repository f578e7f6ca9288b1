from typing import List


class AppError(Exception):
    # Base class for expected, user-facing failures.
    pass


class ValidationError(AppError):
    # Submission rejected; carries every message shown to the user.
    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class ExportError(AppError):
    # Spreadsheet generation failed.
    pass


class AuthError(AppError):
    # Identity provider rejected the request or could not be reached.
    pass


class StorageError(AppError):
    # Storage backend misconfigured.
    pass
