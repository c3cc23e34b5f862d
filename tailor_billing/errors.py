class DraftValidationError(ValueError):
    """A bill or customer form is not ready to submit. No request was made."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ApiError(Exception):
    """The backend could not be reached or answered with an error status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
