class AppError(Exception):
    """Error surfaced to the client through the response envelope.

    ``error`` is the underlying exception, if any. In debug mode its text
    replaces ``message`` in the response.
    """

    status_code = 500

    def __init__(self, message: str, error: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error

    def client_message(self, debug: bool) -> str:
        if debug and self.error is not None:
            return str(self.error)
        return self.message


class UnauthorizedError(AppError):
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class UnprocessableEntityError(AppError):
    status_code = 422


class InternalServerError(AppError):
    status_code = 500
