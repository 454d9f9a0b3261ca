"""Domain Exceptions"""


class DomainError(Exception):
    """Base error; status_code is the HTTP status it maps to"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(DomainError):
    """Business rule violation"""
    status_code = 400


class AuthenticationError(DomainError):
    status_code = 401


class ForbiddenError(DomainError):
    status_code = 403


class NotFoundError(DomainError):
    status_code = 404
