class RegistrationError(Exception):
    pass


class NotFoundError(RegistrationError):
    pass


class InvalidStateError(RegistrationError):
    pass


class ConflictError(RegistrationError):
    pass


class ForbiddenError(RegistrationError):
    pass


class DeadlineExpiredError(RegistrationError):
    pass


class StoreUnavailableError(RegistrationError):
    pass
