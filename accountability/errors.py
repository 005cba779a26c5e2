class DomainError(Exception):
    """Base class for errors raised by the goal and partnership services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    status_code = 400


class NotFoundError(DomainError):
    # Raised both when an entity is missing and when it belongs to someone else
    status_code = 404


class DuplicateRequestError(DomainError):
    status_code = 409


class RequestResolvedError(DomainError):
    status_code = 409


class ServerFault(DomainError):
    status_code = 500


class ConcurrencyConflict(Exception):
    """A versioned write lost the race against another writer."""

    def __init__(self, entity: str, entity_id: str, expected_version: int):
        super().__init__(f"{entity} {entity_id} is no longer at version {expected_version}")
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
