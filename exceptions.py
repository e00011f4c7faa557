"""Exceptions raised by the admin console."""


class AdminError(Exception):
    """Base class for admin console errors."""


class ImageRequiredError(AdminError):
    """Raised when a document would be created without a picture."""
    def __init__(self, collection: str, message: str = None):
        self.collection = collection
        self.message = message or f"Image file is required for adding to '{collection}'"
        super().__init__(self.message)


class EntityNotFoundError(AdminError):
    """Raised when an id does not match any document of a collection."""
    def __init__(self, collection: str, entity_id: str):
        self.collection = collection
        self.entity_id = entity_id
        self.message = f"No document '{entity_id}' in '{collection}'"
        super().__init__(self.message)


class InvalidTransition(AdminError):
    """Raised when a form action is not allowed in the current phase."""
    def __init__(self, action: str, phase: str):
        self.action = action
        self.phase = phase
        self.message = f"Cannot apply {action} while the form is {phase}"
        super().__init__(self.message)
