from __future__ import annotations


class NotFoundError(ValueError):
    """A referenced ticket or reference-data row does not exist."""


class DuplicateError(ValueError):
    """A unique business key (party number, species number, ship-via name) is already taken."""


class TicketPersistenceError(RuntimeError):
    """A ticket write was aborted and rolled back."""


class InvoiceSequenceError(RuntimeError):
    """The invoice number counter could not be read or advanced."""
