from app.schemas.editor import Notification


class InvoiceValidationError(Exception):
    """Submission blocked before any write; carries the notification to show"""

    def __init__(self, notification: Notification):
        self.notification = notification
        super().__init__(notification.description)


class StockConflictError(InvoiceValidationError):
    """Stock ran out between validation and the guarded decrement"""


class InvoiceSubmissionError(Exception):
    """A write of the invoice, its items or the stock decrement failed"""


class EditorStateError(Exception):
    """Operation not allowed in the editor's current state"""


class EditorLineNotFoundError(Exception):
    pass


class EditorSessionNotFoundError(Exception):
    pass
