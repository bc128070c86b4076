"""
Structural errors raised before allocation starts.

Per-requirement failures are never raised; they are reported as
``UnscheduledRequirement`` records instead.
"""


class TimetableError(ValueError):
    """Base class for input problems that abort a solve."""

    title = "Invalid Input"


class InvalidCalendarError(TimetableError):
    title = "Invalid Calendar"


class InvalidWorkloadError(TimetableError):
    title = "Invalid Workload"


class UnknownTeacherError(TimetableError):
    title = "Unknown Teacher"

    def __init__(self, teacher_id: str, class_id: str = None, subject: str = None):
        self.teacher_id = teacher_id
        self.class_id = class_id
        self.subject = subject
        if class_id is not None:
            message = f"Subject '{subject}' of class {class_id} is assigned to unknown teacher {teacher_id}"
        else:
            message = f"Unknown teacher {teacher_id}"
        super().__init__(message)


class SlotConflictError(TimetableError):
    """Raised by the ledger when a placement would double-book or overload."""

    title = "Slot Conflict"
