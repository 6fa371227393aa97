from dropout_tracker.models.student import Student

__all__ = ["Student"]
