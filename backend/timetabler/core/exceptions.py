class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when a placement request cannot be honoured by the scheduling engine."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class NoTeacherAssignedError(AppError):
    """Raised when a lesson is placed for a class/subject pair without an active teacher."""
    def __init__(self, class_id: str, subject_id: str):
        super().__init__(
            "No teacher assigned for this subject in this class. Please assign a teacher first.",
            status_code=409,
            details={"code": "NoTeacherAssigned", "class_id": class_id, "subject_id": subject_id},
        )
        self.class_id = class_id
        self.subject_id = subject_id

class RoomOccupiedError(AppError):
    """Raised when a manual room assignment collides with another lesson in that room."""
    def __init__(self, room_id: str, day: str, period: int, occupying_entry_id: str):
        super().__init__(
            "This room is already occupied at this time!",
            status_code=409,
            details={
                "code": "RoomOccupied",
                "room_id": room_id,
                "day": day,
                "period": period,
                "occupying_entry_id": occupying_entry_id,
            },
        )
        self.room_id = room_id
        self.occupying_entry_id = occupying_entry_id

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class InvalidGridError(AppError):
    """Raised when a session grid does not line up with the snapshot's time slots."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)
