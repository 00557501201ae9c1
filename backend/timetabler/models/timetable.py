from enum import Enum


class ViewMode(str, Enum):
    class_ = "class"
    teacher = "teacher"


class ConflictStatus(str, Enum):
    none = "none"
    warning = "warning"
    error = "error"
