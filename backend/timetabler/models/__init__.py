from timetabler.models.timetable import ConflictStatus, ViewMode  # noqa: F401
