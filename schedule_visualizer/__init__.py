"""Parse class schedules pasted from the enrollment portal into weekly timetables."""

__version__ = "0.1.0"
