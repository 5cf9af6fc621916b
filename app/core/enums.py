from enum import Enum


class AttendanceStatus(str, Enum):
    present = "present"
    absent = "absent"
    late = "late"


# Statuses that count as attended when computing the attendance rate
ATTENDED_STATUSES = (AttendanceStatus.present.value, AttendanceStatus.late.value)


class GradeType(str, Enum):
    midterm = "midterm"
    final = "final"
    assignment = "assignment"
    quiz = "quiz"
