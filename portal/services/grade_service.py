# portal/services/grade_service.py

from typing import Optional

# Lower bound of each letter grade, highest first
LETTER_GRADES = [
    (9.0, "A+"),
    (8.5, "A"),
    (8.0, "B+"),
    (7.0, "B"),
    (6.5, "C+"),
    (5.5, "C"),
    (5.0, "D+"),
    (4.0, "D"),
]


def calculate_overall_grade(attendance, midterm, final) -> float:
    """10% attendance, 30% midterm, 60% final exam."""
    total = 0.1 * (attendance or 0) + 0.3 * (midterm or 0) + 0.6 * (final or 0)
    return round(total, 2)


def effective_total(total, attendance, midterm, final) -> float:
    if total and total > 0:
        return total
    return calculate_overall_grade(attendance, midterm, final)


def letter_grade(score: Optional[float]) -> str:
    score = score or 0
    for threshold, letter in LETTER_GRADES:
        if score >= threshold:
            return letter
    return "F"


def split_full_name(full_name: Optional[str]) -> tuple[str, str]:
    """'Nguyen Van An' -> ('Nguyen Van', 'An')."""
    parts = (full_name or "").split()
    if len(parts) < 2:
        return " ".join(parts), ""
    return " ".join(parts[:-1]), parts[-1]


def gender_label(value) -> str:
    if value is None:
        return "N/A"
    if value in (0, False):
        return "Male"
    if value in (1, True):
        return "Female"
    return "N/A"
