"""
Per-student performance figures computed from graded submission records.

Pure like ``status_engine``: callers load the records (with their assignment)
and pass them in.
"""

import statistics
from collections import defaultdict
from collections.abc import Iterable
from typing import Optional

from classroom.models.submission import Submission
from classroom.services.status_engine import as_utc

LOW_BAND_BELOW = 50
MEDIUM_BAND_BELOW = 70
# grades under this mark the assignment topics as difficult
DIFFICULT_BELOW = 60
# a trend step larger than this is significant
SIGNIFICANT_STEP = 5


def _round(value: float) -> float:
    return round(value, 2)


def band(average: float) -> str:
    if average < LOW_BAND_BELOW:
        return "low"
    if average < MEDIUM_BAND_BELOW:
        return "medium"
    return "high"


def trend(grades: list[float]) -> Optional[dict]:
    """Compare the last two grades, oldest first. None with fewer than two."""
    if len(grades) < 2:
        return None
    difference = _round(grades[-1] - grades[-2])
    if difference > 0:
        direction = "improving"
    elif difference < 0:
        direction = "declining"
    else:
        direction = "stable"
    return {
        "difference": difference,
        "direction": direction,
        "magnitude": "significant" if abs(difference) > SIGNIFICANT_STEP else "moderate",
    }


def _chronological(records: Iterable[Submission]) -> list[Submission]:
    graded = [r for r in records if r.grade is not None and r.corrected_at is not None]
    return sorted(graded, key=lambda r: as_utc(r.corrected_at))


def summarize(records: Iterable[Submission]) -> dict:
    """
    Summary of one student's graded work.

    Records without a grade are ignored. With nothing graded the summary is
    empty (``total_graded`` 0 and no averages) rather than an error.
    """
    history = _chronological(records)
    grades = [float(r.grade) for r in history]

    summary = {
        "total_graded": len(grades),
        "average_grade": None,
        "max_grade": None,
        "min_grade": None,
        "std_dev": None,
        "coefficient_of_variation": None,
        "band": None,
        "trend": trend(grades),
        "by_subject": [],
        "timeline": [],
        "competencies": [],
        "difficult_topics": [],
    }
    if not grades:
        return summary

    average = statistics.fmean(grades)
    std_dev = statistics.pstdev(grades)
    summary.update(
        average_grade=_round(average),
        max_grade=max(grades),
        min_grade=min(grades),
        std_dev=_round(std_dev),
        coefficient_of_variation=_round(std_dev / average * 100) if average else 0.0,
        band=band(average),
    )

    by_subject: dict[Optional[str], list[float]] = defaultdict(list)
    levels: dict[str, list[int]] = defaultdict(list)
    difficult: dict[str, int] = defaultdict(int)

    for record in history:
        assignment = record.assignment
        subject = assignment.subject.name if assignment.subject is not None else None
        by_subject[subject].append(float(record.grade))

        summary["timeline"].append(
            {
                "assignment_id": assignment.id,
                "title": assignment.title,
                "subject": subject,
                "grade": float(record.grade),
                "corrected_at": record.corrected_at,
            }
        )

        for tag in record.competencies or []:
            levels[tag["name"]].append(tag["level"])

        topics = set()
        if record.grade < DIFFICULT_BELOW:
            topics.update(assignment.topics or [])
        # topics the teacher flagged count whatever the grade
        topics.update(tag["topic"] for tag in record.difficulties or [])
        for topic in topics:
            difficult[topic] += 1

    summary["by_subject"] = [
        {"subject": name, "graded": len(values), "average_grade": _round(statistics.fmean(values))}
        for name, values in sorted(by_subject.items(), key=lambda item: item[0] or "")
    ]
    summary["competencies"] = [
        {"name": name, "samples": len(values), "average_level": _round(statistics.fmean(values))}
        for name, values in sorted(levels.items())
    ]
    summary["difficult_topics"] = [
        {"topic": topic, "occurrences": count}
        for topic, count in sorted(difficult.items(), key=lambda item: (-item[1], item[0]))
    ]
    return summary
