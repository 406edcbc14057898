"""
services/band_score.py

Official IELTS raw-score -> band conversion for 40-question Academic
Reading and Listening tests.

The scoring engine only depends on the ``band_score_of`` signature, so
another table can be injected via ``score(..., band_lookup=...)``.
"""

from typing import Dict

from ielts_exam.models.exam_model import ExamKind
from ielts_exam.models.result_model import BandResult

MAX_RAW_SCORE = 40


def _expand(steps: Dict[float, range]) -> Dict[int, float]:
    table: Dict[int, float] = {}
    for band, raw_scores in steps.items():
        for raw in raw_scores:
            table[raw] = band
    return table


LISTENING_BANDS = _expand({
    9.0: range(39, 41),
    8.5: range(37, 39),
    8.0: range(35, 37),
    7.5: range(32, 35),
    7.0: range(30, 32),
    6.5: range(26, 30),
    6.0: range(23, 26),
    5.5: range(18, 23),
    5.0: range(16, 18),
    4.5: range(13, 16),
    4.0: range(10, 13),
    3.5: range(7, 10),
    3.0: range(4, 7),
    2.5: range(1, 4),
    0.0: range(0, 1),
})

ACADEMIC_READING_BANDS = _expand({
    9.0: range(39, 41),
    8.5: range(37, 39),
    8.0: range(35, 37),
    7.5: range(33, 35),
    7.0: range(30, 33),
    6.5: range(27, 30),
    6.0: range(23, 27),
    5.5: range(19, 23),
    5.0: range(15, 19),
    4.5: range(13, 15),
    4.0: range(10, 13),
    3.5: range(8, 10),
    3.0: range(7, 8),
    2.5: range(6, 7),
    2.0: range(5, 6),
    1.5: range(2, 5),
    1.0: range(1, 2),
    0.0: range(0, 1),
})

_TABLES = {
    ExamKind.LISTENING: LISTENING_BANDS,
    ExamKind.READING: ACADEMIC_READING_BANDS,
}

BAND_DESCRIPTIONS: Dict[float, str] = {
    9.0: "Expert user - fully understands complex texts and natural speech",
    8.5: "Very good user - understands detail and context very well",
    8.0: "Very good user - understands detail and context very well",
    7.5: "Good user - understands main ideas and important details well",
    7.0: "Good user - understands main ideas and important details well",
    6.5: "Competent user - understands the main content with minor difficulty",
    6.0: "Competent user - understands the main content with minor difficulty",
    5.5: "Modest user - understands the main idea in familiar situations",
    5.0: "Modest user - understands the main idea in familiar situations",
    4.5: "Limited user - understands simple, clearly stated information",
    4.0: "Limited user - understands simple, clearly stated information",
    3.5: "Extremely limited user - understands some basic words and phrases",
    3.0: "Extremely limited user - understands some basic words and phrases",
    2.5: "Intermittent user - has great difficulty understanding basic content",
    2.0: "Intermittent user - has great difficulty understanding basic content",
    1.5: "Non-user - cannot understand the content",
    1.0: "Non-user - cannot understand the content",
    0.0: "Did not attempt the test",
}


def band_score_of(kind: ExamKind, correct_count: int) -> BandResult:
    """
    Band score for ``correct_count`` correct answers.

    The count is clamped to 0..40, so the lookup is a non-decreasing step
    function over all integers.

    Raises:
        ValueError: unsupported exam kind.
    """
    try:
        table = _TABLES[ExamKind(kind)]
    except ValueError:
        raise ValueError(f"Unsupported test type: {kind}") from None

    clamped = max(0, min(int(correct_count), MAX_RAW_SCORE))
    band = table[clamped]
    return BandResult(band_score=band, description=BAND_DESCRIPTIONS[band])


def band_level(band_score: float) -> str:
    """Coarse tier used by the result screen to colour the band badge."""
    if band_score >= 8.5:
        return "excellent"
    if band_score >= 7.5:
        return "very_good"
    if band_score >= 6.5:
        return "good"
    if band_score >= 5.5:
        return "competent"
    return "limited"
