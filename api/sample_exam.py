"""
api/sample_exam.py - built-in demo exam (Academic Reading, 2 passages)

Used by /api/start-sample-exam so the app can be tried without exam files.
"""

from ielts_exam.services.exam_loader import parse_exam

SAMPLE_EXAM_PAYLOAD = {
    "_id": "sample-reading",
    "title": "Sample Academic Reading",
    "type": "reading",
    "difficulty": "intermediate",
    "duration": 20,
    "totalQuestions": 7,
    "description": "Two short passages with mixed question types.",
    "passages": [
        {
            "id": "p1",
            "title": "The History of Tea",
            "content": (
                "Tea was first drunk in China, possibly as early as 2737 BC. "
                "It reached Europe in the early seventeenth century through Dutch "
                "traders, and by 1700 it was sold in more than 500 London coffee houses. "
                "Britain later began growing tea in India to break the Chinese monopoly."
            ),
            "questions": [
                {
                    "id": "1",
                    "type": "multiple-choice",
                    "question": "Who first brought tea to Europe?",
                    "options": ["Portuguese monks", "Dutch traders", "British sailors", "Indian merchants"],
                    "correctAnswer": "B",
                },
                {
                    "id": "2",
                    "type": "true-false-notgiven",
                    "question": "Tea was drunk in China before it reached Europe.",
                    "options": ["TRUE", "FALSE", "NOT GIVEN"],
                    "correctAnswer": "TRUE",
                },
                {
                    "id": "3",
                    "type": "true-false-notgiven",
                    "question": "Tea was more popular than coffee in London by 1700.",
                    "options": ["TRUE", "FALSE", "NOT GIVEN"],
                    "correctAnswer": 2,
                },
                {
                    "id": "4",
                    "type": "fill-blank",
                    "question": "By 1700, tea was sold in more than ____ London coffee houses.",
                    "correctAnswer": "500",
                },
            ],
        },
        {
            "id": "p2",
            "title": "Urban Beekeeping",
            "content": (
                "Rooftop hives have become common in many large cities. "
                "Urban bees often produce more honey than rural colonies because "
                "parks and gardens offer a wide variety of flowers throughout the year."
            ),
            "questions": [
                {
                    "id": "5",
                    "type": "multiple-choice",
                    "question": "Why do urban bees often produce more honey?",
                    "options": [
                        "Cities are warmer",
                        "There are fewer predators",
                        "Flowers are varied and available all year",
                        "Beekeepers feed them sugar",
                    ],
                    "correctAnswer": 2,
                },
                {
                    "id": "6",
                    "type": "matching",
                    "question": "Match the location with its description: rooftop",
                    "options": ["A hives", "B gardens", "C parks"],
                    "correctAnswer": "A",
                },
                {
                    "id": "7",
                    "type": "fill-blank",
                    "question": "Parks and ____ offer a variety of flowers.",
                    "correctAnswer": "gardens",
                },
            ],
        },
    ],
}


def sample_exam():
    """A freshly validated copy of the demo exam."""
    return parse_exam(SAMPLE_EXAM_PAYLOAD)
