"""Instruction prompt sent to the model for a quiz topic."""

from __future__ import annotations

_SCHEMA_EXAMPLE = """{
  "questions": [
    {
      "id": 1,
      "question": "Your question text here",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": 0,
      "explanation": "Brief explanation of why this is correct"
    }
  ]
}"""


def build_quiz_prompt(topic: str, *, question_count: int = 5) -> str:
    """Return the single instruction asking for ``question_count`` MCQs.

    The output is deterministic for a given topic and count.
    """

    return (
        f"Generate a JSON response with {question_count} multiple-choice "
        f'quiz questions about "{topic}".\n'
        "The response must be valid JSON with this exact structure:\n"
        f"{_SCHEMA_EXAMPLE}\n\n"
        "Requirements:\n"
        f'- Generate exactly {question_count} questions about the topic "{topic}"\n'
        "- Each question must have exactly 4 options\n"
        "- Make questions educational and accurate\n"
        "- correctAnswer should be 0, 1, 2, or 3 (zero-based index of the "
        "correct option)\n"
        "- Provide a short, clear explanation for each correct answer\n"
        "- Return ONLY valid JSON, no markdown formatting, no code blocks\n\n"
        "Respond with valid JSON only:"
    )
