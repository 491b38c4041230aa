"""Topic-driven multiple-choice quizzes generated by a local language model."""

__version__ = "0.1.0"
