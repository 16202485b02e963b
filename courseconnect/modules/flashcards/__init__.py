"""Flashcards module exports."""

from .models.flashcards import Flashcard, FlashcardDeck, GenerateFlashcardsInput
from .generator import generate_flashcards
from .distractors import build_options
from .grading import check_answer, normalize_answer
from .options import generate_options

__all__ = [
    "Flashcard",
    "FlashcardDeck",
    "GenerateFlashcardsInput",
    "generate_flashcards",
    "build_options",
    "check_answer",
    "normalize_answer",
    "generate_options",
]
