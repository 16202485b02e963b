from .flashcards import Flashcard, FlashcardDeck, GenerateFlashcardsInput, OptionSet

__all__ = [
    "Flashcard",
    "FlashcardDeck",
    "GenerateFlashcardsInput",
    "OptionSet",
]
