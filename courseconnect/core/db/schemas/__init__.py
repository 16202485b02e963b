# Import models so Base metadata is aware of them
from .auth import User  # noqa: F401
from .flashcards import FlashcardSet, Flashcard  # noqa: F401
from .study import StudySession  # noqa: F401
from .user_profile import UserProfile  # noqa: F401
from .syllabus import UploadedSyllabus  # noqa: F401
