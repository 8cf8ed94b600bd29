from .click import Click
from .coach import Coach
from .contact import Contact
from .course_file import CourseFile
from .dm_session import DMSession
from .knowledge_chunk import KnowledgeChunk
from .offer import Offer
from .sale import Sale
from .user_role import UserRole

__all__ = [
    "Click",
    "Coach",
    "Contact",
    "CourseFile",
    "DMSession",
    "KnowledgeChunk",
    "Offer",
    "Sale",
    "UserRole",
]
