"""Library kind selector."""

from enum import Enum


class LibraryKind(str, Enum):
    """The three kinds of library a root folder can hold."""

    BOOK = "book"
    COMIC = "comic"
    VIDEO = "video"
