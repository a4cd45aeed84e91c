"""Domain entities produced by a library scan.

Every entity serializes to the record shape the viewer expects via
``to_dict()``. Key names follow the viewer's contract, which mixes
camelCase (``authorId``, ``libraryId``, ``createdAt``) with the
snake_case ``book_count``.
"""

from dataclasses import dataclass, field
from typing import List, Union


@dataclass
class Book:
    """A single text file inside an author folder."""

    id: str
    title: str
    path: str
    author_id: str
    library_id: str
    size: int
    created_at: int
    starred: bool = False
    deleted: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "path": self.path,
            "authorId": self.author_id,
            "libraryId": self.library_id,
            "size": self.size,
            "createdAt": self.created_at,
            "starred": self.starred,
            "deleted": self.deleted,
        }


@dataclass
class Author:
    """A top-level folder of a book library, grouping its books."""

    id: str
    name: str
    path: str
    library_id: str
    books: List[Book] = field(default_factory=list)

    @property
    def book_count(self) -> int:
        return len(self.books)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "libraryId": self.library_id,
            "book_count": self.book_count,
            "books": [book.to_dict() for book in self.books],
        }


@dataclass
class Comic:
    """A folder of page images inside a comic library.

    Attributes:
        cover: Asset URL of the cover thumbnail, the cover source image
            when no thumbnail could be written, or "" when the folder
            holds no image.
    """

    id: str
    title: str
    path: str
    cover: str
    library_id: str
    created_at: int
    starred: bool = False
    deleted: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "path": self.path,
            "cover": self.cover,
            "libraryId": self.library_id,
            "createdAt": self.created_at,
            "starred": self.starred,
            "deleted": self.deleted,
        }


@dataclass
class Video:
    """A video file inside a video library."""

    id: str
    title: str
    path: str
    url: str
    cover: str
    library_id: str
    created_at: int
    size: int
    duration: int = 0
    starred: bool = False
    deleted: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "path": self.path,
            "url": self.url,
            "cover": self.cover,
            "libraryId": self.library_id,
            "createdAt": self.created_at,
            "size": self.size,
            "duration": self.duration,
            "starred": self.starred,
            "deleted": self.deleted,
        }


@dataclass
class ComicImage:
    """One page image of a comic, with its thumbnail dimensions."""

    path: str
    url: str
    thumbnail: str
    filename: str
    width: int
    height: int
    starred: bool = False
    deleted: bool = False
    index: int = 0

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "url": self.url,
            "thumbnail": self.thumbnail,
            "filename": self.filename,
            "width": self.width,
            "height": self.height,
            "starred": self.starred,
            "deleted": self.deleted,
            "index": self.index,
        }


@dataclass(frozen=True)
class Chapter:
    """A chapter heading found in a book's text."""

    title: str
    line_index: int

    def to_dict(self) -> dict:
        return {"title": self.title, "lineIndex": self.line_index}


@dataclass
class BookContent:
    """The non-blank lines of a book plus the chapter headings among them."""

    lines: List[str] = field(default_factory=list)
    chapters: List[Chapter] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "lines": list(self.lines),
            "chapters": [chapter.to_dict() for chapter in self.chapters],
        }


LibraryEntry = Union[Author, Book, Comic, Video, ComicImage]
