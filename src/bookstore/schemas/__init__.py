from .book import BookRead, serialize_book

__all__ = ["BookRead", "serialize_book"]
