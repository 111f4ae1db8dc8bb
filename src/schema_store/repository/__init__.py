from .filters import Filter, convert_filter
from .reader import RecordReader
from .repository import Repository
from .writer import TransactionalWriter

__all__ = [
    "Filter",
    "RecordReader",
    "Repository",
    "TransactionalWriter",
    "convert_filter",
]
