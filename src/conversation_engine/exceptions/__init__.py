from .base import RepositoryError, DuplicateError, InvalidFieldError
from .mapper import db_error_handler

__all__ = ["RepositoryError", "DuplicateError", "InvalidFieldError", "db_error_handler"]
