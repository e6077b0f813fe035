"""Pydantic models."""
from pyq.models.bank import RawOption, RawPaper, RawQuestion

__all__ = [
    "RawOption",
    "RawPaper",
    "RawQuestion",
]
