"""Synthetic input generators for demonstrations and tests."""

from bvdu_bank.generators.account import AccountRequest, AccountRequestGenerator
from bvdu_bank.generators.base import BaseGenerator

__all__ = [
    "AccountRequest",
    "AccountRequestGenerator",
    "BaseGenerator",
]
