"""File-backed tables and record codecs."""

from bvdu_bank.store.bank import BankDataStore
from bvdu_bank.store.files import append_record, load_table, save_table

__all__ = ["BankDataStore", "append_record", "load_table", "save_table"]
