"""Data package for the ATM dataset model and loader."""

from .atm_loader import ATMDataLoader, ATMRecord, DatasetError, parse_rows

__all__ = ['ATMDataLoader', 'ATMRecord', 'DatasetError', 'parse_rows']
