"""Trace-driven virtual memory simulator with several page table layouts and replacement policies."""

__version__ = "1.0.0"
__all__ = ["bits", "memory", "page_table", "simulator"]