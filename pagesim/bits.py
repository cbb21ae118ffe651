"""Bit-level helpers for splitting virtual addresses."""

from __future__ import annotations

_UINT32 = 0xFFFFFFFF


def calculate_offset(page_size: int) -> int:
    """Return the number of offset bits for a page of ``page_size`` bytes.

    This is the floor of log2 of the size; sizes of 0 or 1 give 0.
    The size is treated as an unsigned 32-bit value.
    """
    size = page_size & _UINT32
    if size <= 1:
        return 0
    return size.bit_length() - 1


def count_bits_unsigned(num: int) -> int:
    """Return how many bits are needed to write ``num`` as an unsigned 32-bit value.

    Zero still needs one bit.
    """
    value = num & _UINT32
    if value == 0:
        return 1
    return value.bit_length()


def make_mask(bits: int) -> int:
    """Return a 32-bit mask with the lowest ``bits`` bits set."""
    if bits < 0:
        raise ValueError(f"mask width must not be negative, got {bits}")
    return ((1 << bits) - 1) & _UINT32