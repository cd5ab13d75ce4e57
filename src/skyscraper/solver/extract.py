"""Reconstruction of the solved grid from a satisfying model."""

from collections.abc import Sequence

from bitarray import bitarray

from skyscraper.board import Grid


def decode_value(model_bits: bitarray, bits: Sequence[int]) -> int:
    """Decode one order-encoded value: the index of its first false bit, or N if all are true.

    Only well defined because the order bits are monotone.
    """
    for v, lit in enumerate(bits):
        if not model_bits[lit]:
            return v
    return len(bits)


def extract_grid(model_bits: bitarray, cell_order: Sequence[Sequence[Sequence[int]]]) -> Grid:
    """Build the N x N grid of values 1..N encoded by `cell_order` under the given model.

    Args:
        model_bits (bitarray): Truth value of each proposition, indexed by id.
        cell_order: `cell_order[i][j][v]` is the id of "value(i, j) > v".
    """
    return Grid([[decode_value(model_bits, bits) for bits in row] for row in cell_order])
