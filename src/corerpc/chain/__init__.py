"""Consensus-encoded chain objects."""

from .primitives import Block, BlockHeader, ByteReader, OutPoint, Transaction, TxIn, TxOutput

__all__ = ["Block", "BlockHeader", "ByteReader", "OutPoint", "Transaction", "TxIn", "TxOutput"]
