"""Consensus-encoded block headers, blocks and transactions.

These are the domain objects the resolver materializes from the raw hex the
node returns in non-verbose mode. Decoding raises `ValueError` on truncated,
trailing or inconsistent input.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from corerpc.rpc.hashes import HASH_LENGTH, Hash256

HEADER_LENGTH = 80
SEGWIT_MARKER = 0x00
SEGWIT_FLAG = 0x01


class ByteReader:
    """Sequential little-endian reader over a byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self.offset

    def read(self, length: int) -> bytes:
        if length < 0 or length > self.remaining:
            raise ValueError(f"unexpected end of data: wanted {length} bytes at offset {self.offset}, have {self.remaining}")
        chunk = self._data[self.offset : self.offset + length]
        self.offset += length
        return chunk

    def peek(self, length: int) -> bytes:
        return self._data[self.offset : self.offset + length]

    def slice(self, start: int, end: int) -> bytes:
        return self._data[start:end]

    def uint8(self) -> int:
        return self.read(1)[0]

    def uint32(self) -> int:
        return struct.unpack("<I", self.read(4))[0]

    def int32(self) -> int:
        return struct.unpack("<i", self.read(4))[0]

    def int64(self) -> int:
        return struct.unpack("<q", self.read(8))[0]

    def compact_size(self) -> int:
        prefix = self.uint8()
        if prefix < 0xFD:
            return prefix
        if prefix == 0xFD:
            value = struct.unpack("<H", self.read(2))[0]
            minimum = 0xFD
        elif prefix == 0xFE:
            value = struct.unpack("<I", self.read(4))[0]
            minimum = 0x10000
        else:
            value = struct.unpack("<Q", self.read(8))[0]
            minimum = 0x100000000
        if value < minimum:
            raise ValueError(f"non-canonical compact size {value} at offset {self.offset}")
        return value

    def var_bytes(self) -> bytes:
        return self.read(self.compact_size())

    def hash256(self) -> Hash256:
        return Hash256.from_bytes(self.read(HASH_LENGTH))

    def finish(self) -> None:
        if self.remaining:
            raise ValueError(f"{self.remaining} trailing bytes after object")


@dataclass(frozen=True, slots=True)
class OutPoint:
    txid: Hash256
    index: int

    @property
    def is_null(self) -> bool:
        return self.index == 0xFFFFFFFF and self.txid.raw == bytes(HASH_LENGTH)


@dataclass(frozen=True, slots=True)
class TxIn:
    prevout: OutPoint
    script_sig: bytes
    sequence: int
    witness: tuple[bytes, ...] = ()


@dataclass(frozen=True, slots=True)
class TxOutput:
    value: int
    script_pubkey: bytes


@dataclass(frozen=True, slots=True)
class Transaction:
    """A decoded transaction, fetched with "getrawtransaction"."""

    rpc_method: ClassVar[str] = "getrawtransaction"
    rpc_raw_flag: ClassVar[object] = False

    version: int
    inputs: tuple[TxIn, ...]
    outputs: tuple[TxOutput, ...]
    locktime: int
    txid: Hash256
    has_witness: bool = False

    @property
    def is_coinbase(self) -> bool:
        return len(self.inputs) == 1 and self.inputs[0].prevout.is_null

    @classmethod
    def from_bytes(cls, data: bytes) -> Transaction:
        reader = ByteReader(data)
        tx = cls.read(reader)
        reader.finish()
        return tx

    @classmethod
    def read(cls, reader: ByteReader) -> Transaction:
        start = reader.offset
        version = reader.int32()
        has_witness = False
        if reader.peek(2) == bytes((SEGWIT_MARKER, SEGWIT_FLAG)):
            reader.read(2)
            has_witness = True
        body_start = reader.offset

        raw_inputs = []
        for _ in range(reader.compact_size()):
            prevout = OutPoint(txid=reader.hash256(), index=reader.uint32())
            raw_inputs.append((prevout, reader.var_bytes(), reader.uint32()))

        outputs = []
        for _ in range(reader.compact_size()):
            value = reader.int64()
            outputs.append(TxOutput(value=value, script_pubkey=reader.var_bytes()))
        body_end = reader.offset

        witnesses: list[tuple[bytes, ...]] = [()] * len(raw_inputs)
        if has_witness:
            witnesses = [
                tuple(reader.var_bytes() for _ in range(reader.compact_size()))
                for _ in raw_inputs
            ]
            if not any(witnesses):
                raise ValueError("witness flag set but all witnesses are empty")

        locktime_start = reader.offset
        locktime = reader.uint32()
        stripped = (
            reader.slice(start, start + 4)
            + reader.slice(body_start, body_end)
            + reader.slice(locktime_start, reader.offset)
        )
        inputs = tuple(
            TxIn(prevout=prevout, script_sig=script, sequence=sequence, witness=witness)
            for (prevout, script, sequence), witness in zip(raw_inputs, witnesses)
        )
        return cls(
            version=version,
            inputs=inputs,
            outputs=tuple(outputs),
            locktime=locktime,
            txid=Hash256.sha256d(stripped),
            has_witness=has_witness,
        )


@dataclass(frozen=True, slots=True)
class BlockHeader:
    """An 80-byte block header, fetched with "getblockheader"."""

    rpc_method: ClassVar[str] = "getblockheader"
    rpc_raw_flag: ClassVar[object] = False

    version: int
    prev_blockhash: Hash256
    merkle_root: Hash256
    time: int
    bits: int
    nonce: int
    hash: Hash256

    @classmethod
    def from_bytes(cls, data: bytes) -> BlockHeader:
        reader = ByteReader(data)
        header = cls.read(reader)
        reader.finish()
        return header

    @classmethod
    def read(cls, reader: ByteReader) -> BlockHeader:
        start = reader.offset
        version = reader.int32()
        prev_blockhash = reader.hash256()
        merkle_root = reader.hash256()
        time = reader.uint32()
        bits = reader.uint32()
        nonce = reader.uint32()
        return cls(
            version=version,
            prev_blockhash=prev_blockhash,
            merkle_root=merkle_root,
            time=time,
            bits=bits,
            nonce=nonce,
            hash=Hash256.sha256d(reader.slice(start, start + HEADER_LENGTH)),
        )


@dataclass(frozen=True, slots=True)
class Block:
    """A full block, fetched with "getblock" at verbosity 0."""

    rpc_method: ClassVar[str] = "getblock"
    rpc_raw_flag: ClassVar[object] = 0

    header: BlockHeader
    txdata: tuple[Transaction, ...]

    @property
    def hash(self) -> Hash256:
        return self.header.hash

    @classmethod
    def from_bytes(cls, data: bytes) -> Block:
        reader = ByteReader(data)
        header = BlockHeader.read(reader)
        count = reader.compact_size()
        if count == 0:
            raise ValueError("block contains no transactions")
        txdata = tuple(Transaction.read(reader) for _ in range(count))
        reader.finish()
        return cls(header=header, txdata=txdata)


__all__ = [
    "Block",
    "BlockHeader",
    "ByteReader",
    "HEADER_LENGTH",
    "OutPoint",
    "Transaction",
    "TxIn",
    "TxOutput",
]
