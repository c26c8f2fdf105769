from __future__ import annotations

import pytest
from pydantic import ValidationError

from corerpc.models import (
    BlockHeaderInfo,
    EstimateMode,
    MempoolInfo,
    PeerInfo,
    SerializedTransaction,
    TxOutSetInfo,
    VerboseTransaction,
)
from corerpc.rpc import Hash256

GENESIS_HASH = "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f"
TXID = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b"


def test_header_info_reads_aliases() -> None:
    info = BlockHeaderInfo.model_validate(
        {
            "hash": GENESIS_HASH,
            "confirmations": 10,
            "height": 0,
            "version": 1,
            "versionHex": "00000001",
            "merkleroot": TXID,
            "time": 1231006505,
            "mediantime": 1231006505,
            "nonce": 2083236893,
            "bits": "1d00ffff",
            "difficulty": 1.0,
            "chainwork": "0000000000000000000000000000000000000000000000000000000100010001",
            "nTx": 1,
            "nextblockhash": "00000000839a8e6886ab5951d76f411475428afc90947ee320161bbf18eb6048",
        },
        strict=True,
    )

    assert info.version_hex == "00000001"
    assert info.n_tx == 1
    assert info.previousblockhash is None
    assert info.nextblockhash is not None
    assert info.model_dump(mode="json", by_alias=True)["hash"] == GENESIS_HASH


def test_models_are_frozen() -> None:
    info = MempoolInfo.model_validate(
        {"size": 1, "bytes": 250, "usage": 1024, "maxmempool": 300000000, "mempoolminfee": 0.00001},
        strict=True,
    )

    with pytest.raises(ValidationError):
        info.size = 2  # type: ignore[misc]


def test_nonce_must_fit_in_uint32() -> None:
    with pytest.raises(ValidationError):
        BlockHeaderInfo.model_validate(
            {
                "hash": GENESIS_HASH,
                "confirmations": 1,
                "height": 0,
                "version": 1,
                "merkleroot": TXID,
                "time": 0,
                "nonce": 2**32,
                "bits": "1d00ffff",
                "difficulty": 1.0,
                "chainwork": "00",
            },
            strict=True,
        )


def test_verbose_transaction_keeps_script_details() -> None:
    tx = VerboseTransaction.model_validate(
        {
            "txid": TXID,
            "hash": TXID,
            "version": 1,
            "size": 204,
            "vsize": 204,
            "locktime": 0,
            "vin": [{"coinbase": "04ffff001d0104", "sequence": 4294967295}],
            "vout": [{"value": 50.0, "n": 0, "scriptPubKey": {"hex": "41", "type": "pubkey"}}],
            "hex": "01000000",
        },
        strict=True,
    )

    assert tx.txid == Hash256.from_wire(TXID)
    assert tx.blockhash is None
    assert tx.vout[0]["n"] == 0


def test_serialized_transaction_bytes() -> None:
    assert SerializedTransaction("0100").data == b"\x01\x00"


def test_txoutset_info_accepts_older_field_names() -> None:
    info = TxOutSetInfo.model_validate(
        {
            "height": 1,
            "bestblock": GENESIS_HASH,
            "transactions": 1,
            "txouts": 1,
            "bytes_serialized": 60,
            "hash_serialized": "ab",
            "total_amount": 50.0,
        },
        strict=True,
    )

    assert info.hash_serialized == "ab"
    assert info.disk_size is None


def test_peer_info_requires_counters() -> None:
    with pytest.raises(ValidationError):
        PeerInfo.model_validate({"id": 0, "addr": "127.0.0.1:18444"}, strict=True)


def test_estimate_mode_values() -> None:
    assert EstimateMode("CONSERVATIVE") is EstimateMode.CONSERVATIVE
    with pytest.raises(ValueError):
        EstimateMode("fast")
