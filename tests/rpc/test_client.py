from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from corerpc import NodeRPCClient
from corerpc.core import CoreRPCConfig
from corerpc.models import (
    AddNodeCommand,
    BlockchainInfo,
    EstimateMode,
    LegacyBlockchainInfo,
    LegacyNetworkInfo,
    MempoolEntries,
    MempoolTxids,
    NetworkInfo,
    SerializedBlock,
    VerboseBlock,
)
from corerpc.rpc import (
    Hash256,
    MalformedResponseError,
    MethodCall,
    ProtocolError,
    ResponseEnvelope,
    RPCErrorCode,
    RPCErrorDetail,
    TransportError,
)

GENESIS_HASH = "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f"
TXID = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b"


class FakeTransport:
    """Answers each call with whatever `reply(call)` returns."""

    def __init__(self, reply: Callable[[MethodCall], Any]) -> None:
        self._reply = reply
        self.calls: list[MethodCall] = []
        self.closed = False

    def send(self, call: MethodCall) -> ResponseEnvelope:
        self.calls.append(call)
        answer = self._reply(call)
        if isinstance(answer, RPCErrorDetail):
            return ResponseEnvelope(id=call.id, error=answer)
        return ResponseEnvelope(id=call.id, result=answer)

    def close(self) -> None:
        self.closed = True


def returning(value: Any) -> FakeTransport:
    return FakeTransport(lambda call: value)


def blockchain_info(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "chain": "regtest",
        "blocks": 101,
        "headers": 101,
        "bestblockhash": GENESIS_HASH,
        "difficulty": 4.6565423739069247e-10,
        "time": 1700000000,
        "mediantime": 1700000000,
        "verificationprogress": 1,
        "initialblockdownload": False,
        "chainwork": "00000000000000000000000000000000000000000000000000000000000000cc",
        "size_on_disk": 30000,
        "pruned": False,
        "warnings": "",
    }
    payload.update(overrides)
    return payload


def network_info(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "version": 250000,
        "subversion": "/Satoshi:25.0.0/",
        "protocolversion": 70016,
        "localservices": "0000000000000409",
        "localrelay": True,
        "timeoffset": 0,
        "networkactive": True,
        "connections": 8,
        "networks": [
            {
                "name": "ipv4",
                "limited": False,
                "reachable": True,
                "proxy": "",
                "proxy_randomize_credentials": False,
            }
        ],
        "relayfee": 0.00001,
        "incrementalfee": 0.00001,
        "localaddresses": [],
        "warnings": "",
    }
    payload.update(overrides)
    return payload


def test_get_block_count_sends_positional_request() -> None:
    transport = returning(125000)
    client = NodeRPCClient(transport)

    assert client.get_block_count() == 125000
    assert transport.calls[0].method == "getblockcount"
    assert transport.calls[0].params == ()


def test_get_block_count_rejects_string() -> None:
    client = NodeRPCClient(returning("125000"))

    with pytest.raises(MalformedResponseError) as excinfo:
        client.get_block_count()

    assert excinfo.value.method == "getblockcount"


def test_get_block_hash_encodes_height_and_decodes_hash() -> None:
    transport = returning(GENESIS_HASH)
    client = NodeRPCClient(transport)

    block_hash = client.get_block_hash(0)

    assert block_hash == Hash256.from_wire(GENESIS_HASH)
    assert transport.calls[0].params == (0,)


def test_get_block_verbosity_selects_variant() -> None:
    transport = returning("00ff")
    client = NodeRPCClient(transport)

    result = client.get_block(Hash256.from_wire(GENESIS_HASH), 0)

    assert isinstance(result, SerializedBlock)
    assert transport.calls[0].params == (GENESIS_HASH, 0)


def test_get_block_verbose_object() -> None:
    payload = {
        "hash": GENESIS_HASH,
        "confirmations": 1,
        "size": 285,
        "height": 0,
        "version": 1,
        "merkleroot": TXID,
        "tx": [{"txid": TXID, "hash": TXID}],
        "time": 1231006505,
        "nonce": 2083236893,
        "bits": "1d00ffff",
        "chainwork": "0000000000000000000000000000000000000000000000000000000100010001",
    }
    client = NodeRPCClient(returning(payload))

    result = client.get_block(Hash256.from_wire(GENESIS_HASH), 2)

    assert isinstance(result, VerboseBlock)
    assert result.txids == [Hash256.from_wire(TXID)]


def test_get_block_verbose_object_validates_inlined_txids() -> None:
    payload = {
        "hash": GENESIS_HASH,
        "confirmations": 1,
        "size": 285,
        "height": 0,
        "version": 1,
        "merkleroot": TXID,
        "tx": [{"txid": "nothex", "hash": TXID}],
        "time": 1231006505,
        "nonce": 2083236893,
        "bits": "1d00ffff",
        "chainwork": "0000000000000000000000000000000000000000000000000000000100010001",
    }
    client = NodeRPCClient(returning(payload))

    with pytest.raises(MalformedResponseError) as excinfo:
        client.get_block(Hash256.from_wire(GENESIS_HASH), 2)

    assert excinfo.value.method == "getblock"
    assert "tx" in excinfo.value.detail


def test_protocol_error_is_propagated_with_code(caplog: pytest.LogCaptureFixture) -> None:
    client = NodeRPCClient(returning(RPCErrorDetail(code=-8, message="Block not found")))

    with caplog.at_level(logging.WARNING), pytest.raises(ProtocolError) as excinfo:
        client.get_block(Hash256(bytes(32)))

    assert excinfo.value.method == "getblock"
    assert excinfo.value.code == -8
    assert excinfo.value.known_code is RPCErrorCode.INVALID_PARAMETER
    assert "Block not found" in caplog.text


def test_contract_violations_fail_before_dispatch() -> None:
    transport = returning(None)
    client = NodeRPCClient(transport)

    with pytest.raises(ValueError):
        client.get_block_hash(-1)
    with pytest.raises(ValueError):
        client.get_block(Hash256(bytes(32)), 3)
    with pytest.raises(ValueError):
        client.estimate_smart_fee(0)
    with pytest.raises(ValueError):
        client.estimate_smart_fee(1009)
    with pytest.raises(ValueError):
        client.get_tx_out(Hash256(bytes(32)), -1)

    assert transport.calls == []


def test_call_checks_method_name_and_arity() -> None:
    transport = returning(None)
    client = NodeRPCClient(transport)

    with pytest.raises(KeyError):
        client.call("sendtoaddress", "addr", 1)
    with pytest.raises(TypeError):
        client.call("getblockhash")
    with pytest.raises(TypeError):
        client.call("getblockcount", 1)

    assert transport.calls == []


def test_correlation_id_mismatch_is_malformed() -> None:
    class WrongId(FakeTransport):
        def send(self, call: MethodCall) -> ResponseEnvelope:
            return ResponseEnvelope(id=call.id + 100, result=1)

    client = NodeRPCClient(WrongId(lambda call: None))

    with pytest.raises(MalformedResponseError) as excinfo:
        client.get_block_count()

    assert "correlation id" in excinfo.value.detail


def test_null_response_id_is_accepted() -> None:
    class NullId(FakeTransport):
        def send(self, call: MethodCall) -> ResponseEnvelope:
            return ResponseEnvelope(id=None, result=7)

    assert NodeRPCClient(NullId(lambda call: None)).get_connection_count() == 7


def test_each_call_gets_a_fresh_id() -> None:
    transport = returning(1)
    client = NodeRPCClient(transport)

    client.get_block_count()
    client.get_block_count()

    assert transport.calls[0].id != transport.calls[1].id


def test_gettxout_returns_none_for_spent_output() -> None:
    transport = returning(None)
    client = NodeRPCClient(transport)

    assert client.get_tx_out(Hash256.from_wire(TXID), 0) is None
    assert transport.calls[0].params == (TXID, 0, True)


def test_gettxout_decodes_unspent_output() -> None:
    payload = {
        "bestblock": GENESIS_HASH,
        "confirmations": 3,
        "value": 50,
        "scriptPubKey": {"asm": "OP_TRUE", "hex": "51", "type": "nonstandard"},
        "coinbase": True,
    }
    client = NodeRPCClient(returning(payload))

    txout = client.get_tx_out(Hash256.from_wire(TXID), 0)

    assert txout is not None
    assert txout.value == 50
    assert txout.script_pub_key.script_type == "nonstandard"


def test_raw_mempool_variants() -> None:
    client = NodeRPCClient(returning([TXID]))
    txids = client.get_raw_mempool()

    assert isinstance(txids, MempoolTxids)
    assert txids.txids == [Hash256.from_wire(TXID)]

    entry = {"vsize": 110, "weight": 440, "time": 1700000000, "height": 100, "depends": []}
    client = NodeRPCClient(returning({TXID: entry}))
    entries = client.get_raw_mempool(verbose=True)

    assert isinstance(entries, MempoolEntries)
    assert entries.entries[Hash256.from_wire(TXID)].vsize == 110


def test_estimate_smart_fee_sends_mode() -> None:
    transport = returning({"feerate": 0.0001, "blocks": 6})
    client = NodeRPCClient(transport)

    estimate = client.estimate_smart_fee(6, EstimateMode.ECONOMICAL)

    assert estimate.feerate == 0.0001
    assert estimate.blocks == 6
    assert transport.calls[0].params == (6, "ECONOMICAL")


def test_estimate_smart_fee_without_estimate() -> None:
    client = NodeRPCClient(returning({"errors": ["Insufficient data or no feerate found"], "blocks": 2}))

    estimate = client.estimate_smart_fee(2)

    assert estimate.feerate is None
    assert estimate.errors == ["Insufficient data or no feerate found"]


def test_add_node_and_ping_return_none() -> None:
    transport = returning(None)
    client = NodeRPCClient(transport)

    assert client.add_node("10.0.0.1:8333", AddNodeCommand.ADD) is None
    assert client.ping() is None
    assert transport.calls[0].params == ("10.0.0.1:8333", "add")


def test_ping_rejects_non_null_result() -> None:
    with pytest.raises(MalformedResponseError):
        NodeRPCClient(returning(1)).ping()


def test_chain_tips_status_is_validated() -> None:
    tip = {"height": 10, "hash": GENESIS_HASH, "branchlen": 0, "status": "active"}
    client = NodeRPCClient(returning([tip]))

    assert client.get_chain_tips()[0].status == "active"

    client = NodeRPCClient(returning([{**tip, "status": "sideways"}]))
    with pytest.raises(MalformedResponseError):
        client.get_chain_tips()


def test_blockchain_info_shape_follows_node_version() -> None:
    legacy_payload = blockchain_info(
        softforks=[{"id": "bip34", "version": 2, "reject": {"status": True}}],
    )

    current = NodeRPCClient(returning(blockchain_info())).get_blockchain_info()
    legacy = NodeRPCClient(returning(legacy_payload), node_version=180100).get_blockchain_info()

    assert type(current) is BlockchainInfo
    assert isinstance(legacy, LegacyBlockchainInfo)
    assert legacy.softforks[0].id == "bip34"

    with pytest.raises(MalformedResponseError):
        NodeRPCClient(returning(blockchain_info()), node_version=180100).get_blockchain_info()


def test_network_info_shape_follows_node_version() -> None:
    legacy_payload = network_info(version=130200, subversion="/Satoshi:0.13.2/")
    del legacy_payload["networkactive"]
    del legacy_payload["connections"]
    del legacy_payload["incrementalfee"]

    legacy = NodeRPCClient(returning(legacy_payload), node_version=130200).get_network_info()
    current = NodeRPCClient(returning(network_info()), node_version=250000).get_network_info()

    assert isinstance(legacy, LegacyNetworkInfo)
    assert legacy.connections is None
    assert isinstance(current, NetworkInfo)
    assert current.connections == 8

    with pytest.raises(MalformedResponseError):
        NodeRPCClient(returning(legacy_payload)).get_network_info()


def test_detect_node_version_updates_client() -> None:
    client = NodeRPCClient(returning(network_info(version=180100)))

    assert client.detect_node_version() == 180100
    assert client.node_version == 180100


def test_context_manager_closes_transport() -> None:
    transport = returning(1)

    with NodeRPCClient(transport) as client:
        client.get_block_count()

    assert transport.closed


def test_http_round_trip_with_node_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["params"] == [GENESIS_HASH, 1]
        return httpx.Response(
            500,
            json={"result": None, "error": {"code": -5, "message": "Block not found"}, "id": body["id"]},
        )

    config = CoreRPCConfig(rpc_url="http://node.test:8332", rpc_user="alice")
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    client = NodeRPCClient.from_config(config, password="secret", client=http_client)

    with pytest.raises(ProtocolError) as excinfo:
        client.get_block(Hash256.from_wire(GENESIS_HASH))

    assert excinfo.value.code == -5
    assert excinfo.value.known_code is RPCErrorCode.INVALID_ADDRESS_OR_KEY


def test_http_connection_refused() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    config = CoreRPCConfig()
    client = NodeRPCClient.from_config(config, client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(TransportError):
        client.get_best_block_hash()
