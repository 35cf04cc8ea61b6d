import pytest

from conftest import (PROGRAM_ID, STORAGE, consumed_line, data_line,
                      error_revert, failed_send, return_line)
from solang_sdk.abi import codec
from solang_sdk.abi.types import String, UInt
from solang_sdk.contract import Contract
from solang_sdk.errors import (ExecutionError, InvalidAccountReferenceError,
                               MissingRequiredCollaboratorError,
                               MissingReturnDataError)
from solang_sdk.executor import SimulationResult, TransactionLogs
from solang_sdk.program import Program
from solang_sdk.publickey import PublicKey
from solang_sdk.result import Err
from solang_sdk.tx.instruction import constructor_selector
from solang_sdk.utils.hash import keccak256

FAILED = f"Program {PROGRAM_ID} failed: custom program error: 0x0"

ABI = [
    {"type": "constructor", "inputs": [{"name": "owner", "type": "string"}]},
    {
        "type": "function",
        "name": "name",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "pair",
        "inputs": [],
        "outputs": [{"name": "a", "type": "uint8"}, {"name": "b", "type": "string"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "doRevert",
        "inputs": [{"name": "really", "type": "bool"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "bump",
        "inputs": [{"name": "by", "type": "uint64"}],
        "outputs": [{"name": "", "type": "uint64"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "Bumped",
        "inputs": [{"name": "to", "type": "uint64", "indexed": False}],
    },
]


@pytest.fixture
def program(ledger, payer):
    return Program(ledger, payer, PROGRAM_ID)


@pytest.fixture
def contract(program):
    return program.get_contract(ABI, STORAGE)


@pytest.mark.asyncio
async def test_read_only_call_is_simulated(ledger, contract):
    ledger.sim_result = SimulationResult(
        err=None,
        logs=[return_line(codec.encode([String()], ["Solana"])), consumed_line(1843)],
    )
    assert await contract.functions.name() == "Solana"

    res = await contract.call("name")
    assert res.result == "Solana"
    assert res.compute_units_used > 0
    assert ledger.sent == []
    assert len(ledger.simulated) == 2


@pytest.mark.asyncio
async def test_revert_reason_surfaces_as_execution_error(ledger, contract):
    ledger.send_error = failed_send()
    ledger.sim_result = SimulationResult(
        err={"InstructionError": [0, {"Custom": 0}]},
        logs=[return_line(error_revert("Do the revert thing")), consumed_line(2017), FAILED],
    )
    with pytest.raises(ExecutionError) as exc:
        await contract.functions.doRevert(True)
    assert exc.value.message == "Do the revert thing"
    assert exc.value.compute_units_used > 0

    res = await contract.try_call("doRevert", [True])
    assert isinstance(res, Err)
    assert res.error.message == "Do the revert thing"


@pytest.mark.asyncio
async def test_submitted_call_decodes_result_and_events(ledger, contract, payer):
    ledger.tx_logs = TransactionLogs(
        logs=[
            data_line([keccak256("Bumped(uint64)")], (8).to_bytes(8, "little")),
            return_line((8).to_bytes(8, "little")),
            consumed_line(3000),
        ],
        compute_units_used=3000,
    )
    res = await contract.functions.bump.call(3)
    assert res.result == 8
    assert res.signature == "5ig"
    assert [(e.name, e.args) for e in res.events] == [("Bumped", {"to": 8})]

    (instructions, signers), = ledger.sent
    (ix,) = instructions
    assert signers == [payer]
    assert ix.keys[0].pubkey == STORAGE
    # zero selector, no seeds, then the function selector and its args
    assert ix.data[72:77] == b"\x00\x00\x00\x00\x00"
    assert ix.data[77:] == contract.interface.encode_function_data("bump", [3])


@pytest.mark.asyncio
async def test_multiple_outputs_come_back_as_list(ledger, contract):
    ledger.sim_result = SimulationResult(
        err=None, logs=[return_line(codec.encode([UInt(8), String()], [7, "x"]))]
    )
    assert await contract.functions.pair() == [7, "x"]


@pytest.mark.asyncio
async def test_missing_return_data(ledger, contract):
    ledger.sim_result = SimulationResult(err=None, logs=[consumed_line(10)])
    with pytest.raises(MissingReturnDataError):
        await contract.functions.name()


@pytest.mark.asyncio
async def test_explicit_simulate_and_extra_signers(ledger, contract, payer, other_signer):
    ledger.sim_result = SimulationResult(err=None, logs=[return_line(bytes(8))])
    await contract.call("bump", [1], simulate=True, signers=[other_signer, payer, other_signer])
    (_, signers), = ledger.simulated
    assert signers == [payer, other_signer]
    assert ledger.sent == []


@pytest.mark.asyncio
async def test_call_options_flow_into_instruction(ledger, contract, payer):
    ro = PublicKey(b"\x22" * 32)
    caller = PublicKey(b"\x33" * 32)
    ledger.tx_logs = TransactionLogs(logs=[return_line(bytes(8))])
    await contract.call("bump", [1], accounts=[ro], caller=caller, value=9)
    ((ix,), _), = ledger.sent
    assert [m.pubkey for m in ix.keys] == [STORAGE, ro]
    assert ix.data[32:64] == bytes(caller)
    assert ix.data[64:72] == (9).to_bytes(8, "little")


@pytest.mark.asyncio
async def test_unknown_option_rejected(contract):
    with pytest.raises(TypeError):
        await contract.call("bump", [1], gas=5)


@pytest.mark.asyncio
async def test_storage_account_mismatch(contract):
    with pytest.raises(InvalidAccountReferenceError):
        await contract.call("bump", [1], storage_account=PublicKey.default())


def test_get_with_foreign_program_id(program):
    with pytest.raises(InvalidAccountReferenceError):
        Contract.get(program, ABI, STORAGE, program_id=PublicKey.default())
    assert Contract.get(program, ABI, STORAGE, program_id=PROGRAM_ID).storage == STORAGE


@pytest.mark.asyncio
async def test_missing_payer(ledger):
    contract = Program(ledger, None, PROGRAM_ID).get_contract(ABI, STORAGE)
    with pytest.raises(MissingRequiredCollaboratorError):
        await contract.call("bump", [1])
    assert ledger.sent == []


@pytest.mark.asyncio
async def test_deploy_runs_constructor(ledger, program):
    ledger.tx_logs = TransactionLogs(logs=[consumed_line(5000)])
    deployed = await program.deploy_contract("Owned", ABI, STORAGE, ["alice"])
    assert deployed.contract.storage == STORAGE
    assert deployed.compute_units_used == 5000

    ((ix,), _), = ledger.sent
    assert ix.data[72:76] == constructor_selector("Owned")
    assert ix.data[77:] == codec.encode([String()], ["alice"])


@pytest.mark.asyncio
async def test_deploy_failure_raises(ledger, program):
    ledger.send_error = failed_send()
    ledger.sim_result = SimulationResult(err="x", logs=["Program log: storage account too small"])
    with pytest.raises(ExecutionError) as exc:
        await Contract.deploy(program, "Owned", ABI, STORAGE, ["alice"])
    assert exc.value.message == "storage account too small"


@pytest.mark.asyncio
async def test_contract_event_listener_round_trip(ledger, contract):
    got = []
    listener = await contract.add_event_listener(got.append)
    ledger.push([data_line([keccak256("Bumped(uint64)")], (2).to_bytes(8, "little"))])
    assert [e.args["to"] for e in got] == [2]
    await contract.remove_event_listener(listener)
    assert ledger.closed == 1


@pytest.mark.asyncio
async def test_program_log_listener(ledger, program):
    texts = []
    lid = await program.add_log_listener(texts.append)
    ledger.push(["Program log: Hello from Solang"])
    await program.remove_log_listener(lid)
    assert texts == ["Hello from Solang"]
    await program.close()
