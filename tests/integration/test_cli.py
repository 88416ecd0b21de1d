"""
CLI integration tests using Click's test runner.

The JSON-RPC node is replaced by an httpx MockTransport, so no network
access is needed.
"""

from __future__ import annotations

import re
from functools import partial
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from eth_hash.auto import keccak

from cliwallet import __version__
from cliwallet.chain.rpc import ChainClient
from cliwallet.cli import cli
from cliwallet.keys.account import derive_address

from conftest import (
    KEY_ONE,
    KEY_ONE_ADDRESS,
    RECIPIENT,
    TOKEN,
    RpcFailure,
    ScriptedNode,
    erc20_call,
)


def _tx_hash(params: list) -> str:
    return "0x" + keccak(bytes.fromhex(params[0][2:])).hex()


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def env_file(tmp_path: Path) -> Path:
    path = tmp_path / ".env"
    path.write_text(
        f"PRIVATE_KEY={KEY_ONE}\nALCHEMY_SEPOLIA_URL=https://rpc.test\n",
        encoding="utf-8",
    )
    return path


def run_with_node(runner: CliRunner, node: ScriptedNode, args: list[str]):
    factory = partial(ChainClient, transport=node.transport())
    with patch("cliwallet.commands._common.ChainClient", factory):
        return runner.invoke(cli, args)


class TestVersion:
    """Test basic CLI commands that don't need a node."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestGenerate:
    """Test key generation and persistence."""

    def test_generate_writes_key(self, runner: CliRunner, tmp_path: Path) -> None:
        output = tmp_path / "wallet.env"
        result = runner.invoke(cli, ["generate", "--output", str(output)])
        assert result.exit_code == 0

        content = output.read_text(encoding="utf-8")
        match = re.search(r"^PRIVATE_KEY=(0x[0-9a-f]{64})$", content, re.MULTILINE)
        assert match is not None
        assert derive_address(match.group(1)) in result.output
        assert str(output.resolve()) in result.output

    def test_generate_keeps_other_settings(self, runner: CliRunner, env_file: Path) -> None:
        result = runner.invoke(cli, ["generate", "-o", str(env_file)])
        assert result.exit_code == 0
        content = env_file.read_text(encoding="utf-8")
        assert "ALCHEMY_SEPOLIA_URL=https://rpc.test" in content
        assert KEY_ONE not in content
        assert content.count("PRIVATE_KEY=") == 1


class TestWhoami:
    """Test wallet identity display."""

    def test_whoami(self, runner: CliRunner, env_file: Path) -> None:
        result = runner.invoke(cli, ["--env-file", str(env_file), "whoami"])
        assert result.exit_code == 0
        assert KEY_ONE_ADDRESS in result.output

    def test_whoami_without_key(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--env-file", str(tmp_path / "none.env"), "whoami"])
        assert result.exit_code == 2
        assert "PRIVATE_KEY" in result.output


class TestBalance:
    """Test native balance queries."""

    def test_balance(self, runner: CliRunner, env_file: Path) -> None:
        node = ScriptedNode({"eth_getBalance": hex(15 * 10**17)})
        result = run_with_node(runner, node, ["--env-file", str(env_file), "balance", RECIPIENT])
        assert result.exit_code == 0
        assert "1.5 ETH" in result.output

    def test_balance_without_rpc_url(self, runner: CliRunner, tmp_path: Path) -> None:
        node = ScriptedNode({})
        result = run_with_node(
            runner, node, ["--env-file", str(tmp_path / "none.env"), "balance", RECIPIENT]
        )
        assert result.exit_code == 2
        assert "ALCHEMY_SEPOLIA_URL" in result.output
        assert node.calls == []

    def test_balance_bad_address(self, runner: CliRunner, env_file: Path) -> None:
        node = ScriptedNode({})
        result = run_with_node(runner, node, ["--env-file", str(env_file), "balance", "0x123"])
        assert result.exit_code == 3
        assert node.calls == []

    def test_balance_rpc_url_option(self, runner: CliRunner, tmp_path: Path) -> None:
        node = ScriptedNode({"eth_getBalance": "0x0"})
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(tmp_path / "none.env"), "--rpc-url", "https://rpc.test",
             "balance", RECIPIENT],
        )
        assert result.exit_code == 0
        assert "0 ETH" in result.output


class TestErc20Balance:
    """Test token balance queries."""

    def test_erc20_balance(self, runner: CliRunner, env_file: Path) -> None:
        node = ScriptedNode({"eth_call": erc20_call(balance=123_456_789, decimals=6)})
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "erc20-balance", "--token", TOKEN, "--address", RECIPIENT],
        )
        assert result.exit_code == 0
        assert "123.456789" in result.output
        assert "decimals: 6" in result.output
        assert len(node.calls) == 2

    def test_erc20_balance_failure_names_call(self, runner: CliRunner, env_file: Path) -> None:
        def respond(params: list) -> object:
            if params[0]["data"].startswith("0x70a08231"):
                return RpcFailure(3, "execution reverted")
            return "0x" + (6).to_bytes(32, "big").hex()

        node = ScriptedNode({"eth_call": respond})
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "erc20-balance", "-t", TOKEN, "-a", RECIPIENT],
        )
        assert result.exit_code == 5
        assert "balanceOf" in result.output
        assert "execution reverted" in result.output


class TestTransfer:
    """Test ERC-20 and native transfers end to end."""

    def _node(self, **overrides) -> ScriptedNode:
        results = {
            "eth_call": erc20_call(decimals=6),
            "eth_getTransactionCount": "0x5",
            "eth_estimateGas": "0xc350",
            "eth_sendRawTransaction": _tx_hash,
        }
        results.update(overrides)
        return ScriptedNode(results)

    def test_transfer(self, runner: CliRunner, env_file: Path) -> None:
        node = self._node()
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "transfer",
             "--token", TOKEN, "--to", RECIPIENT, "--amount", "10.5"],
        )
        assert result.exit_code == 0, result.output
        assert node.methods == [
            "eth_call",
            "eth_getTransactionCount",
            "eth_estimateGas",
            "eth_sendRawTransaction",
        ]
        raw = node.calls[-1][1][0]
        assert raw.startswith("0x02")
        assert _tx_hash([raw]) in result.output
        assert "https://sepolia.etherscan.io/tx/" in result.output

    def test_transfer_wait(self, runner: CliRunner, env_file: Path) -> None:
        node = self._node(eth_getTransactionReceipt={"status": "0x1"})
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "transfer",
             "-t", TOKEN, "-r", RECIPIENT, "-a", "1", "--wait"],
        )
        assert result.exit_code == 0, result.output
        assert "Confirmed" in result.output

    def test_transfer_wait_null_status(self, runner: CliRunner, env_file: Path) -> None:
        node = self._node(eth_getTransactionReceipt={"status": None})
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "transfer",
             "-t", TOKEN, "-r", RECIPIENT, "-a", "1", "--wait"],
        )
        assert result.exit_code == 1
        assert "reverted" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_transfer_without_key(self, runner: CliRunner, tmp_path: Path) -> None:
        node = self._node()
        env = tmp_path / ".env"
        env.write_text("ALCHEMY_SEPOLIA_URL=https://rpc.test\n", encoding="utf-8")
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env), "transfer", "-t", TOKEN, "-r", RECIPIENT, "-a", "1"],
        )
        assert result.exit_code == 2
        assert node.calls == []

    def test_transfer_oversized_amount(self, runner: CliRunner, env_file: Path) -> None:
        node = self._node()
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "transfer",
             "-t", TOKEN, "-r", RECIPIENT, "-a", "9" * 5000],
        )
        assert result.exit_code == 3
        assert "exceeds uint256" in result.output
        assert node.methods == ["eth_call"]

    def test_transfer_precision_error(self, runner: CliRunner, env_file: Path) -> None:
        node = self._node()
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "transfer",
             "-t", TOKEN, "-r", RECIPIENT, "-a", "1.0000001"],
        )
        assert result.exit_code == 3
        assert node.methods == ["eth_call"]

    def test_transfer_insufficient_funds(self, runner: CliRunner, env_file: Path) -> None:
        node = self._node(eth_sendRawTransaction=RpcFailure(-32000, "insufficient funds"))
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "transfer",
             "-t", TOKEN, "-r", RECIPIENT, "-a", "10.5"],
        )
        assert result.exit_code == 5
        assert "insufficient funds" in result.output
        assert node.methods[-1] == "eth_sendRawTransaction"

    def test_transfer_inverted_fees(self, runner: CliRunner, env_file: Path) -> None:
        node = self._node()
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "transfer", "-t", TOKEN, "-r", RECIPIENT, "-a", "1",
             "--max-fee", "1", "--max-priority-fee", "2"],
        )
        assert result.exit_code == 2
        assert node.calls == []

    def test_send_native(self, runner: CliRunner, env_file: Path) -> None:
        node = self._node(eth_estimateGas="0x5208")
        result = run_with_node(
            runner,
            node,
            ["--env-file", str(env_file), "send", "--to", RECIPIENT, "--amount", "0.01"],
        )
        assert result.exit_code == 0, result.output
        assert "eth_call" not in node.methods
        assert node.calls[1][1][0]["value"] == hex(10**16)
