"""
Transaction Builder - Build, sign, and send EIP-1559 transfers.

Pipeline for one transfer:

    BUILT -> FEE_RESOLVED -> NONCE_RESOLVED -> GAS_ESTIMATED -> SIGNED -> SUBMITTED

Each step runs only if the previous one succeeded; the first error is
raised unchanged and ``builder.stage`` records how far the pipeline got.
A transaction is handed to ``eth_sendRawTransaction`` only once it is
fully built and signed.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import RpcError, WouldRevertError
from ..keys.account import checksum_address
from .abi import ERC20
from .rpc import ChainClient
from .signer import Signer
from .token import Erc20Token
from .tx import FeeConfig, SignedTransaction, TransactionRequest, sign_transaction
from .units import ETHER_DECIMALS, check_amount_format, to_base_units

logger = logging.getLogger(__name__)


class Stage(str, enum.Enum):
    BUILT = "built"
    FEE_RESOLVED = "fee_resolved"
    NONCE_RESOLVED = "nonce_resolved"
    GAS_ESTIMATED = "gas_estimated"
    SIGNED = "signed"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class TransferResult:
    tx_hash: str
    request: TransactionRequest
    signed: SignedTransaction


class TransactionBuilder:
    """
    Turns a transfer intent into a signed, broadcast-ready transaction.

    Args:
        client: Chain client used for decimals, nonce, gas and broadcast
        signer: Signing identity (``LocalSigner`` or a test stub)
        chain_id: EIP-155 chain id baked into the signature
        fees: Static fee-market parameters (defaults: 2 / 20 gwei)
    """

    def __init__(
        self,
        client: ChainClient,
        signer: Signer,
        chain_id: int,
        fees: Optional[FeeConfig] = None,
    ) -> None:
        self.client = client
        self.signer = signer
        self.chain_id = chain_id
        self.fees = fees or FeeConfig()
        self.stage: Optional[Stage] = None

    def _advance(self, stage: Stage) -> None:
        self.stage = stage
        logger.info("transfer pipeline: %s", stage.value)

    def _finish_request(self, to: str, data: bytes, value: int) -> TransactionRequest:
        """Steps shared by token and native transfers, from fees onwards."""
        self._advance(Stage.BUILT)

        fees = self.fees
        self._advance(Stage.FEE_RESOLVED)

        nonce = self.client.get_transaction_count(self.signer.address, "pending")
        self._advance(Stage.NONCE_RESOLVED)

        params = {
            "from": self.signer.address,
            "to": to,
            "data": "0x" + data.hex(),
            "value": hex(value),
        }
        try:
            gas_limit = self.client.estimate_gas(params)
        except WouldRevertError:
            raise
        except RpcError as exc:
            raise WouldRevertError(
                code=exc.code,
                message=exc.rpc_message,
                data=exc.data,
                method=exc.method,
            ) from exc
        self._advance(Stage.GAS_ESTIMATED)

        return TransactionRequest(
            to=to,
            data=data,
            value=value,
            chain_id=self.chain_id,
            nonce=nonce,
            gas_limit=gas_limit,
            max_priority_fee_per_gas=fees.max_priority_fee_per_gas,
            max_fee_per_gas=fees.max_fee_per_gas,
        )

    def build_token_transfer(self, token: str, recipient: str, amount: str) -> TransactionRequest:
        """
        Build an unsigned ERC-20 ``transfer(address,uint256)`` transaction.

        Args:
            token: ERC-20 contract address
            recipient: Receiving address
            amount: Human-readable token amount (e.g. "10.5")

        Raises:
            FormatError / PrecisionError: Bad addresses or amount
            WouldRevertError: Gas estimation says the call would fail
            ChainError: Any other remote failure
        """
        self.stage = None
        token = checksum_address(token)
        recipient = checksum_address(recipient)
        check_amount_format(amount)

        decimals = Erc20Token(self.client, token).decimals()
        base_amount = to_base_units(amount, decimals)
        data = ERC20["transfer"].encode_call([recipient, base_amount]).to_bytes()
        logger.debug("token transfer: %s base units (decimals=%d)", base_amount, decimals)

        return self._finish_request(token, data, 0)

    def build_native_transfer(self, recipient: str, amount: str) -> TransactionRequest:
        """Build an unsigned ETH transfer; ``amount`` is in ether."""
        self.stage = None
        recipient = checksum_address(recipient)
        value = to_base_units(amount, ETHER_DECIMALS)
        return self._finish_request(recipient, b"", value)

    def sign(self, request: TransactionRequest) -> SignedTransaction:
        signed = sign_transaction(request, self.signer)
        self._advance(Stage.SIGNED)
        return signed

    def submit(self, signed: SignedTransaction) -> str:
        """Broadcast a signed transaction and return its hash."""
        tx_hash = self.client.send_raw_transaction(signed.raw)
        self._advance(Stage.SUBMITTED)
        if tx_hash.lower() != signed.hash:
            logger.warning("node returned hash %s, computed %s", tx_hash, signed.hash)
        logger.info("submitted %s (nonce=%d)", tx_hash, signed.request.nonce)
        return tx_hash

    def _run(self, request: TransactionRequest) -> TransferResult:
        signed = self.sign(request)
        tx_hash = self.submit(signed)
        return TransferResult(tx_hash=tx_hash, request=request, signed=signed)

    def transfer_token(self, token: str, recipient: str, amount: str) -> TransferResult:
        return self._run(self.build_token_transfer(token, recipient, amount))

    def transfer_native(self, recipient: str, amount: str) -> TransferResult:
        return self._run(self.build_native_transfer(recipient, amount))
