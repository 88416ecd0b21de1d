__version__ = "1.0.0"

__all__ = [
    # Errors
    "WalletError",
    "ConfigurationError",
    "InputError",
    "FormatError",
    "PrecisionError",
    "TypeMismatchError",
    "InvalidKeyError",
    "InvalidTransactionError",
    "EntropyError",
    "ChainError",
    "TransportError",
    "RpcError",
    "WouldRevertError",
    "ParseError",
    "DecodeError",
    "ParallelCallError",
    # Keys
    "Account",
    "generate",
    "from_secret",
    "derive_address",
    "checksum_address",
    # Units
    "to_base_units",
    "to_human_units",
    # ABI
    "CallData",
    "FunctionSpec",
    "ERC20",
    "encode_call",
    "decode_return",
    # Chain
    "ChainClient",
    "read_parallel",
    "Erc20Token",
    # Transactions
    "FeeConfig",
    "TransactionRequest",
    "SignedTransaction",
    "Signature",
    "LocalSigner",
    "TransactionBuilder",
    "Stage",
    # Config
    "WalletConfig",
    "load_config",
]

from .errors import (
    ChainError,
    ConfigurationError,
    DecodeError,
    EntropyError,
    FormatError,
    InputError,
    InvalidKeyError,
    InvalidTransactionError,
    ParallelCallError,
    ParseError,
    PrecisionError,
    RpcError,
    TransportError,
    TypeMismatchError,
    WalletError,
    WouldRevertError,
)
from .keys.account import Account, checksum_address, derive_address, from_secret, generate
from .chain.units import to_base_units, to_human_units
from .chain.abi import ERC20, CallData, FunctionSpec, decode_return, encode_call
from .chain.rpc import ChainClient, read_parallel
from .chain.token import Erc20Token
from .chain.signer import LocalSigner, Signature
from .chain.tx import FeeConfig, SignedTransaction, TransactionRequest
from .chain.builder import Stage, TransactionBuilder
from .config import WalletConfig, load_config
