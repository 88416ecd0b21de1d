"""
Chain - on-chain interaction layer for cli-wallet.

Provides unit conversion, ABI encoding, a JSON-RPC client, and the
EIP-1559 transaction builder/signer.

Uses httpx + eth-account + eth-abi + rlp instead of the heavyweight web3.py.
"""
