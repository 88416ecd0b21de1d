"""
Commands - CLI command implementations for cli-wallet.

Each module holds one or more top-level CLI commands:
- identity: generate a keypair, show the configured address
- balance:  native and ERC-20 balance queries
- transfer: sign and broadcast ERC-20 or native transfers
"""
