"""
Keys - signing identity for cli-wallet.

Key generation, import and address derivation on top of eth-account,
plus persistence of the private key into a dotenv file.
"""
