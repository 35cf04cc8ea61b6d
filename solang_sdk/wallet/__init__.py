"""
solang_sdk.wallet
=================

Ed25519 keypairs used as payers and signers.
"""

from .keypair import Keypair, verify_signature

__all__ = ["Keypair", "verify_signature"]
