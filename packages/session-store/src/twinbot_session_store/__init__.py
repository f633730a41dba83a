"""Credential persistence for the TwinBot client.

The gateway never touches storage directly: it is handed a CredentialVault,
which is a typed view over any KeyValueStore (memory, JSON file or Redis).
"""
