"""
Theurgy - Command implementations for pactship.

Each module corresponds to a top-level CLI command:
- deploy: Sign and send a Pact contract to a Chainweb chain
- listen: Wait for the result of a previously sent command
- keygen: Create a local Ed25519 key and default configuration
"""
