"""
Sigil - Keys and signatures for Pact commands.

Ed25519 key management, the Pact command hash, and the signing backends
(Chainweaver quicksign or a local key from ~/.pactship/.env).
"""
