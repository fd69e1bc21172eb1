"""
Pneuma - Pact command layer for pactship.

Loads contract source, builds unsigned Pact commands, and talks to the
Chainweb Pact API (send / local / listen) over httpx.
"""
