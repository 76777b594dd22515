"""
Integration tests package for the EIP-1967 proxy resolver.

These tests drive the resolver end to end through the JSON-RPC client against a simulated node.
"""
