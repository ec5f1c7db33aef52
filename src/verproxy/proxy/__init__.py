"""Proxy layer — callers, results, and the instance builder.

Proxies may import from domain and infrastructure layers.
They must never import from commands or output.
"""
