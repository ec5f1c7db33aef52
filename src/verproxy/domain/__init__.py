"""Domain layer — versions, paths, and capability descriptors.

This layer depends only on the standard library and verproxy.errors.
It must never import from infrastructure, proxy, commands, or config.
"""
