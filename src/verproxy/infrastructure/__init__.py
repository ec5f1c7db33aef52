"""Infrastructure layer — artifacts, archive extraction, loading domains.

This layer touches the filesystem and the import system.
It must never import from proxy, commands, or output.
"""
