"""Infrastructure layer — the host's account databases and tools.

This layer depends on stdlib only (pwd, grp, subprocess).
It must never import from domain, services, or output.
"""
