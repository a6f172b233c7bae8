"""Service layer — argument parsing, validation and provisioning.

Every stage returns a ServiceResult; none of them terminates the process.
Services may import from domain and infrastructure layers.
They must never import from output or the CLI entry point.
"""
