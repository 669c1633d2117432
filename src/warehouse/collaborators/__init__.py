"""Collaborator adapters — pluggable folio and chain generation."""

import os

_folio_generator_instance = None
_chain_generator_instance = None


def get_folio_generator():
    """Return the configured folio generator (singleton).

    Uses the in-memory generator by default. Configure via the
    FOLIO_GENERATOR environment variable.
    """
    global _folio_generator_instance
    if _folio_generator_instance is None:
        adapter = os.environ.get("FOLIO_GENERATOR", "memory")
        if adapter == "memory":
            from warehouse.collaborators.memory_adapter import InMemoryFolioGenerator

            _folio_generator_instance = InMemoryFolioGenerator()
        else:
            raise ValueError(f"Unknown folio generator: {adapter}")
    return _folio_generator_instance


def get_chain_generator():
    """Return the configured chain generator (singleton).

    Uses the in-memory generator by default. Configure via the
    CHAIN_GENERATOR environment variable.
    """
    global _chain_generator_instance
    if _chain_generator_instance is None:
        adapter = os.environ.get("CHAIN_GENERATOR", "memory")
        if adapter == "memory":
            from warehouse.collaborators.memory_adapter import InMemoryChainGenerator

            _chain_generator_instance = InMemoryChainGenerator()
        else:
            raise ValueError(f"Unknown chain generator: {adapter}")
    return _chain_generator_instance


def reset_collaborators():
    """Reset the collaborator singletons (useful for testing)."""
    global _folio_generator_instance, _chain_generator_instance
    _folio_generator_instance = None
    _chain_generator_instance = None
