"""
Exception types raised across the service.

Transient failures of external calls (aggregator, LLM) are not exceptions
at the pipeline level: they surface as Failed outcomes (see outcome.py)
and are recovered locally. The exceptions here cover the cases that do
propagate.
"""


class SavvyCartError(Exception):
    """Base class for all service errors."""


class ConfigurationError(SavvyCartError):
    """Required configuration is missing; the server must not start."""


class LLMError(SavvyCartError):
    """An LLM call failed or returned output that could not be used."""


class RecipeDiscoveryError(SavvyCartError):
    """The ingredient list for a recipe could not be produced."""
