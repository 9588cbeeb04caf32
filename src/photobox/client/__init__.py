"""HTTP client for the template registry."""

from .registry_client import RegistryClient, TemplateSubmission

__all__ = ["RegistryClient", "TemplateSubmission"]
