"""
Abstract interfaces for the NPS router.

These interfaces define the contracts that concrete implementations
must adhere to, following the Dependency Inversion Principle.

This package contains:
- Provider interfaces for external collaborators (storage, webhook, navigation)
- Repository interfaces for campaign and response access
"""
