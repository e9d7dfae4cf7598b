"""
Feature modules for the Aqua Farm Ledger backend.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's collaborators
- models.py: Pydantic models for data transfer
- repository.py / service.py: Data access and business logic
- exceptions.py: Module-specific exceptions

Modules communicate through interfaces, not concrete implementations.
"""
