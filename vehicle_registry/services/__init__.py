"""
Service layer - Business workflows.

Orchestrates domain entities and repositories.
"""
