"""Hierarchical category organizer for multi-tenant shops."""
