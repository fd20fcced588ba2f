"""Pydantic models for option chains and priced positions."""
