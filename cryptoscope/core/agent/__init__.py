"""
Crypto research agent extensions.

This package holds what the external agent consumes: the entity vocabulary
(entities), the prompt additions (prompts), and the tool registry/executor
(tools).
"""

from .entities import Entity, EntityType, QueryDomain, Understanding

__all__ = [
    "Entity",
    "EntityType",
    "QueryDomain",
    "Understanding",
]
