# Models/__init__.py
from .base import Base
from .customer import Customer

# List all models for easy access and database initialization
__all__ = [
    'Base',
    'Customer',
]
