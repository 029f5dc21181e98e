"""
Employee Use Cases

Read access to the logged-in employee.
"""

from .load_profile_use_case import LoadProfileUseCase

__all__ = [
    "LoadProfileUseCase",
]
