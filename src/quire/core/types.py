"""Core type definitions."""

from typing import NewType

# URL slug without leading/trailing slashes (e.g., "spring-boot-paging",
# "contribute/become-an-author"); "" is the home page.
# Distinct from filesystem Path to catch type mismatches
Slug = NewType("Slug", str)
