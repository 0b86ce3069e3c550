"""Domain dataclasses and enums."""
