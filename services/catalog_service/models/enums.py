"""Enum definitions for catalog models."""

import enum


class UserType(str, enum.Enum):
    USER = "user"
    VENDOR = "vendor"
    ADMIN = "admin"
