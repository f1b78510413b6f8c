"""Continuous JSX and security validation for web application source trees."""

__version__ = "0.1.0"
