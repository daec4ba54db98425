"""Core utilities: configuration, constants, exceptions, logging and console helpers."""
