"""Minecraft Java Edition protocol primitives: fields, packets, encryption, RCON, queues, versions and connections."""

__version__ = "0.1.0"

__all__ = ["cfb8", "compose", "conn", "fields", "packet", "queues", "rcon", "versions"]