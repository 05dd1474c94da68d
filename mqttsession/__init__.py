"""Session-state building blocks for MQTT v5 clients: a send quota and packet stores."""

__version__ = "0.1.0"

__all__ = ["interfaces", "sendquota", "memory_store", "file_store"]