"""Adaptadores: I/O concreto (HTTP vía httpx, exportación a disco)."""
