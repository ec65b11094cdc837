"""Servicios del Core: decodificación, traducción de errores y el cliente."""
