"""Core: dominio, configuración y servicios (sin detalles de CLI)."""
