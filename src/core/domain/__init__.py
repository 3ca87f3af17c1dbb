"""Dominio del gateway: entidades del gimnasio, estados de sesión y errores.

Nada aquí importa `httpx` ni toca disco; los adaptadores traducen hacia y
desde estos tipos.
"""
