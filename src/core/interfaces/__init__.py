"""Contratos que el Core exige a los adaptadores.

Hoy solo el almacén de credenciales: el gestor de sesión y el transporte
dependen del `Protocol`, nunca de un backend de almacenamiento concreto.
"""
