"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras y estrictas (Pydantic v2).
- El dominio no conoce archivos, CLI ni el motor de CI: solo build types,
  parámetros y directivas.
"""
