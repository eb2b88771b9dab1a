"""EduFlow — multi-tenant education management backend.

Institutes are the tenant boundary. Students, teachers, and courses all
belong to exactly one institute, and every data path is scoped by it.
"""

__version__ = "0.1.0"
