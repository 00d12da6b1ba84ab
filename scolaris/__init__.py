"""
SCOLARIS

Authentification par rôle (administrateur, enseignant, élève),
verrouillage anti force brute et gestion de session.
"""

__version__ = "0.1.0"
