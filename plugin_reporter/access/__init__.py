"""
Package de contrôle d'accès

Restreint les surfaces d'administration aux identités dont le domaine
email figure dans la liste autorisée.
"""

from .gate import AccessGate, is_permitted

__all__ = ['AccessGate', 'is_permitted']
