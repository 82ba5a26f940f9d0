"""
Plugin Reporter - Inventaire des plugins d'une application hôte

Ce package collecte la liste des plugins installés, l'envoie une fois par
jour au collecteur distant et expose un endpoint sécurisé permettant au
collecteur de déclencher un envoi ou de vérifier que le site répond.

Author: Kobalt Digital
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Kobalt Digital"

# Imports principaux pour faciliter l'utilisation
from .core.collector import InventoryCollector
from .core.config import ReporterConfig
from .core.logger import ReporterLogger
from .core.reporter import Reporter

__all__ = ['InventoryCollector', 'ReporterConfig', 'ReporterLogger', 'Reporter']
