"""
Module Core - Composants principaux du reporter de plugins

Ce module contient :
- Configuration et logging
- Collecte de l'inventaire
- Envoi au collecteur distant
- Planification et routage des déclencheurs
- Canal de messages différés
"""
