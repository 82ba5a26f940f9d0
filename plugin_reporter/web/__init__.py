"""
Package interface web du reporter de plugins

Ce package fournit l'application Flask :
- Endpoint sécurisé plugin-reporter/v1 (send, status)
- Page de réglages et envoi de test pour les administrateurs
"""
