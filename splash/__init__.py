"""Assemblage des arborescences de splash de démarrage (plymouth).

Produit deux arborescences cohérentes à partir d'une même sélection de thème:
une pour le système démarré, une pour l'environnement initrd.
"""

__version__ = "0.3.0"
