"""
CineStream - couche d'acces resiliente aux sources de contenu externes.

Metadonnees films/series (TMDB), annuaire de chaines en direct (iptv-org)
et catalogue federe de sources tierces via un backend gere.
"""

__version__ = "0.1.0"
