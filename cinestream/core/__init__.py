"""Domaine: entites, objets valeur et ports."""
