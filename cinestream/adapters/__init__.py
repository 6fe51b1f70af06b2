"""Adaptateurs vers les systemes externes."""
