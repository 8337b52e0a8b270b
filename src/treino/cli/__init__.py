"""Treino command-line interface."""
