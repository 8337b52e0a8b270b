"""
Treino - workout engine.

Exercise catalog, time-cost model, recommended routine generator, live
session state machine and performance analytics.
"""

__version__ = '0.1.0'
