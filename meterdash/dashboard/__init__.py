"""
meterdash Dashboard Module

Per-session view-model (controller.py) plus the pure helpers it composes:
time ranges, series cache, zoom and gauge scale selection.
"""
