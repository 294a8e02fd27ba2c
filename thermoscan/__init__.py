"""Thermogram quality check, analysis and heatmap rendering."""
