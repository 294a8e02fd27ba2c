from .heatmap_compositor import HeatmapCompositor, composite, render_png

__all__ = ["HeatmapCompositor", "composite", "render_png"]
