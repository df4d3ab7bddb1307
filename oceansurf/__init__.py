"""Ocean wave simulation, sky model, camera, grid mesh and water optics data for rendering."""

__version__ = "1.1.0"

__all__ = [
    "camera",
    "grid",
    "optics",
    "sky",
    "skymodel",
    "spectrum",
    "tessendorf",
    "watersurface",
]