"""Travel diary web app: photo uploads, EXIF GPS extraction and AI titles."""

__version__ = "0.1.0"
