"""Bundled resources for imgprobe."""
