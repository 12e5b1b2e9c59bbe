"""Aggregation gateway assembling per-container ads, images and videos."""
