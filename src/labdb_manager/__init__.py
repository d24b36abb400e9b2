"""Deployment orchestrator for the labdb web application."""

__version__ = "0.3.0"
