"""
This file contains example reconciler hooks for the Profile Controller
"""
import logging

logger = logging.getLogger(__name__)


async def log_pod_defaults(config):
    """
    Example reconciler hook which only logs the configured pod default labels.

    Usage: --reconciler-hook=profile_controller.example_hooks.log_pod_defaults
    """
    for selector in config.selectors():
        for label in config.labels(selector):
            logger.info(f"Pods selected by {selector} get label {label}")
