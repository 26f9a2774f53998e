"""Utility functions shared across sonar packages.

This module currently provides URI/path conversion helpers.
"""

import logging

# Configure logger for this module
logger = logging.getLogger(__name__)
