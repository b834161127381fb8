"""Helpers for debugging."""

import json
import logging


def is_debug(module_name):
    """Is this module configured for debug-level information?"""
    return logging.getLogger(module_name).isEnabledFor(logging.DEBUG)


def log_long_json(logger, label, jdata):
    """Log a JSON payload at debug level, pretty-printed."""
    logger.debug("%s:\n%s", label, json.dumps(jdata, sort_keys=True, indent=4))
