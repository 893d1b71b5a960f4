"""
Node Setup Module

Pushes the generated Icecast configuration to every node.
"""

from .rollout import ConfigRollout, find_master, render_setup_script, SCRIPT_PATH

__all__ = [
    "ConfigRollout",
    "find_master",
    "render_setup_script",
    "SCRIPT_PATH",
]
