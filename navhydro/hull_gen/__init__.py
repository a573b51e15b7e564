"""
hull_gen/__init__.py - Template hull exports.

COORDINATE FRAME CONTRACT
=========================
  X-axis: Forward, x = 0 at the aft station
  Y-axis: Half-breadths, one side only (y >= 0), mirrored for the other
  Z-axis: Up, z = 0 at the keel

  Units: Meters (m) for all dimensions
"""

from .templates import (
    HullTemplate,
    box_barge,
    wigley_hull,
    v_section_hull,
    TEMPLATES,
    list_templates,
    generate_template,
)

__all__ = [
    "HullTemplate",
    "box_barge",
    "wigley_hull",
    "v_section_hull",
    "TEMPLATES",
    "list_templates",
    "generate_template",
]
