"""
Subpackage ``var`` contains helper functions for frame coordinates and for
the extraction of annular regions.
"""

from .coords import *
from .shapes import *
