"""
Subpackage ``metrics`` includes:

- signal-to-noise ratio (S/N) estimation and S/N maps,
- Student-t to gaussian significance conversions,
- throughput and contrast curve generation.
"""

from .contrcurve import *
from .snr_source import *
