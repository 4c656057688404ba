"""
Subpackage ``fm`` contains the injection of fake companions in frames and ADI
cubes, used to measure the algorithm throughput.
"""

from .fakecomp import *
