"""
Subpackage ``config`` contains configuration functions and internal utilities:
parallel map, progress bars, timing, parameter handling and the string enums
accepted by the algorithms.
"""


from .timing import *
from .utils_conf import *
