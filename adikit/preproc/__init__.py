"""
Subpackage ``preproc`` has the low-level image operations used by the
reduction algorithms:

- frame and cube de-rotation,
- annulus geometry and ADI frame selection,
- parallactic angle checks,
- cube collapsing,
- sub-pixel frame shifts.
"""

from .derotation import *
from .parangles import *
from .recentering import *
from .subsampling import *
