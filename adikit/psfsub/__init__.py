"""
Subpackage ``psfsub`` contains the model PSF subtraction algorithms for ADI
sequences:

- full-frame and annular PCA, with full or randomized truncated SVD,
- (smart) median subtraction,
- the annular reducer applying any algorithm annulus-wise.
"""

from .adi_algo import *
from .annular import *
from .medsub import *
from .pca_fullfr import *
from .svd import *
