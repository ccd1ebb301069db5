from .util import *
from .abstract import *
from .synthetic import zedsave_synthetic
