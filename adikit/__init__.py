from . import config
from . import var
from . import preproc
from . import psfsub
from . import fm
from . import metrics


def __getattr__(name: str):
    if name == '__version__':
        from importlib.metadata import version
        return version('adikit')
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
