"""Module for building parameter objects out of function arguments."""

from .paramenum import ALGO_KEY


def separate_kwargs_dict(initial_kwargs: dict, parent_class: any):
    """
    Take a set of kwargs parameters and split them in two separate dicts.

    The keys matching a field of ``parent_class`` (for example
    ``CONTRAST_CURVE_Params``) go to the first dictionnary, the remaining ones
    to the second. The ``algo_params`` key is kept with the remaining ones.

    Parameters
    ----------
    initial_kwargs: dict
        The complete set of kwargs to separate.
    parent_class: class
        The model containing the parameters to extract into the first
        dictionnary.

    Return
    ------
    class_params: dict
        Parameters for the parent class to initialize.
    more_params: dict
        Parameters left after extracting the class_params.
    """
    class_params = {}
    more_params = {}

    for key, value in initial_kwargs.items():
        if hasattr(parent_class, key) and key != ALGO_KEY:
            class_params[key] = value
        else:
            more_params[key] = value

    return class_params, more_params


def build_params(params_class: type, all_args: list, all_kwargs: dict):
    """
    Instantiate ``params_class`` from a function's ``*args`` and ``**kwargs``.

    A ready-made parameter object can be passed with the ``algo_params``
    keyword, in which case the other known keywords are ignored.

    Returns
    -------
    algo_params : params_class instance
    more_params : dict
        Keywords that are not fields of ``params_class``.
    """
    class_params, more_params = separate_kwargs_dict(all_kwargs, params_class)
    algo_params = more_params.pop(ALGO_KEY, None)
    if algo_params is None:
        algo_params = params_class(*all_args, **class_params)
    elif isinstance(algo_params, dict):
        algo_params = params_class(**algo_params)
    return algo_params, more_params
