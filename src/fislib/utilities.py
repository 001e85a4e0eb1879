""" Useful utility functions """

import os
from itertools import repeat
from typing import Any, Callable, Dict, List

import numpy as np
from multiprocess import Pool


def check_folder(folder='render/') -> bool:
    """
    check if folder exists, make if not present

    Parameters
    ----------
    folder : str, optional
        name of directory to check, by default 'render/'

    Returns
    -------
    bool
        True if the folder already existed
    """
    if not os.path.exists(folder):
        os.makedirs(folder)
        return False
    return True


def serialize(obj: Any) -> Any:
    """
    convert numpy scalars and arrays nested in dicts and lists
    to plain python objects that json can write

    Parameters
    ----------
    obj : Any
        object to convert

    Returns
    -------
    Any
        json compatible object
    """
    if isinstance(obj, dict):
        return {str(key): serialize(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [serialize(value) for value in obj]
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.generic):
        return obj.item()
    return obj


def starmap_with_kwargs(pool, fn, args_iter, kwargs_iter):
    """
    https://stackoverflow.com/questions/45718523/pass-kwargs-to-starmap-while-using-pool-in-python
    """
    args_for_starmap = zip(repeat(fn), args_iter, kwargs_iter)
    return pool.starmap(apply_args_and_kwargs, args_for_starmap)


def apply_args_and_kwargs(fn, args, kwargs):
    return fn(*args, **kwargs)


def parallel_sampling(func: Callable,
                      vargs_iterator: List[List[Any]],
                      fargs: List[Any] = None,
                      fkwargs: Dict[str, Any] = None,
                      num_threads: int = 1) -> List[Any]:
    """
    function used to run parallel computations

    Parameters
    ----------
    func : Callable
        function to parallelize
    vargs_iterator : List[List[Any]]
        iterator of arguments, one list per call
    fargs : List[Any], optional
        fixed arguments appended to each call, by default None
    fkwargs : Dict[str, Any], optional
        fixed keyword arguments of each call, by default None
    num_threads : int, optional
        number of parallel processes, by default 1

    Returns
    -------
    List[Any]
        results of each call in the order of vargs_iterator
    """
    fargs = list(fargs) if fargs is not None else []
    fkwargs = dict(fkwargs) if fkwargs is not None else {}

    args_iter = [[*vargs, *fargs] for vargs in vargs_iterator]
    kwargs_iter = [fkwargs.copy() for _ in args_iter]

    if num_threads > 1:
        with Pool(num_threads) as pool:
            results = starmap_with_kwargs(pool, func, args_iter, kwargs_iter)
    else:
        results = []
        for args, kwargs in zip(args_iter, kwargs_iter):
            result = func(*args, **kwargs)
            results.append(result)

    return results
