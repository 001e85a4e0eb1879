from typing import List, Union

import numpy as np

"""DOE Library for generating full factorial grids of crisp inputs"""


def gridsamp(bounds: np.ndarray, q: Union[int, np.ndarray, List[int]]) -> np.ndarray:
    """
    GRIDSAMP  n-dimensional grid over given range

    Parameters
    ----------
    bounds : np.ndarray
        2*n matrix with lower and upper limits
    q : np.ndarray
        n-vector, q(j) is the number of points
        in the j'th direction.
        If q is a scalar, then all q(j) = q

    Returns
    -------
    S : np.ndarray
        m*n array with points, m = prod(q)
    """

    bounds = np.asarray(bounds, dtype=float)
    q = np.atleast_1d(np.array(q, dtype=int))

    [mr, n] = np.shape(bounds)
    dr = np.diff(bounds, axis=0)[0]  # difference across rows
    if mr != 2 or any([item < 0 for item in dr]):
        raise ValueError('bounds must be an array with two rows and bounds(1,:) <= bounds(2,:)')

    if q.ndim > 1 or any([item <= 0 for item in q]):
        raise ValueError('q must be a vector with positive elements')

    p = len(q)
    if p == 1:
        q = np.tile(q, (1, n))[0]
    elif p != n:
        raise ValueError('length of q must be either 1 or %d' % n)

    # Degenerate intervals collapse to a single level
    i = np.where(dr == 0)[0]
    if i.size > 0:
        q[i] = 1

    # Recursive computation
    if n > 1:
        a = gridsamp(bounds[:, 1::], q[1::])  # Recursive call
        [m, _] = np.shape(a)
        q0 = int(q[0])
        y = np.linspace(bounds[0, 0], bounds[1, 0], q0)
        s = np.concatenate((np.repeat(y, m).reshape((m * q0, 1)), np.tile(a, (q0, 1))), axis=1)
    else:
        s = np.linspace(bounds[0, 0], bounds[1, 0], int(q[-1]))
        s = np.transpose([s])

    return s


def scaling(x: np.ndarray, lb: np.ndarray, ub: np.ndarray, operation: int) -> np.ndarray:
    """
    Scaling by a range

    Parameters
    ----------
    x : np.ndarray
        2d array of size n * nsamples of datapoints
    lb : np.ndarray
        1d array of length n specifying lower range of features
    ub : np.ndarray
        1d array of length n = len(l) specifying upper range of features
    operation : int
        The flag type indicates whether to scale (1) or unscale (2)

    Returns
    -------
    x_out : np.ndarray
        2d array of size n * nsamples of unscaled datapoints
    """

    if operation == 1:
        # scale, degenerate ranges map to 0
        span = np.where(ub - lb == 0, 1.0, ub - lb)
        return (x - lb) / span
    elif operation == 2:
        # unscale
        return lb + x * (ub - lb)
    else:
        raise ValueError('operation must be 1 (scale) or 2 (unscale), got %s' % str(operation))


class Design:

    def __init__(self, lb: np.ndarray, ub: np.ndarray, nsamples: Union[int, List[int], np.ndarray],
                 doe_type: str = 'fullfact'):
        """
        Contains the full factorial design limits and samples

        Parameters
        ----------
        lb : np.ndarray
            1d array of length n specifying lower range of features
        ub : np.ndarray
            1d array of length n = len(lb) specifying upper range of features
        nsamples : Union[int,List[int],np.ndarray]
            number of levels of each factor, a scalar applies to all factors
        doe_type : str, optional
            only "fullfact" is available, by default 'fullfact'
        """

        if doe_type != 'fullfact':
            raise ValueError('unsupported design type "%s", only "fullfact" is available' % doe_type)
        if len(lb) != len(ub):
            raise ValueError('lb and ub must have the same length, got %i and %i' % (len(lb), len(ub)))

        self._lb = list(lb)
        self._ub = list(ub)
        self.type = doe_type

        n_levels = np.atleast_1d(np.array(nsamples, dtype=int))
        if len(n_levels) == 1:
            n_levels = np.tile(n_levels, len(self._lb))
        assert len(n_levels) == len(self._lb)

        n_levels[np.array(self._lb) == np.array(self._ub)] = 1
        self._nlevels = n_levels.tolist()
        self._nsamples = int(np.prod(self._nlevels))

        bounds = np.array([[0.0] * len(self._lb), [1.0] * len(self._ub)])
        bounds[1, n_levels == 1] = 0.0
        self._design = gridsamp(bounds, n_levels)

    @property
    def nsamples(self) -> int:
        return self._nsamples

    def unscale(self) -> np.ndarray:
        """
        Unscale the design by ub and lb

        Returns
        -------
        np.ndarray
            numpy array of size nsamples * n of design values unscaled by lb and ub
        """

        return scaling(self._design, np.array(self._lb), np.array(self._ub), 2)
