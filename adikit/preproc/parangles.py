#! /usr/bin/env python

"""
Module with functions for checking parallactic angle vectors.
"""

__all__ = ['check_pa_vector']

import numpy as np


def check_pa_vector(angle_list, unit='deg'):
    """ Checks if the angle list has the right format for the frame selection
    of the ADI algorithms. The right format complies to 3 criteria:

    1. angles are expressed in degree
    2. the angles are positive
    3. there is no jump of more than 180 deg between consecutive values (e.g.
       no jump like [350deg,355deg,0deg,5deg] => replaced by
       [350deg,355deg,360deg,365deg])

    Parameters
    ----------
    angle_list: 1D-numpy ndarray
        Vector containing the derotation angles
    unit: string, {'deg','rad'}, optional
        The unit type of the input angle list

    Returns
    -------
    angle_list: 1-D numpy ndarray
        Vector containing the derotation angles (after correction to comply with
        the 3 criteria, if needed)
    """
    if unit not in ('rad', 'deg'):
        raise ValueError("The input unit should either be 'deg' or 'rad'")

    angle_list = np.array(angle_list, dtype=float)
    if unit == 'deg':
        angle_list = np.deg2rad(angle_list)

    angle_list = np.rad2deg(np.unwrap(angle_list))
    if angle_list.min() < 0:
        angle_list += 360 * np.ceil(-angle_list.min() / 360)

    return angle_list
