""" constant tables for the pipelined CORDIC

    both the per-iteration arctangent corrections and the gain
    compensation constant are computed once, in bigfloat, with enough
    precision to round exactly at the requested width, and handed out
    as plain python ints.  the angle format maps a full turn onto
    2**angle_width, the data format scales 1.0 to 2**(data_width-1).
"""

from functools import lru_cache

import bigfloat as bf
from bigfloat import BigFloat


def working_precision(width):
    """ bigfloat context wide enough to round a width-bit constant
        without going through a double first
    """
    return bf.precision(max(113, width + 64))


def round_nearest(x):
    # exact: floor of a BigFloat is converted to int without a float
    return int(bf.floor(x + BigFloat(0.5)))


def gain(iterations):
    An = BigFloat(1)
    for i in range(iterations):
        An *= bf.sqrt(1 + BigFloat(2) ** BigFloat(-2*i))
    return An


@lru_cache(maxsize=None)
def atan_table(angle_width, iterations):
    """ returns a tuple: entry i is atan(2**-i) in the angle format
    """
    turn = 1 << angle_width
    angles = []
    with working_precision(angle_width):
        for i in range(iterations):
            x = bf.atan(BigFloat(2) ** BigFloat(-i))
            x = x/(2*bf.const_pi())
            x = x * turn
            angles.append(round_nearest(x))
    return tuple(angles)


@lru_cache(maxsize=None)
def cordic_gain(iterations):
    """ the vector length growth A_n after ``iterations`` rotations
        (tends to 1.646760258121...)
    """
    with bf.quadruple_precision:
        return float(gain(iterations))


@lru_cache(maxsize=None)
def gain_compensation(data_width, iterations):
    """ K_inv = 1/A_n in the data format.  seeding x with this makes
        the pipeline's intrinsic gain cancel out
    """
    M = 1 << (data_width - 1)
    with working_precision(data_width):
        return round_nearest(M / gain(iterations))


def table_is_decreasing(table):
    """ every entry non-zero and strictly smaller than the one before it
    """
    if not table or table[-1] <= 0:
        return False
    return all(a > b for a, b in zip(table, table[1:]))
