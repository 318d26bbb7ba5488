""" bit-exact software model of the CORDIC pipeline, plus the angle
    conversions a test harness needs.  the pipeline tests compare the
    simulated hardware against this, result for result.
"""
import math


def wrap(value, width):
    """ two's complement wrap, as an assignment to a signed(width) does
    """
    mask = (1 << width) - 1
    value &= mask
    if value >> (width - 1):
        value -= 1 << width
    return value


def degrees_to_angle(degrees, angle_width=32):
    """ d in [0, 360) -> round(d/360 * 2**angle_width), negative d via
        360 + d.  returned as the signed angle the hardware sees.
    """
    if degrees < 0:
        degrees = 360 + degrees
    turn = 1 << angle_width
    angle = int(round(degrees / 360 * turn)) % turn
    return wrap(angle, angle_width)


def angle_to_radians(angle, angle_width=32):
    return angle * 2 * math.pi / (1 << angle_width)


def to_float(value, data_width=18):
    """ decodes a data-format value (1.0 == 1<<(data_width-1))
    """
    return value / (1 << (data_width - 1))


def error_bound(pspec):
    """ largest |sin_out - sin| or |cos_out - cos| to expect, as a float.

        half an LSB of truncation per stage, three more for K_inv and
        the final rounding, plus the angle left over after the last
        correction step
    """
    lsb = (pspec.iterations // 2 + 3) / pspec.M
    return lsb + angle_to_radians(pspec.atan_table[-1], pspec.angle_width)


def quadrant_rotate(x, y, z, pspec):
    dw = pspec.data_width + 1
    aw = pspec.angle_width
    low = wrap(z, aw) & ((1 << (aw - 2)) - 1)
    quadrant = (wrap(z, aw) >> (aw - 2)) & 0b11
    if quadrant == 0b01:
        return wrap(-y, dw), wrap(x, dw), low
    if quadrant == 0b10:
        return wrap(y, dw), wrap(-x, dw), wrap(low | (0b11 << (aw - 2)), aw)
    return wrap(x, dw), wrap(y, dw), wrap(z, aw)


def run_rotation(x0, y0, z0, pspec, log=False):
    """ returns the final (x, y, z, overflow) of the pipeline for one
        sample
    """
    dw = pspec.data_width + 1
    aw = pspec.angle_width
    x, y, z = quadrant_rotate(x0, y0, z0, pspec)
    if log:
        print("quadrant: x: {}, y: {}, z: {}".format(x, y, z))

    for i, dz in enumerate(pspec.atan_table):
        dx = y >> i
        dy = x >> i

        if z < 0:
            x = wrap(x + dx, dw)
            y = wrap(y - dy, dw)
            z = wrap(z + dz, aw)
        else:
            x = wrap(x - dx, dw)
            y = wrap(y + dy, dw)
            z = wrap(z - dz, aw)
        if log:
            print("iteration {}".format(i))
            print("dx: {}, dy: {}, dz: {}".format(dx, dy, dz))
            print("x: {}, y: {}, z: {}".format(x, y, z))

    overflow = pspec.saturation in (x, y)
    return (x, y, z, overflow)


def run_cordic(z0, pspec, log=False):
    """ sin/cos the way the wrapper seeds it: x = K_inv, y = 0
    """
    x, y, z, _ = run_rotation(pspec.k_inv, 0, z0, pspec, log=log)
    return (y, x)
