from nmigen import Signal, signed

from cordicpipe.cordic.atan_table import (atan_table, gain_compensation,
                                          table_is_decreasing)


class CordicInputData:
    """ what the core accepts: an un-rotated (x, y) at data_width bits,
        the target angle, and the "new sample present" flag
    """

    def __init__(self, pspec, name="in"):
        dw = pspec.data_width
        self.x = Signal(signed(dw), name="%s_x" % name)
        self.y = Signal(signed(dw), name="%s_y" % name)
        self.z = Signal(signed(pspec.angle_width), name="%s_z" % name)
        self.valid = Signal(name="%s_valid" % name)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z
        yield self.valid

    def eq(self, i):
        return [self.x.eq(i.x), self.y.eq(i.y), self.z.eq(i.z),
                self.valid.eq(i.valid)]

    def ports(self):
        return list(self)


class CordicData:
    """ one pipeline stage boundary: (x, y, z) plus its valid bit.

        x and y carry one guard bit over the input width, z is the
        residual angle still to be rotated through.
    """

    def __init__(self, pspec, name="stage"):
        dw = pspec.data_width + 1
        self.x = Signal(signed(dw), name="%s_x" % name)
        self.y = Signal(signed(dw), name="%s_y" % name)
        self.z = Signal(signed(pspec.angle_width), name="%s_z" % name)
        self.valid = Signal(name="%s_valid" % name)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z
        yield self.valid

    def eq(self, i):
        ret = [self.z.eq(i.z), self.x.eq(i.x), self.y.eq(i.y),
               self.valid.eq(i.valid)]
        return ret

    def ports(self):
        return list(self)


class CordicPipeSpec:
    """ configuration handed to every stage of the CORDIC pipeline.

    :attribute data_width: input x/y width; outputs are one bit wider
    :attribute angle_width: angle width, a full turn is 2**angle_width
    :attribute iterations: number of rotation stages (== pipeline_stages)
    :attribute buffer_depth: 0 for the unbuffered core (ready follows
                             enable only), otherwise the depth of the
                             output buffer placed behind the last stage
    :attribute count_width: width of the accepted-input counter
    :attribute throughput_width: width of the completed-output counter

    widths are checked here so that a bad combination fails when the
    pipeline is built, never while it is running.
    """

    def __init__(self, data_width=18, angle_width=32, iterations=18,
                 buffer_depth=0, count_width=16, throughput_width=32):
        if data_width < 4:
            raise ValueError("data_width %d too small for a fixed-point "
                             "sin/cos" % data_width)
        if angle_width < 4:
            raise ValueError("angle_width %d cannot hold a quadrant and "
                             "a residual angle" % angle_width)
        if iterations < 1:
            raise ValueError("at least one rotation stage is needed")
        if buffer_depth < 0:
            raise ValueError("buffer_depth must not be negative")
        for name, width in (('count_width', count_width),
                            ('throughput_width', throughput_width)):
            if width < 1:
                raise ValueError("%s must be at least 1, got %d" %
                                 (name, width))

        self.data_width = data_width
        self.angle_width = angle_width
        self.iterations = iterations
        self.buffer_depth = buffer_depth
        self.count_width = count_width
        self.throughput_width = throughput_width

        # fixed-point scaling: 1.0 in the data format, full turn in angles
        self.M = 1 << (data_width - 1)
        self.turn = 1 << angle_width

        self.atan_table = atan_table(angle_width, iterations)
        if not table_is_decreasing(self.atan_table):
            raise ValueError("%d iterations exceed the resolution of a "
                             "%d-bit angle (arctangent table %r)" %
                             (iterations, angle_width, self.atan_table))

        self.k_inv = gain_compensation(data_width, iterations)
        assert 0 < self.k_inv < self.M

        # most negative value at the output width: the overflow pattern
        self.saturation = -(1 << data_width)

    @property
    def pipeline_stages(self):
        return self.iterations
