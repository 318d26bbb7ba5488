from nmigen import Module, Signal, Cat, Const
from nmutil.pipemodbase import PipeModBase
from cordicpipe.cordic.pipe_data import CordicData, CordicInputData


class CordicQuadrantStage(PipeModBase):
    """ pre-rotates the input by 0 or +/-90 degrees

        the top two bits of the angle select the quadrant.  00 and 11
        are already within reach of the iterations, 01 and 10 get a
        90 degree rotation of (x, y) with the matching correction of z.
    """
    def __init__(self, pspec):
        super().__init__(pspec, "cordicquadrant")

    def ispec(self):
        return CordicInputData(self.pspec)

    def ospec(self):
        return CordicData(self.pspec, name="quadrant")

    def elaborate(self, platform):
        m = Module()
        comb = m.d.comb

        quadrant = Signal(2, reset_less=True)
        comb += quadrant.eq(self.i.z[-2:])

        # no new sample: record stays zeroed and invalid
        with m.If(self.i.valid):
            with m.Switch(quadrant):
                with m.Case("01"):
                    comb += self.o.x.eq(-self.i.y)
                    comb += self.o.y.eq(self.i.x)
                    comb += self.o.z.eq(Cat(self.i.z[:-2], Const(0b00, 2)))
                with m.Case("10"):
                    comb += self.o.x.eq(self.i.y)
                    comb += self.o.y.eq(-self.i.x)
                    comb += self.o.z.eq(Cat(self.i.z[:-2], Const(0b11, 2)))
                with m.Default():
                    comb += self.o.x.eq(self.i.x)
                    comb += self.o.y.eq(self.i.y)
                    comb += self.o.z.eq(self.i.z)
        comb += self.o.valid.eq(self.i.valid)

        return m


class CordicStage(PipeModBase):
    def __init__(self, pspec, stagenum):
        self.stagenum = stagenum
        super().__init__(pspec, "cordicstage%d" % stagenum)

    def ispec(self):
        return CordicData(self.pspec, name="s%d_in" % self.stagenum)

    def ospec(self):
        return CordicData(self.pspec, name="s%d_out" % self.stagenum)

    def elaborate(self, platform):
        m = Module()
        comb = m.d.comb

        dx = Signal(self.i.x.shape())
        dy = Signal(self.i.y.shape())
        dz = Signal(self.i.z.shape())
        angle = self.pspec.atan_table[self.stagenum]

        comb += dx.eq(self.i.y >> self.stagenum)
        comb += dy.eq(self.i.x >> self.stagenum)
        comb += dz.eq(angle)

        with m.If(~self.i.valid):
            # bubble: keep latency fixed, leave the data alone
            comb += self.o.x.eq(self.i.x)
            comb += self.o.y.eq(self.i.y)
            comb += self.o.z.eq(self.i.z)
        with m.Elif(self.i.z[-1]):
            comb += self.o.x.eq(self.i.x + dx)
            comb += self.o.y.eq(self.i.y - dy)
            comb += self.o.z.eq(self.i.z + dz)
        with m.Else():
            comb += self.o.x.eq(self.i.x - dx)
            comb += self.o.y.eq(self.i.y + dy)
            comb += self.o.z.eq(self.i.z - dz)
        comb += self.o.valid.eq(self.i.valid)

        return m
