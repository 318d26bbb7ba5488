from nmigen import Module, Elaboratable, Signal, signed
from nmigen.cli import rtlil

from cordicpipe.cordic.pipe_data import CordicPipeSpec
from cordicpipe.cordic.sin_cos_pipeline import CordicBasePipe


class CordicSinCos(Elaboratable):
    """ sin/cos on top of the rotation pipeline

        x is seeded with K_inv every cycle and y with zero, so the
        rotated vector comes out already gain-compensated:
        cos_out = x, sin_out = y, both in the 1.ffff data format with
        one guard bit.

        only the angle handshake and the result handshake are part of
        the interface.  the core (residual angle, overflow, counters)
        is left reachable as ``self.core`` for diagnostics.
    """
    def __init__(self, pspec=None):
        if pspec is None:
            pspec = CordicPipeSpec()
        self.pspec = pspec
        dw = pspec.data_width + 1

        # angle input: a full turn is 1<<angle_width
        self.angle = Signal(signed(pspec.angle_width), reset_less=True)
        self.angle_valid = Signal(reset_less=True)
        self.angle_ready = Signal()

        # sin/cos output in 1.ffffff format
        self.cos_out = Signal(signed(dw))
        self.sin_out = Signal(signed(dw))
        self.result_valid = Signal()
        self.result_ready = Signal(reset_less=True)

        self.rst_n = Signal(reset=1)

        self.core = CordicBasePipe(pspec)

    def elaborate(self, platform):
        m = Module()
        comb = m.d.comb

        m.submodules.core = core = self.core

        comb += [core.x_in.eq(self.pspec.k_inv),
                 core.y_in.eq(0),
                 core.z_in.eq(self.angle),
                 core.data_valid_in.eq(self.angle_valid),
                 core.enable.eq(1),
                 core.rst_n.eq(self.rst_n),
                 core.data_ready_in.eq(self.result_ready)]

        comb += [self.angle_ready.eq(core.data_ready_out),
                 self.cos_out.eq(core.x_out),
                 self.sin_out.eq(core.y_out),
                 self.result_valid.eq(core.data_valid_out)]

        return m

    def ports(self):
        return [self.angle, self.angle_valid, self.angle_ready,
                self.cos_out, self.sin_out,
                self.result_valid, self.result_ready, self.rst_n]


if __name__ == '__main__':
    dut = CordicSinCos(CordicPipeSpec())
    vl = rtlil.convert(dut, ports=dut.ports())
    with open("cordic_sin_cos.il", "w") as f:
        f.write(vl)
