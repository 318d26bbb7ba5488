from nmigen import Module, Signal, Elaboratable, Cat, ResetInserter, signed
from nmigen.lib.fifo import SyncFIFO
from nmigen.cli import rtlil

from cordicpipe.cordic.pipe_data import (CordicData, CordicInputData,
                                         CordicPipeSpec)
from cordicpipe.cordic.sin_cos_pipe_stage import (
    CordicStage, CordicQuadrantStage)


class CordicBasePipe(Elaboratable):
    """ fully pipelined CORDIC rotation engine

        one quadrant stage followed by pspec.iterations rotation stages,
        each latched once per clock.  a valid bit travels with every
        stage record and is the only control state: there is no FSM
        and no stall.  a sample accepted on one clock edge is at the
        outputs pspec.pipeline_stages edges later.

        acceptance is gated by ``enable`` alone: ``data_ready_in`` only
        decides whether a completed result counts as delivered.  a
        result that is not taken on its one valid cycle is lost, unless
        pspec.buffer_depth asks for an output buffer, in which case
        ``data_ready_out`` is also throttled by the free buffer space.
    """
    def __init__(self, pspec):
        self.pspec = pspec
        dw = pspec.data_width
        aw = pspec.angle_width

        # inputs
        self.x_in = Signal(signed(dw), reset_less=True)
        self.y_in = Signal(signed(dw), reset_less=True)
        self.z_in = Signal(signed(aw), reset_less=True)
        self.data_valid_in = Signal(reset_less=True)
        self.data_ready_in = Signal(reset_less=True)   # downstream ready
        self.enable = Signal(reset_less=True)
        self.rst_n = Signal(reset=1)                   # synchronous

        # outputs
        self.x_out = Signal(signed(dw+1))
        self.y_out = Signal(signed(dw+1))
        self.z_out = Signal(signed(aw))
        self.data_valid_out = Signal()
        self.data_ready_out = Signal()
        self.overflow = Signal()
        self.iterations_count = Signal(pspec.count_width)
        self.throughput_counter = Signal(pspec.throughput_width)

        # new sample present this cycle
        self.accept = Signal()

        self.quadrant = CordicQuadrantStage(pspec)
        self.cordicstages = []
        for i in range(pspec.iterations):
            self.cordicstages.append(CordicStage(pspec, i))

        # stage boundary records 0 .. pipeline_stages, and their valid bits
        self.records = []
        for i in range(pspec.pipeline_stages + 1):
            self.records.append(CordicData(pspec, name="r%d" % i))
        self.valid = [r.valid for r in self.records]

        self.fifo = None
        if pspec.buffer_depth:
            w = 2*(dw+1) + aw + 1
            self.fifo = SyncFIFO(width=w, depth=pspec.buffer_depth)

    def elaborate(self, platform):
        m = Module()
        comb = m.d.comb
        sync = m.d.sync

        final = self.records[-1]

        # input handshake
        if self.fifo is None:
            comb += self.data_ready_out.eq(self.enable & self.rst_n)
        else:
            in_flight = Signal(range(len(self.records)+1), reset_less=True)
            comb += in_flight.eq(sum(self.valid))
            comb += self.data_ready_out.eq(self.enable & self.rst_n &
                        (in_flight + self.fifo.level < self.pspec.buffer_depth))
        comb += self.accept.eq(self.data_valid_in & self.data_ready_out)

        inp = CordicInputData(self.pspec, name="core_in")
        comb += [inp.x.eq(self.x_in),
                 inp.y.eq(self.y_in),
                 inp.z.eq(self.z_in),
                 inp.valid.eq(self.accept)]

        self.quadrant.setup(m, inp)
        for i, stage in enumerate(self.cordicstages):
            stage.setup(m, self.records[i])

        with m.If(~self.rst_n):
            for rec in self.records:
                sync += [s.eq(0) for s in rec]
            sync += self.iterations_count.eq(0)
            sync += self.throughput_counter.eq(0)
        with m.Else():
            sync += self.records[0].eq(self.quadrant.process(inp))
            for i, stage in enumerate(self.cordicstages):
                sync += self.records[i+1].eq(stage.process(self.records[i]))

            # free-running, wrap at their width
            with m.If(self.accept):
                sync += self.iterations_count.eq(self.iterations_count + 1)
            with m.If(self.data_valid_out & self.data_ready_in):
                sync += self.throughput_counter.eq(
                                    self.throughput_counter + 1)

        # saturation pattern: sign bit set, all magnitude bits clear
        sat = self.pspec.saturation
        ovf = Signal(reset_less=True)
        comb += ovf.eq(final.valid & ((final.x == sat) | (final.y == sat)))

        if self.fifo is None:
            comb += [self.x_out.eq(final.x),
                     self.y_out.eq(final.y),
                     self.z_out.eq(final.z),
                     self.data_valid_out.eq(final.valid),
                     self.overflow.eq(ovf)]
        else:
            self.elaborate_buffer(m, final, ovf)

        return m

    def elaborate_buffer(self, m, final, ovf):
        """ output buffer behind the last stage.  written whenever the
            last record is valid: the credit check on data_ready_out
            guarantees there is room.
        """
        comb = m.d.comb
        fifo = self.fifo
        dw = self.pspec.data_width + 1
        aw = self.pspec.angle_width

        fifo_rst = Signal(reset_less=True)
        comb += fifo_rst.eq(~self.rst_n)
        m.submodules.outbuf = ResetInserter(fifo_rst)(fifo)

        comb += fifo.w_data.eq(Cat(final.x, final.y, final.z, ovf))
        comb += fifo.w_en.eq(final.valid)
        comb += fifo.r_en.eq(self.data_ready_in)

        data = fifo.r_data
        comb += [self.x_out.eq(data[0:dw]),
                 self.y_out.eq(data[dw:2*dw]),
                 self.z_out.eq(data[2*dw:2*dw+aw]),
                 self.data_valid_out.eq(fifo.r_rdy),
                 self.overflow.eq(fifo.r_rdy & data[-1])]

    def ports(self):
        return [self.x_in, self.y_in, self.z_in,
                self.data_valid_in, self.data_ready_in,
                self.enable, self.rst_n,
                self.x_out, self.y_out, self.z_out,
                self.data_valid_out, self.data_ready_out,
                self.overflow, self.iterations_count,
                self.throughput_counter]


if __name__ == '__main__':
    dut = CordicBasePipe(CordicPipeSpec())
    vl = rtlil.convert(dut, ports=dut.ports())
    with open("cordic_pipe.il", "w") as f:
        f.write(vl)
