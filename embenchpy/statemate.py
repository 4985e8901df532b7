"""Driver unit and scheduler of the window lift controller benchmark."""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from .harness import Benchmark
from .statemate_charts import (
    BITLIST_SIZE,
    Bit,
    WindowLiftState,
    block_erkennung_step,
    einklemmschutz_step,
    kindersicherung_step,
    tuermodul_step,
)

_ULONG_MASK = (1 << 64) - 1

_CHARTS: Tuple[Callable[[WindowLiftState], None], ...] = (
    kindersicherung_step,
    tuermodul_step,
    einklemmschutz_step,
    block_erkennung_step,
)

# (active flag, its "old" flag, its "copy" flag) for every concurrent chart.
_ACTIVITY: Tuple[Tuple[Bit, Bit, Bit], ...] = (
    (Bit.ACTIVE_KINDERSICHERUNG, Bit.ACTIVE_KINDERSICHERUNG_OLD,
     Bit.ACTIVE_KINDERSICHERUNG_COPY),
    (Bit.ACTIVE_TUERMODUL, Bit.ACTIVE_TUERMODUL_OLD,
     Bit.ACTIVE_TUERMODUL_COPY),
    (Bit.ACTIVE_EINKLEMMSCHUTZ, Bit.ACTIVE_EINKLEMMSCHUTZ_OLD,
     Bit.ACTIVE_EINKLEMMSCHUTZ_COPY),
    (Bit.ACTIVE_BLOCK_ERKENNUNG, Bit.ACTIVE_BLOCK_ERKENNUNG_OLD,
     Bit.ACTIVE_BLOCK_ERKENNUNG_COPY),
)

_TIMER_DELAY = 0.5

EXPECTED_BITS = [1 if i == Bit.ENTERED_WIEDERHOLSPERRE_COPY else 0
                 for i in range(BITLIST_SIZE)]
"""The flag list left behind by one run of the controller."""

EXPECTED_FIELDS: Dict[str, int] = {
    "t_einschaltstrom": 0,
    "t_wiederholsperre_or_bereit": 0,
    "t_wiederholsperre": 0,
    "nicht_initialisiert_state": 0,
    "zentral_state": 0,
    "mec_state": 0,
    "kindersicherung_state": 3,
    "b_state": 2,
    "a_state": 1,
    "wiederholsperre_state": 1,
    "initialisiert_state": 0,
    "tipp_schliessen_state": 0,
    "manuell_schliessen_state": 0,
    "oeffnen_state": 0,
    "schliessen_state": 0,
    "steuerung_dummy_state": 2,
    "einklemmschutz_state": 1,
    "bewegung_state": 0,
    "block_erkennung_state": 1,
}
"""Timers and chart states left behind by one run of the controller."""


def _elapsed(state: WindowLiftState, start: int) -> int:
    return (state.time - start) & _ULONG_MASK


def _expired(state: WindowLiftState, start: int) -> bool:
    return start != 0 and _elapsed(state, start) >= _TIMER_DELAY


def interface(state: WindowLiftState) -> None:
    """Update the timers from the event flags and expire the running ones."""
    s = state
    bits = s.bits
    if bits[Bit.ENTERED_WIEDERHOLSPERRE]:
        s.t_wiederholsperre = s.time
    if bits[Bit.ENTERED_WIEDERHOLSPERRE] or bits[Bit.EXITED_BEREIT]:
        s.t_wiederholsperre_or_bereit = s.time
    if _expired(s, s.sc_2375_2):
        s.door_mfha_copy = 0
        s.sc_2375_2 = 0
    if _expired(s, s.sc_2352_1):
        s.door_mfhz_copy = 0
        s.sc_2352_1 = 0
    if _expired(s, s.sc_2329_1):
        s.door_mfhz_copy = 0
        s.sc_2329_1 = 0
    if _expired(s, s.sc_1781_10):
        s.sc_1781_10 = 0
    if _expired(s, s.sc_1739_10):
        s.sc_1739_10 = 0
    if (bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN]
            or s.block_ctrl_n != s.block_ctrl_n_old):
        s.t_einschaltstrom = s.time


def init(state: WindowLiftState) -> None:
    """Clear the timers and put every chart back into its unentered state."""
    s = state
    s.t_einschaltstrom = 0
    s.t_wiederholsperre_or_bereit = 0
    s.t_wiederholsperre = 0
    s.nicht_initialisiert_state = 0
    s.zentral_state = 0
    s.mec_state = 0
    s.kindersicherung_state = 0
    s.b_state = 0
    s.a_state = 0
    s.wiederholsperre_state = 0
    s.initialisiert_state = 0
    s.tipp_schliessen_state = 0
    s.manuell_schliessen_state = 0
    s.oeffnen_state = 0
    s.schliessen_state = 0
    s.steuerung_dummy_state = 0
    s.einklemmschutz_state = 0
    s.bewegung_state = 0
    s.block_erkennung_state = 0


def _steuerung_dummy(s: WindowLiftState) -> None:
    """The driver unit's motor stand-in: map motor requests to a direction."""
    current = s.steuerung_dummy_state
    if current == 1:  # SCHLIESSEN
        if not s.du_mfhz and s.du_mfhz_old:
            s.stable = False
            s.du_mfh = 0
            s.steuerung_dummy_state = 2
    elif current == 2:  # BEREIT
        if s.du_mfhz and not s.du_mfhz_old:
            s.stable = False
            s.du_mfh = -100
            s.steuerung_dummy_state = 1
        elif s.du_mfha and not s.du_mfha_old:
            s.stable = False
            s.du_mfh = 100
            s.steuerung_dummy_state = 3
    elif current == 3:  # OEFFNEN
        if not s.du_mfha and s.du_mfha_old:
            s.stable = False
            s.du_mfh = 0
            s.steuerung_dummy_state = 2
    else:
        s.stable = False
        s.du_mfh = 0
        s.steuerung_dummy_state = 2


def _activate_charts(s: WindowLiftState) -> None:
    bits = s.bits
    if not bits[Bit.ACTIVE_KINDERSICHERUNG]:
        s.kindersicherung_state = 3
    bits[Bit.ACTIVE_KINDERSICHERUNG_COPY] = 0
    if not bits[Bit.ACTIVE_EINKLEMMSCHUTZ]:
        s.einklemmschutz_state = 1
    bits[Bit.ACTIVE_EINKLEMMSCHUTZ_COPY] = 0
    if not bits[Bit.ACTIVE_BLOCK_ERKENNUNG]:
        bits[Bit.ENTERED_EINSCHALTSTROM_MESSEN] = 0
        s.block_erkennung_state = 1
    bits[Bit.ACTIVE_BLOCK_ERKENNUNG_COPY] = 0
    if not bits[Bit.ACTIVE_TUERMODUL]:
        bits[Bit.ENTERED_WIEDERHOLSPERRE] = 0
        bits[Bit.EXITED_BEREIT] = 0
        s.b_state = 2
        s.ctrl_n = 0
        s.a_state = 1
        bits[Bit.ENTERED_WIEDERHOLSPERRE_COPY] = 1
        s.wiederholsperre_state = 1
    bits[Bit.ACTIVE_TUERMODUL_COPY] = 0
    for _, _, copy in _ACTIVITY:
        bits[copy] = 1


def _static_reactions(s: WindowLiftState) -> None:
    if s.du_s_fh_tmbfzucan != s.du_s_fh_tmbfzucan_old and not s.du_door_id:
        s.du_s_fh_ftzu = s.du_s_fh_tmbfzucan
    if s.du_s_fh_tmbfzudisc != s.du_s_fh_tmbfzudisc_old and s.du_door_id:
        s.du_s_fh_tmbfzucan = s.du_s_fh_tmbfzudisc
    if s.du_s_fh_tmbfaufcan != s.du_s_fh_tmbfaufcan_old and not s.du_door_id:
        s.du_s_fh_ftauf = s.du_s_fh_tmbfaufcan
    if s.du_s_fh_tmbfaufdisc != s.du_s_fh_tmbfaufdisc_old and s.du_door_id:
        s.du_s_fh_tmbfaufcan = s.du_s_fh_tmbfaufdisc


def _to_door_module(s: WindowLiftState) -> None:
    s.door_sfha_mec = s.du_s_fh_aufdisc
    s.door_sfha_zentral = s.du_s_fh_ftauf
    s.door_sfhz_mec = s.du_s_fh_zudisc
    s.door_sfhz_zentral = s.du_s_fh_ftzu


def _to_driver_unit(s: WindowLiftState) -> None:
    s.du_mfha = s.door_mfha
    s.du_mfhz = s.door_mfhz
    s.du_i_ein = s.door_i_ein
    s.du_eks_leiste_aktiv = s.door_eks_leiste_aktiv
    s.du_position = s.door_position
    s.du_ft = s.door_ft
    s.du_s_fh_aufdisc = s.door_sfha_mec
    s.du_s_fh_ftauf = s.door_sfha_zentral
    s.du_s_fh_zudisc = s.door_sfhz_mec
    s.du_s_fh_ftzu = s.door_sfhz_zentral
    s.du_kl_50 = s.door_kl_50
    s.du_block = s.door_block


def _commit(s: WindowLiftState) -> None:
    """Make the next values current and remember the previous ones."""
    bits = s.bits
    for active, _, copy in _ACTIVITY:
        bits[copy] = bits[active]
    s.ctrl_n_old = s.ctrl_n
    s.door_i_ein_old = s.door_i_ein
    s.du_mfh = s.du_mfh_copy
    s.du_i_ein_old = s.du_i_ein
    s.block_ctrl_n_old = s.block_ctrl_n
    s.door_sfhz_zentral_old = s.door_sfhz_zentral
    s.door_sfhz_mec_old = s.door_sfhz_mec
    s.door_sfha_zentral_old = s.door_sfha_zentral
    s.door_sfha_mec_old = s.door_sfha_mec
    s.door_block = s.door_block_copy
    s.door_block_old = s.door_block
    s.door_sfhz = s.door_sfhz_copy
    s.door_sfhz_old = s.door_sfhz
    s.door_sfha = s.door_sfha_copy
    s.door_sfha_old = s.door_sfha
    s.door_mfhz = s.door_mfhz_copy
    s.door_mfhz_old = s.door_mfhz
    s.door_mfha = s.door_mfha_copy
    s.door_mfha_old = s.door_mfha
    s.door_eks_leiste_aktiv_old = s.door_eks_leiste_aktiv
    s.du_eks_leiste_aktiv_old = s.du_eks_leiste_aktiv
    s.du_s_fh_tmbfaufcan_old = s.du_s_fh_tmbfaufcan
    s.du_s_fh_tmbfzucan_old = s.du_s_fh_tmbfzucan
    s.du_s_fh_tmbfzudisc_old = s.du_s_fh_tmbfzudisc
    s.du_s_fh_tmbfaufdisc_old = s.du_s_fh_tmbfaufdisc
    s.du_block = s.du_block_copy
    s.du_block_old = s.du_block
    s.du_mfhz = s.du_mfhz_copy
    s.du_mfhz_old = s.du_mfhz
    s.du_mfha = s.du_mfha_copy
    s.du_mfha_old = s.du_mfha


def fh_du(state: WindowLiftState) -> None:
    """Run the driver unit and its charts until no transition is taken."""
    s = state
    s.time = 1
    s.stable = False
    s.step = 0
    while not s.stable:
        s.stable = True
        s.step += 1
        _steuerung_dummy(s)
        _activate_charts(s)
        _static_reactions(s)
        for active, old, _ in _ACTIVITY:
            s.bits[active] = s.bits[old]
        for chart in _CHARTS:
            _to_door_module(s)
            chart(s)
            _to_driver_unit(s)
        _commit(s)


class Statemate(Benchmark):
    """Repeatedly reset and run the window lift controller."""

    scale_factor = 1964

    def __init__(self, cpu_mhz: int = 1) -> None:
        super().__init__(cpu_mhz)
        self.state = WindowLiftState()

    def benchmark_body(self, rpt: int) -> int:
        for _ in range(rpt):
            self.state.bits = [0] * BITLIST_SIZE
            init(self.state)
            interface(self.state)
            fh_du(self.state)
        return 0

    def verify(self, result: int) -> bool:
        if self.state.bits != EXPECTED_BITS:
            return False
        return all(getattr(self.state, name) == value
                   for name, value in EXPECTED_FIELDS.items())